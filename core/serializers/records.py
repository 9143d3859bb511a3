from rest_framework import serializers


class _VerbatimField(serializers.CharField):
    """Text stored exactly as submitted; blank or whitespace-only input is rejected."""

    def __init__(self, **kwargs):
        kwargs.setdefault('trim_whitespace', False)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        v = super().to_internal_value(data)
        if not v.strip():
            self.fail('blank')
        return v


class VitalCreateSerializer(serializers.Serializer):
    bp = _VerbatimField(max_length=32)
    sugar = _VerbatimField(max_length=32)
    heartRate = _VerbatimField(max_length=32)


class NoteCreateSerializer(serializers.Serializer):
    content = _VerbatimField(max_length=10000)


class PrescriptionCreateSerializer(serializers.Serializer):
    # newline-delimited, one medication per line
    medications = _VerbatimField(max_length=10000)
    instructions = _VerbatimField(max_length=10000)
