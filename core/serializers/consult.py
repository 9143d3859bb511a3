from rest_framework import serializers


class DoctorSearchQuerySerializer(serializers.Serializer):
    query = serializers.CharField(max_length=64, required=False, allow_blank=True)


class ConsultRespondSerializer(serializers.Serializer):
    # Checked against accept/reject by the service before anything changes
    action = serializers.CharField(max_length=16, required=False, allow_blank=True)


class MyPatientsQuerySerializer(serializers.Serializer):
    search = serializers.CharField(max_length=64, required=False, allow_blank=True)
