import html

import bleach
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers


def _plain(v: str) -> str:
    # drop tags, keep the text as typed (no entity escaping)
    return html.unescape(bleach.clean((v or '').strip(), tags=set(), strip=True))


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField()

    def validate_email(self, v):
        return (v or '').strip().lower()

    def validate_password(self, v):
        if not v:
            raise serializers.ValidationError('Password is required.')
        return v


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    role = serializers.ChoiceField(choices=['patient', 'doctor'], required=False, default='patient')
    specialty = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate_name(self, v):
        v = _plain(v)
        if not v:
            raise serializers.ValidationError('Name is required.')
        return v

    def validate_email(self, v):
        return (v or '').strip().lower()

    def validate_specialty(self, v):
        return _plain(v)

    def validate(self, attrs):
        specialty = attrs.get('specialty') or ''
        if attrs.get('role') == 'doctor':
            if not specialty:
                raise serializers.ValidationError({'specialty': 'Specialty is required for doctors.'})
        else:
            attrs['specialty'] = ''
        try:
            validate_password(attrs['password'])
        except DjangoValidationError as e:
            raise serializers.ValidationError({'password': e.messages})
        return attrs
