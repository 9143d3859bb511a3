import datetime
import os
import subprocess
import sys
from pathlib import Path

import jwt
import pytest
from django.conf import settings
from django.urls import reverse
from rest_framework.test import APIClient, APIRequestFactory
from rest_framework.throttling import ScopedRateThrottle

from core.authentication import BearerTokenAuthentication, issue_token

PASSWORD = 'P@ssw0rd1'

pytestmark = pytest.mark.django_db


def test_missing_token_is_403(patient):
    r = APIClient().get(reverse('records-mine'))
    assert r.status_code == 403
    assert r.data['ok'] is False
    assert r.data['code'] == 'unauthenticated'


def test_malformed_header_is_403(patient):
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION='Bearer a b')
    r = c.get(reverse('records-mine'))
    assert r.status_code == 403


def test_garbage_token_is_401(patient):
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION='Bearer not-a-jwt')
    r = c.get(reverse('records-mine'))
    assert r.status_code == 401
    assert r.data['code'] == 'invalid_credential'


def test_token_signed_with_other_secret_is_401(patient):
    forged = jwt.encode({'userId': patient.id, 'role': 'doctor', 'token_type': 'access',
                         'exp': datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(hours=1),
                         'jti': 'x'}, 'not-the-secret', algorithm='HS256')
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f'Bearer {forged}')
    r = c.get(reverse('doctor-my-patients'))
    assert r.status_code == 401


def test_expired_token_is_401(patient):
    expired = jwt.encode({'userId': patient.id, 'role': 'patient', 'token_type': 'access',
                          'exp': datetime.datetime.now(datetime.timezone.utc) - datetime.timedelta(minutes=5),
                          'jti': 'x'}, settings.SIMPLE_JWT['SIGNING_KEY'], algorithm='HS256')
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f'Bearer {expired}')
    r = c.get(reverse('records-mine'))
    assert r.status_code == 401


def test_token_without_role_claim_is_401(patient):
    token = jwt.encode({'userId': patient.id, 'token_type': 'access',
                        'exp': datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(hours=1),
                        'jti': 'x'}, settings.SIMPLE_JWT['SIGNING_KEY'], algorithm='HS256')
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
    r = c.get(reverse('records-mine'))
    assert r.status_code == 401


def test_bare_and_bearer_tokens_both_accepted(patient):
    token = issue_token(patient)
    for header in (token, f'Bearer {token}'):
        c = APIClient()
        c.credentials(HTTP_AUTHORIZATION=header)
        r = c.get(reverse('records-mine'))
        assert r.status_code == 200, header


def test_no_role_bypass_in_login(patient):
    client = APIClient()
    r = client.post(reverse('auth-login'),
                    {'email': patient.email, 'password': PASSWORD, 'role': 'doctor'}, format='json')
    assert r.status_code == 200
    assert r.data['role'] == 'patient'
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['token']}")
    assert client.get(reverse('doctor-my-patients')).status_code == 403


def test_role_gates(patient, doctor, client_for):
    assert client_for(patient).get(reverse('consult-pending')).status_code == 403
    assert client_for(doctor).get(reverse('consult-my-doctors')).status_code == 403
    r = client_for(doctor).post(reverse('records-add'), {'bp': '1', 'sugar': '1', 'heartRate': '1'}, format='json')
    assert r.status_code == 403
    assert r.data['code'] == 'forbidden'


def test_login_is_throttled(patient, monkeypatch):
    monkeypatch.setattr(ScopedRateThrottle, 'THROTTLE_RATES', {'login': '2/min'})
    client = APIClient()
    codes = [client.post(reverse('auth-login'), {'email': patient.email, 'password': 'wrong-one'},
                         format='json').status_code for _ in range(3)]
    assert codes[:2] == [401, 401]
    assert codes[2] == 429


def _signed(claims):
    payload = {'token_type': 'access', 'jti': 'x',
               'exp': datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(hours=1), **claims}
    return jwt.encode(payload, settings.SIMPLE_JWT['SIGNING_KEY'], algorithm='HS256')


@pytest.mark.parametrize('as_string', [False, True])
def test_token_identity_is_an_int(patient, as_string):
    user_id = str(patient.id) if as_string else patient.id
    request = APIRequestFactory().get('/', HTTP_AUTHORIZATION=f"Bearer {_signed({'userId': user_id, 'role': 'patient'})}")
    user, _ = BearerTokenAuthentication().authenticate(request)
    assert user.id == patient.id
    assert isinstance(user.id, int)
    assert user.pk == patient.id


def test_issued_token_identity_matches_stored_ids(patient, doctor, client_for):
    pc = client_for(patient)
    assert pc.post(reverse('consult-request', args=[doctor.id])).status_code == 200
    assert client_for(doctor).post(reverse('consult-respond', args=[patient.id]),
                                   {'action': 'accept'}, format='json').status_code == 200

    record = pc.post(reverse('records-add'), {'bp': '1', 'sugar': '2', 'heartRate': '3'}, format='json').data['record']
    assert record['patientId'] == patient.id
    assert pc.get(reverse('records-mine')).status_code == 200
    assert pc.get(reverse('patient-notes', args=[patient.id])).status_code == 200
    assert pc.get(reverse('patient-prescriptions', args=[patient.id])).status_code == 200


def test_string_user_id_claim_still_resolves(patient, doctor):
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f"Bearer {_signed({'userId': str(patient.id), 'role': 'patient'})}")
    assert c.post(reverse('consult-request', args=[doctor.id])).status_code == 200
    assert c.post(reverse('consult-request', args=[doctor.id])).status_code == 409
    assert c.get(reverse('patient-notes', args=[patient.id])).status_code == 200


def test_non_numeric_user_id_claim_is_401(patient):
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f"Bearer {_signed({'userId': 'abc', 'role': 'patient'})}")
    assert c.get(reverse('records-mine')).status_code == 401


@pytest.mark.parametrize('first', ['core.authentication', 'core.exceptions', 'medicore.urls'])
def test_modules_import_in_any_order(first):
    code = (
        'import django; django.setup(); '
        f'import {first}; '
        'import core.authentication, core.exceptions, medicore.urls'
    )
    env = {**os.environ, 'DJANGO_SETTINGS_MODULE': 'medicore.settings'}
    result = subprocess.run([sys.executable, '-c', code], cwd=str(Path(__file__).resolve().parents[2]),
                            env=env, capture_output=True, text=True, timeout=60)
    assert result.returncode == 0, result.stderr
