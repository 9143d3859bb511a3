import pytest
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from core.authentication import issue_token
from core.models import Consultation, User

PASSWORD = 'P@ssw0rd1'


@pytest.fixture(autouse=True)
def _isolated_state(settings, tmp_path):
    # throttle counters live in the cache; uploads go to a per-test dir
    cache.clear()
    settings.MEDIA_ROOT = str(tmp_path)
    settings.MISTRAL_API_KEY = 'test-key'
    yield
    cache.clear()


@pytest.fixture
def patient(db):
    return User.objects.create_user(email='pat@example.com', password=PASSWORD, name='Pat Patient',
                                    role=User.ROLE_PATIENT)


@pytest.fixture
def other_patient(db):
    return User.objects.create_user(email='other@example.com', password=PASSWORD, name='Olive Other',
                                    role=User.ROLE_PATIENT)


@pytest.fixture
def doctor(db):
    return User.objects.create_user(email='doc@example.com', password=PASSWORD, name='Dana Heart',
                                    role=User.ROLE_DOCTOR, specialty='Cardiology')


@pytest.fixture
def other_doctor(db):
    return User.objects.create_user(email='derm@example.com', password=PASSWORD, name='Sam Skin',
                                    role=User.ROLE_DOCTOR, specialty='Dermatology')


@pytest.fixture
def client_for():
    """Build an APIClient carrying a freshly signed bearer token for ``user``."""
    def make(user):
        c = APIClient()
        c.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_token(user)}')
        return c
    return make


@pytest.fixture
def consulting(patient, doctor):
    return Consultation.objects.create(patient=patient, doctor=doctor,
                                       status=Consultation.STATUS_CONSULTED, accepted_at=timezone.now())
