import logging

from django.db import IntegrityError, transaction

from core.errors import DuplicateEmail
from core.models import User

logger = logging.getLogger(__name__)


def register_user(*, name: str, email: str, password: str, role: str, specialty: str = '') -> User:
    if User.objects.filter(email__iexact=email).exists():
        raise DuplicateEmail()
    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=email, password=password, name=name, role=role,
                specialty=specialty if role == User.ROLE_DOCTOR else '',
            )
    except IntegrityError:
        raise DuplicateEmail()
    logger.info('user %s registered role=%s', user.id, role)
    return user


def format_user(user: User) -> dict:
    return {
        'id': user.id,
        'name': user.name,
        'email': user.email,
        'role': user.role,
        'specialty': user.specialty or None,
    }
