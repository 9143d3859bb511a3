"""
Authentication views.

Registration and email/password login.  Login returns a signed bearer
token embedding the user's id and role; there is no server-side session
or token table, so there is nothing to refresh or revoke here.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from core.authentication import issue_token
from core.errors import InvalidCredential
from core.serializers.auth import LoginSerializer, RegisterSerializer
from core.services.accounts import format_user, register_user

logger = logging.getLogger(__name__)


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def register_view(request):
    s = RegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = register_user(**s.validated_data)
    return Response({'ok': True, 'message': 'User created', 'user': format_user(user)},
                    status=status.HTTP_201_CREATED)

register_view.cls.throttle_scope = 'login'


# ---------------------------------------------------------------------
# Email/password login (role always comes from the stored user)
# ---------------------------------------------------------------------
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data

    user = authenticate(request, username=vd['email'], password=vd['password'])
    if not user:
        logger.info('login failed email=%s ip=%s', vd['email'], request.META.get('REMOTE_ADDR'))
        raise InvalidCredential('Invalid credentials')

    payload: dict[str, object] = {
        'ok': True,
        'token': issue_token(user),
        'role': user.role,
        'name': user.name,
        'specialty': user.specialty or None,
        'user': format_user(user),
    }
    return Response(payload, status=200)

# ScopedRateThrottle reads throttle_scope from the wrapped view class
login_view.cls.throttle_scope = 'login'


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def auth_health_view(request):
    return Response({
        'status': 'OK',
        'message': 'MediCore Backend is running',
        'timestamp': timezone.now().isoformat(),
    })
