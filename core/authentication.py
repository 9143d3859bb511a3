"""
Bearer token authentication.

Tokens are HMAC-signed JWTs carrying ``userId`` and ``role``.  They are
verified statelessly: ``request.user`` becomes a simplejwt ``TokenUser``
built from the claims, so no database lookup happens per request.

Failure modes:

* no ``Authorization`` header, or a header that is not ``<token>`` or
  ``Bearer <token>``: 403 (:class:`core.errors.Unauthenticated`);
* bad signature, expired token or missing claims: 401
  (:class:`core.errors.InvalidCredential`).
"""
from __future__ import annotations

from django.utils.functional import cached_property
from rest_framework_simplejwt.authentication import AUTH_HEADER_TYPE_BYTES, JWTStatelessUserAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.models import TokenUser
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

from core.errors import InvalidCredential, Unauthenticated


class ClaimsUser(TokenUser):
    """``TokenUser`` whose id is always an int, whatever type the claim was signed with."""

    @cached_property
    def id(self) -> int:
        return int(self.token[api_settings.USER_ID_CLAIM])


class BearerTokenAuthentication(JWTStatelessUserAuthentication):
    """Stateless JWT authentication with an optional ``Bearer`` keyword."""

    def authenticate_header(self, request):
        # No WWW-Authenticate challenge: DRF then answers a missing
        # credential with 403 instead of 401.
        return None

    def get_raw_token(self, header: bytes) -> bytes | None:
        parts = header.split()
        if not parts:
            return None
        if len(parts) == 1:
            return parts[0]
        if len(parts) == 2 and parts[0] in AUTH_HEADER_TYPE_BYTES:
            return parts[1]
        raise Unauthenticated('Malformed authorization header')

    def get_user(self, validated_token) -> ClaimsUser:
        try:
            int(validated_token[api_settings.USER_ID_CLAIM])
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidToken('Token contained no recognizable user identification') from exc
        return ClaimsUser(validated_token)

    def authenticate(self, request):
        header = self.get_header(request)
        if header is None:
            return None
        raw_token = self.get_raw_token(header)
        if raw_token is None:
            return None
        try:
            validated_token = self.get_validated_token(raw_token)
            user = self.get_user(validated_token)
        except (InvalidToken, TokenError) as exc:
            raise InvalidCredential() from exc
        if user.role is None:
            raise InvalidCredential()
        return user, validated_token


def issue_token(user) -> str:
    """Sign an access token embedding the user's id and role."""
    token = AccessToken.for_user(user)
    token['role'] = user.role
    return str(token)
