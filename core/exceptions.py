"""
Unified exception handler.

Turns every failure raised from a view or service into
``{'ok': False, 'error': <message>, 'code': <code>}``.
"""
import logging

from django.db import DatabaseError
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from core.errors import Forbidden, InvalidArgument, InvalidCredential, ServiceUnavailable, Unauthenticated

logger = logging.getLogger(__name__)


# DRF built-in codes folded into the core.errors taxonomy
_CODE_ALIASES = {
    'not_authenticated': Unauthenticated.default_code,
    'authentication_failed': InvalidCredential.default_code,
    'permission_denied': Forbidden.default_code,
    'parse_error': InvalidArgument.default_code,
}


def _first_message(data) -> str:
    if isinstance(data, dict):
        for field, value in data.items():
            msg = _first_message(value)
            if field in ('detail', 'non_field_errors'):
                return msg
            return f'{field}: {msg}'
        return ''
    if isinstance(data, (list, tuple)):
        return _first_message(data[0]) if data else ''
    return str(data)


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view')
        logger.exception('unhandled error in %s', view.__class__.__name__ if view else 'view')
        if isinstance(exc, DatabaseError):
            err = ServiceUnavailable()
            return Response({'ok': False, 'error': str(err.detail), 'code': err.default_code}, status=err.status_code)
        return Response({'ok': False, 'error': 'Internal server error.', 'code': 'server_error'}, status=500)
    # normalize response
    if isinstance(exc, ValidationError):
        body = {'ok': False, 'error': _first_message(resp.data), 'code': 'invalid_argument', 'fields': resp.data}
    else:
        code = getattr(exc, 'default_code', 'api_error')
        code = _CODE_ALIASES.get(code, code)
        body = {'ok': False, 'error': _first_message(resp.data), 'code': code}
    headers = {h: resp[h] for h in ('WWW-Authenticate', 'Retry-After') if resp.has_header(h)}
    return Response(body, status=resp.status_code, headers=headers)
