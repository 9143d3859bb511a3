"""
API error taxonomy.

Services and the credential gate raise these.  Kept apart from the
exception handler so that importing them never pulls in
``rest_framework.views``, which loads the authentication classes.
"""
from rest_framework import status
from rest_framework.exceptions import APIException


class Unauthenticated(APIException):
    # Missing or unparseable credential; answered with 403, not 401
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Token missing'
    default_code = 'unauthenticated'


class InvalidCredential(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Invalid token'
    default_code = 'invalid_credential'


class Forbidden(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Access denied.'
    default_code = 'forbidden'


class NotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'


class InvalidArgument(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid argument.'
    default_code = 'invalid_argument'


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Conflict.'
    default_code = 'conflict'


class DuplicateEmail(Conflict):
    # Registration contract answers 400 for an email already in use
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Email already used. Please use a different email.'


class PayloadTooLarge(APIException):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    default_detail = 'Payload too large.'
    default_code = 'payload_too_large'


class ServiceUnavailable(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Service temporarily unavailable.'
    default_code = 'service_unavailable'
