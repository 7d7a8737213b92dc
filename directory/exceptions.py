"""
Domain errors and the unified API exception handler.

Every failure raised by the services is an ``APIException`` subclass with
a stable ``default_code`` so the handler below can render one envelope:
``{'ok': False, 'error': {'code': ..., 'message': ..., 'field': ...}}``.
"""
import logging

from rest_framework import exceptions, status
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class DirectoryError(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request failed'
    default_code = 'error'


class ValidationError(DirectoryError):
    """Bad or missing input.  ``field`` names the first failing field."""
    default_detail = 'Invalid input'
    default_code = 'validation_error'

    def __init__(self, detail=None, field=None):
        super().__init__(detail)
        self.field = field


class InvalidId(DirectoryError):
    default_detail = 'Invalid identifier'
    default_code = 'invalid_id'


class DuplicateEmail(DirectoryError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'An account with this email already exists'
    default_code = 'duplicate_email'


class DuplicateVehicleNumber(DirectoryError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Vehicle with this registration number already exists'
    default_code = 'duplicate_vehicle_number'


class InvalidCredentials(DirectoryError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Invalid email or password'
    default_code = 'invalid_credentials'


class NotFound(DirectoryError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found'
    default_code = 'not_found'


class UploadFailed(DirectoryError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'Failed to upload file'
    default_code = 'upload_failed'


class UpstreamUnavailable(DirectoryError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Upstream service unavailable'
    default_code = 'upstream_unavailable'


def first_error(errors, prefix=''):
    """Return ``(field, message)`` for the first entry of a serializer error tree."""
    if isinstance(errors, dict):
        for key, value in errors.items():
            name = key if key != 'non_field_errors' else ''
            path = f'{prefix}.{name}' if prefix and name else (name or prefix)
            return first_error(value, path)
    if isinstance(errors, (list, tuple)):
        for index, value in enumerate(errors):
            if isinstance(value, (dict, list)):
                if not value:
                    continue
                path = f'{prefix}[{index}]' if isinstance(value, dict) else prefix
                return first_error(value, path)
            return prefix or None, str(value)
    return prefix or None, str(errors)


def api_exception_handler(exc, context):
    if isinstance(exc, exceptions.ValidationError) and not isinstance(exc, DirectoryError):
        field, message = first_error(exc.detail)
        exc = ValidationError(message, field=field)

    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('Unhandled error in %s', context.get('view'))
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)

    error = {'code': 'api_error', 'message': None}
    if isinstance(exc, DirectoryError):
        error['code'] = exc.default_code
        error['message'] = str(exc.detail)
        if getattr(exc, 'field', None):
            error['field'] = exc.field
    else:
        if isinstance(resp.data, dict):
            error['message'] = resp.data.get('detail') or resp.data
        else:
            error['message'] = str(resp.data)
        codes = getattr(exc, 'get_codes', lambda: None)()
        if isinstance(codes, str):
            error['code'] = codes
    headers = {k: v for k, v in resp.items() if k in ('Retry-After', 'WWW-Authenticate')}
    return Response({'ok': False, 'error': error}, status=resp.status_code, headers=headers)
