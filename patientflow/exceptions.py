import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class NotFound(exceptions.NotFound):
    """Appointment, flow, room or provider missing for the tenant."""
    default_code = 'not_found'


class ValidationError(exceptions.ValidationError):
    """Rejected before any store access (bad status, empty patch...)."""
    default_code = 'validation_error'


class RoomOccupied(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Room is already occupied by another visit.'
    default_code = 'room_occupied'


class TransientStoreError(exceptions.APIException):
    """The atomic unit failed to commit; nothing was written, retry is safe."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Temporary storage failure, please retry.'
    default_code = 'transient_store_error'


class NotificationDeliveryFailure(Exception):
    """Live channel unavailable.  Logged only, never raised to callers."""


def _error_code(exc) -> str:
    if isinstance(exc, exceptions.ValidationError):
        return ValidationError.default_code
    codes = exc.get_codes() if hasattr(exc, 'get_codes') else None
    if isinstance(codes, str):
        return codes
    return getattr(exc, 'default_code', 'api_error')


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('Unhandled API error', exc_info=exc)
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    # normalize response
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    elif isinstance(resp.data, list) and len(resp.data) == 1:
        detail = resp.data[0]
    else:
        detail = resp.data
    return Response(
        {'ok': False, 'error': {'code': _error_code(exc), 'message': detail}},
        status=resp.status_code,
    )
