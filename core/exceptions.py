from rest_framework import exceptions as drf_exceptions
from rest_framework.response import Response
from rest_framework.views import exception_handler
import logging

from apps.rooms.exceptions import AuctionError

logger = logging.getLogger(__name__)

DRF_ERROR_KINDS = (
    (drf_exceptions.ValidationError, 'validation'),
    (drf_exceptions.ParseError, 'validation'),
    (drf_exceptions.NotFound, 'not_found'),
    (drf_exceptions.PermissionDenied, 'forbidden'),
    (drf_exceptions.NotAuthenticated, 'forbidden'),
    (drf_exceptions.Throttled, 'throttled'),
)


def api_exception_handler(exc, context):
    """Render every API error as {"error", "kind", "code", ...}."""
    if isinstance(exc, AuctionError):
        if exc.status_code >= 500:
            logger.error(f"{exc.kind} error in {context.get('view')}: {exc.message}")
        return Response(exc.as_dict(), status=exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        return None

    kind = next((k for cls, k in DRF_ERROR_KINDS if isinstance(exc, cls)), 'error')
    payload = {
        'kind': kind,
        'code': exc.default_code if isinstance(exc, drf_exceptions.APIException) else 'error',
    }
    if isinstance(exc, drf_exceptions.ValidationError):
        payload['error'] = 'Invalid input'
        payload['details'] = response.data
    else:
        payload['error'] = response.data.get('detail', str(exc)) if isinstance(response.data, dict) else str(exc)
    response.data = payload
    return response
