from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response

from records.structured_logging import get_logger

logger = get_logger(__name__)


class NoRecordsFound(APIException):
    """Nothing to export for the requested registration or date range."""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'No records found.'
    default_code = 'no_records'


class UpstreamError(APIException):
    """A downstream HTTP service answered with an error.

    The upstream status code is passed through to the client.
    """
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'Upstream service failed.'
    default_code = 'upstream_error'

    def __init__(self, detail=None, status_code=None):
        super().__init__(detail)
        if status_code:
            self.status_code = status_code


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.error('unhandled_exception', view=str(context.get('view')), exc_info=exc)
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    # normalize response
    code = getattr(exc, 'default_code', None) or 'api_error'
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    if isinstance(detail, list) and len(detail) == 1:
        detail = detail[0]
    return Response({'ok': False, 'error': {'code': code, 'message': detail}}, status=resp.status_code)
