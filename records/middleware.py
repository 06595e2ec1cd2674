import uuid

import structlog


class RequestLogContextMiddleware:
    """Bind a request id and path into the structlog context for each request."""
    HEADER = 'HTTP_X_REQUEST_ID'

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request_id = request.META.get(self.HEADER) or uuid.uuid4().hex[:12]
        structlog.contextvars.bind_contextvars(request_id=request_id, path=request.path or '')
        try:
            response = self.get_response(request)
        finally:
            structlog.contextvars.unbind_contextvars('request_id', 'path')
        response['X-Request-ID'] = request_id
        return response
