"""Request context middleware: correlation ids bound into structlog context."""

from uuid import uuid4

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from fleeting.platform.settings import settings


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a correlation id (incoming header or generated) for every log line."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        header = settings.observability.correlation_id_header
        correlation_id = request.headers.get(header) or uuid4().hex

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            correlation_id=correlation_id,
            method=request.method,
            path=request.url.path,
        )
        response = await call_next(request)
        response.headers[header] = correlation_id
        return response


__all__ = ["RequestContextMiddleware"]
