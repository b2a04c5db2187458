"""Request-ID middleware — ``X-Request-ID`` on every request/response.

The id is stored on ``request.state.request_id``, bound to the structlog
context as ``transaction_id`` for the length of the request, and reused as
the ``transaction_id`` of the request's ``request.completed`` event.

Tags:
    pagelog, api, middleware, request-id, tracing, correlation

Doc-Types:
    api-reference
"""

from __future__ import annotations

import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from pagelog.core.logging import request_context

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a request ID to every request/response cycle."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        with request_context(request_id):
            response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
