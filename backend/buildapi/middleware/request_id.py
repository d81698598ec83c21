"""
Build API — Request ID Middleware
===================================

What:  Tags each request with a short correlation id and returns it in the
       X-Request-ID response header.
Why:   Error responses carry only a fixed message; the id lets an operator
       find the matching server-side log line with the real cause.
How:   Reuses a client-sent X-Request-ID or generates one, stores it in a
       ContextVar for loggers and exception handlers.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns a request id and echoes it back to the client."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # 8 chars of a UUID is enough to correlate log lines
        rid = request.headers.get("X-Request-ID", str(uuid.uuid4())[:8])

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
