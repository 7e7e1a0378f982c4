"""
CourseHub Backend: Request ID Middleware
========================================

What:  Assigns a correlation ID to each request and echoes it back.
How:   Reuses the caller's X-Request-ID header when present, otherwise
       generates a short UUID. The ID is stored in a ContextVar (read by
       exception handlers and the access logger) and on request.state.

The client SDK sends its own X-Request-ID so a failed call can be
matched to the server log line from the error it raises.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

MAX_REQUEST_ID_LENGTH = 64


def resolve_request_id(incoming: str) -> str:
    """The caller's X-Request-ID (truncated), or a fresh short UUID."""
    incoming = incoming.strip()
    return incoming[:MAX_REQUEST_ID_LENGTH] if incoming else uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Sets `request_id_var` and the X-Request-ID response header."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get("X-Request-ID", ""))

        request_id_var.set(rid)
        request.state.request_id = rid
        response = await call_next(request)

        response.headers["X-Request-ID"] = rid
        return response
