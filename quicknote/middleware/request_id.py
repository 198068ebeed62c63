"""
QuickNote - Request ID Middleware
===================================

What:  Assigns a short correlation id to each request and returns it in the
       X-Request-ID response header.
How:   Reuses a client-supplied X-Request-ID when it looks sane, otherwise
       generates one. The id lives in a ContextVar so any logger or exception
       handler running for the request can read it without plumbing.
Who:   Outermost middleware; runs before logging and CORS.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on the same thread each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Client ids end up in log lines; keep them short and free of control chars
_CLIENT_ID_PATTERN = re.compile(r"[A-Za-z0-9._-]{1,64}")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tags every request/response pair with an X-Request-ID."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        supplied = request.headers.get("X-Request-ID", "")
        rid = supplied if _CLIENT_ID_PATTERN.fullmatch(supplied) else new_request_id()

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
