"""
QuickNote - Request Logging Middleware
========================================

What:  One access-log line per request: method, path, status, duration,
       request id and originating client address.
How:   Measures time around call_next and picks the log level from the
       status class (5xx ERROR, 4xx WARNING, else INFO).
Who:   Runs inside RequestIDMiddleware, so the request id is available.

What we log vs what we DON'T log:
    ✅ Log: method, path, status, duration, client IP, request id
    ❌ Don't log: note content, request bodies

Skipped:
    - /health and /favicon.ico (polled constantly, no signal)
    - loopback clients opening the new-note screen (local smoke checks)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from quicknote.middleware.request_id import request_id_var
from quicknote.services.request_normalizer import client_ip, extract_read_note_id

logger = logging.getLogger("quicknote.access")

QUIET_PATHS = frozenset({"/health", "/favicon.ico"})
LOOPBACK_ADDRESSES = frozenset({"127.0.0.1", "::1"})


def _is_quiet(request: Request, ip: str) -> bool:
    if request.url.path in QUIET_PATHS:
        return True
    return (
        request.method == "GET"
        and ip in LOOPBACK_ADDRESSES
        and not extract_read_note_id(request.query_params, request.url.path)
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request/response pair at a level matching its status."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        peer = request.client.host if request.client else ""
        ip = client_ip(request.headers, peer) or "unknown"
        if _is_quiet(request, ip):
            return await call_next(request)

        method = request.method
        path = request.url.path
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": ip,
            },
        )

        return response
