"""
QuickNote - CORS Headers Middleware
=====================================

What:  Adds the cross-origin headers the browser client needs for saving
       notes from another origin.
How:   Every POST and OPTIONS response, success or error, gets:
           Access-Control-Allow-Origin:  <CORS_ALLOW_ORIGIN, default *>
           Access-Control-Allow-Methods: POST, OPTIONS
           Access-Control-Allow-Headers: Content-Type
       Other methods are left untouched.

Starlette's CORSMiddleware answers preflights itself and only when an Origin
header is present; here OPTIONS must reach the note route (plain 200, empty
body) regardless of the request headers, so the headers are set directly.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

CORS_METHODS = frozenset({"POST", "OPTIONS"})


def cors_headers(allow_origin: str = "*") -> dict:
    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": "POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
    }


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, allow_origin: str = "*"):
        super().__init__(app)
        self.headers = cors_headers(allow_origin)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        if request.method in CORS_METHODS:
            response.headers.update(self.headers)
        return response
