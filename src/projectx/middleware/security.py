"""Security headers middleware.

Learn: every response, errors included, leaves with a fixed set of
headers. Nearly every API response here is per-user JSON (a project
list, a dashboard), so nothing may be cached by a shared proxy unless a
route says otherwise: Cache-Control is only filled in when the handler
didn't set it.

HSTS is only meaningful over TLS and is skipped on plain http.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}
DEFAULT_CACHE_CONTROL = "no-store"
HSTS = "max-age=31536000; includeSubDomains"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Stamp security headers on all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        response.headers.setdefault("Cache-Control", DEFAULT_CACHE_CONTROL)
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = HSTS
        return response
