"""
HTTP middleware for the Capture Plan API.

``SecurityHeadersMiddleware`` stamps browser hardening headers on every
response; ``CSRFMiddleware`` enforces the double-submit check for requests
authenticated by the session cookie.
"""

from __future__ import annotations

import secrets

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

SAFE_METHODS = {"GET", "HEAD", "OPTIONS"}
CSRF_HEADER = "X-CSRF-Token"

# The interactive docs pull their assets from jsdelivr
DOCS_CSP = (
    "default-src 'self'; "
    "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "img-src 'self' data: https://fastapi.tiangolo.com; "
    "frame-ancestors 'none';"
)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
    "Content-Security-Policy": DOCS_CSP,
}

HSTS_VALUE = "max-age=63072000; includeSubDomains"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Attach security headers to every response.

    HSTS is only sent when the deployment serves cookies over HTTPS.
    """

    def __init__(self, app: ASGIApp, hsts: bool = True):
        super().__init__(app)
        self.headers = dict(SECURITY_HEADERS)
        if hsts:
            self.headers["Strict-Transport-Security"] = HSTS_VALUE

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers.update(self.headers)
        return response


class CSRFMiddleware(BaseHTTPMiddleware):
    """
    Double-submit cookie CSRF protection.

    A state-changing request that carries the session cookie must send the
    CSRF cookie's value back in ``X-CSRF-Token``. Requests without a session
    cookie are anonymous and pass through to the route's own auth check.
    """

    def __init__(
        self,
        app: ASGIApp,
        session_cookie: str = "cp_session",
        csrf_cookie: str = "cp_csrf",
    ):
        super().__init__(app)
        self.session_cookie = session_cookie
        self.csrf_cookie = csrf_cookie

    def _token_matches(self, request: Request) -> bool:
        cookie_token = request.cookies.get(self.csrf_cookie) or ""
        header_token = request.headers.get(CSRF_HEADER) or ""
        if not cookie_token or not header_token:
            return False
        return secrets.compare_digest(cookie_token.encode(), header_token.encode())

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method in SAFE_METHODS or self.session_cookie not in request.cookies:
            return await call_next(request)

        if not self._token_matches(request):
            return JSONResponse(
                status_code=403,
                content={
                    "error": "Invalid or missing CSRF token.",
                    "code": "CSRF_VALIDATION_FAILED",
                },
            )
        return await call_next(request)
