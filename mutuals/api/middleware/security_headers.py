"""Security headers added to every response."""

from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from mutuals.api.constants import DEFAULT_HSTS_MAX_AGE

STATIC_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "0",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add common security headers to all responses.

    Args:
        app: The ASGI application to wrap.
        hsts_enabled: Whether to send Strict-Transport-Security.
        hsts_max_age: Max age for HSTS in seconds.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        hsts_enabled: bool = True,
        hsts_max_age: int = DEFAULT_HSTS_MAX_AGE,
    ) -> None:
        super().__init__(app)
        self.hsts_enabled = hsts_enabled
        self.hsts_value = f"max-age={hsts_max_age}; includeSubDomains"

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        response = await call_next(request)

        for name, value in STATIC_SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        if self.hsts_enabled:
            response.headers["Strict-Transport-Security"] = self.hsts_value

        return response
