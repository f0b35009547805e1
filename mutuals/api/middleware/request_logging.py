"""HTTP request/response logging with timing.

Every request outside the excluded paths gets a "Request started" and a
"Request completed" (or "Request failed") line sharing a request id, the
client address and the correlation id bound by ``RequestContextMiddleware``.
Requests slower than ``slow_request_threshold_ms`` are flagged.
"""

import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from mutuals.api.client import get_client_ip, get_user_agent
from mutuals.api.constants import REQUEST_ID_HEADER
from mutuals.core.config import LogConfig
from mutuals.core.context import generate_request_id


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log request start/completion with timing.

    Args:
        app: The ASGI application.
        log_config: Logging configuration.
        trust_proxy_headers: Whether proxy headers identify the client.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        log_config: LogConfig,
        trust_proxy_headers: bool = False,
    ) -> None:
        super().__init__(app)
        self.log_config = log_config
        self.excluded_paths = set(log_config.excluded_paths)
        self.trust_proxy_headers = trust_proxy_headers

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process the request and log details.

        Raises:
            Exception: Anything raised downstream, after it has been logged.
        """
        if request.url.path in self.excluded_paths:
            return await call_next(request)

        request_id = request.headers.get(REQUEST_ID_HEADER) or generate_request_id()

        with logger.contextualize(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_ip=get_client_ip(request, self.trust_proxy_headers),
            user_agent=get_user_agent(request),
        ):
            logger.info(
                "Request started",
                query_params=(
                    dict(request.query_params) if request.query_params else None
                ),
            )
            start_time = time.perf_counter()

            try:
                response = await call_next(request)
            except Exception as exc:
                duration_ms = (time.perf_counter() - start_time) * 1000
                logger.error(
                    "Request failed",
                    duration_ms=round(duration_ms, 2),
                    error_type=type(exc).__name__,
                )
                raise

            duration_ms = (time.perf_counter() - start_time) * 1000
            # Set by the authentication gate on the shared request state
            identity = getattr(request.state, "identity", None)
            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
                user_id=getattr(identity, "id", None),
            )
            response.headers[REQUEST_ID_HEADER] = request_id

            if duration_ms > self.log_config.slow_request_threshold_ms:
                logger.warning(
                    "Slow request detected",
                    duration_ms=round(duration_ms, 2),
                    threshold_ms=self.log_config.slow_request_threshold_ms,
                )

            return response
