"""FastAPI application factory and lifecycle.

``create_app`` wires exception handlers, middleware and routers.
``lifespan`` builds every collaborator the gates and services reach through
``request.app.state``:

- ``kv_store``: Redis, or the in-process store when no Redis URL is set
- ``response_cache`` and ``rate_limiter`` on top of that store
- ``http_client``: one pooled httpx client for all outbound calls
- ``email_client`` and ``mailing_list_client``

and closes them again on shutdown. Middleware run in reverse order of
registration, so the last one added sees the request first.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import httpx
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from loguru import logger

from mutuals.api.cache import ResponseCache
from mutuals.api.dependencies import RateLimiter, rate_limit
from mutuals.api.middleware.error_handler import register_exception_handlers
from mutuals.api.middleware.request_context import RequestContextMiddleware
from mutuals.api.middleware.request_logging import RequestLoggingMiddleware
from mutuals.api.middleware.security_headers import SecurityHeadersMiddleware
from mutuals.api.routers import build_api_router
from mutuals.api.utils.responses import ORJSONResponse
from mutuals.core.config import Settings, get_settings
from mutuals.core.logging import setup_logging
from mutuals.infrastructure.database.session import (
    check_database_connection,
    close_database,
)
from mutuals.infrastructure.integrations import EmailClient, MailingListClient
from mutuals.infrastructure.kv import create_store


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Build shared collaborators on startup and release them on shutdown.

    Raises:
        RuntimeError: If the database cannot be reached during startup.
    """
    settings: Settings = app_instance.state.settings

    is_healthy, error_msg = await check_database_connection()
    if not is_healthy:
        logger.error("Database connection failed during startup: {}", error_msg)
        msg = f"Database connection failed: {error_msg}"
        raise RuntimeError(msg)
    logger.info("Database connection successful")

    store = create_store(settings.cache_config)
    http_client = httpx.AsyncClient()

    state = app_instance.state
    state.kv_store = store
    state.response_cache = ResponseCache(store, settings.cache_config)
    state.rate_limiter = RateLimiter(store, settings.rate_limit_config)
    state.http_client = http_client
    state.email_client = EmailClient(settings.email_config, http_client)
    state.mailing_list_client = MailingListClient(
        settings.mailing_list_config, http_client
    )

    if not state.email_client.is_configured:
        logger.warning("SendGrid API key not set, emails will not be sent")
    if not settings.mailing_list_config.is_configured:
        logger.warning("Mailchimp not configured, subscribers will not be synced")

    logger.info(
        "Application startup complete - {} v{}",
        app_instance.title,
        app_instance.version,
    )

    try:
        yield
    finally:
        logger.info("Application shutdown initiated")
        await http_client.aclose()
        await store.close()
        await close_database()
        logger.info("Application shutdown complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings instance. If not provided, will use get_settings().

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    setup_logging(settings)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )
    application.state.settings = settings

    # Register exception handlers BEFORE middleware
    register_exception_handlers(application)

    # 4. Request logging (innermost, sees the final status)
    application.add_middleware(
        RequestLoggingMiddleware,
        log_config=settings.log_config,
        trust_proxy_headers=settings.rate_limit_config.trust_proxy_headers,
    )

    # 3. Correlation id and request context
    application.add_middleware(RequestContextMiddleware)

    # 2. Security headers on every response, errors included
    application.add_middleware(
        SecurityHeadersMiddleware, hsts_enabled=not settings.is_development
    )

    # 1. CORS answers preflight requests before anything else runs
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.get("/health")
    async def health() -> Response:
        """Liveness probe with database and key-value store status.

        Always answers 200 so orchestrators can tell a degraded service from
        a dead one.
        """
        database_ok, error_msg = await check_database_connection()
        if not database_ok:
            logger.warning("Database health check failed: {}", error_msg)
        store_ok = await application.state.kv_store.ping()

        return ORJSONResponse(
            {
                "success": True,
                "message": "Server is running",
                "timestamp": datetime.now(UTC).isoformat(),
                "environment": settings.environment,
                "database": database_ok,
                "cache": store_ok,
            }
        )

    @application.get(
        settings.api_prefix or "/",
        dependencies=[Depends(rate_limit("general"))],
    )
    async def api_banner() -> Response:
        return ORJSONResponse(
            {
                "success": True,
                "message": settings.app_name,
                "version": settings.app_version,
                "documentation": settings.docs_url,
            }
        )

    application.include_router(build_api_router(settings.api_prefix))

    return application


app = create_app()
