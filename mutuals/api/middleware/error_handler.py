"""Terminal exception handlers for the FastAPI application.

Every failure, whether raised by a gate, a domain service or the framework
itself, ends up here and leaves the API as a response envelope. Stack
traces are attached only in development.
"""

import traceback
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from loguru import logger
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException

from mutuals.api.utils.responses import ORJSONResponse, envelope
from mutuals.core.config import get_settings
from mutuals.core.context import RequestContext
from mutuals.core.exceptions import FieldError, MutualsError
from mutuals.core.redaction import error_log_context

INTERNAL_ERROR_MESSAGE = "Internal server error"
DATABASE_ERROR_MESSAGE = "Database error occurred"


def _request_context(request: Request) -> dict[str, Any]:
    return {"method": request.method, "path": request.url.path}


def _original_url(request: Request) -> str:
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


async def mutuals_error_handler(request: Request, exc: Exception) -> Response:
    """Render a ``MutualsError`` with its own status, message and data.

    Args:
        request: The request that failed.
        exc: The raised ``MutualsError``.

    Returns:
        Response: Error envelope.

    Raises:
        TypeError: If exc is not a MutualsError instance.
    """
    if not isinstance(exc, MutualsError):
        raise TypeError(f"Expected MutualsError, got {type(exc).__name__}")

    log_context = error_log_context(exc, _request_context(request))
    log = logger.bind(
        error_code=exc.error_code,
        status_code=exc.status_code,
        fingerprint=exc.fingerprint,
        user_id=RequestContext.get_user_id(),
        **log_context,
    )
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        log.error("Request failed: {}", exc.message)
    else:
        log.warning("Request rejected: {}", exc.message)

    body = envelope(False, exc.message, exc.data)
    if get_settings().is_development:
        body["stack"] = "".join(exc.stack_trace)

    return ORJSONResponse(body, status_code=exc.status_code, headers=exc.headers)


async def request_validation_error_handler(
    request: Request, exc: Exception
) -> Response:
    """Render FastAPI's own parameter validation failures as field errors.

    Routes declare their rules through the validation gate, so this only
    fires for typed path or query parameters.

    Raises:
        TypeError: If exc is not a RequestValidationError instance.
    """
    if not isinstance(exc, RequestValidationError):
        raise TypeError(f"Expected RequestValidationError, got {type(exc).__name__}")

    errors: list[FieldError] = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ())[1:]]
        errors.append(
            {
                "field": ".".join(location) or "request",
                "message": str(error.get("msg", "Invalid value")),
            }
        )

    logger.warning(
        "Request validation failed",
        validation_errors=errors,
        **_request_context(request),
    )
    return ORJSONResponse(
        envelope(False, "Validation failed", errors),
        status_code=status.HTTP_400_BAD_REQUEST,
    )


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Render framework HTTP errors (unknown route, wrong method).

    Raises:
        TypeError: If exc is not an HTTPException instance.
    """
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = f"Route {_original_url(request)} not found"
    else:
        message = str(exc.detail)

    logger.warning(
        "HTTP exception: {}",
        message,
        status_code=exc.status_code,
        **_request_context(request),
    )
    return ORJSONResponse(
        envelope(False, message),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def integrity_error_handler(request: Request, exc: Exception) -> Response:
    """Render constraint violations (duplicate keys, broken references) as 400.

    These surface when two requests race past a service's existence check.

    Raises:
        TypeError: If exc is not an IntegrityError instance.
    """
    if not isinstance(exc, IntegrityError):
        raise TypeError(f"Expected IntegrityError, got {type(exc).__name__}")

    logger.warning(
        "Database constraint violated: {}",
        type(exc.orig).__name__,
        **_request_context(request),
    )

    body = envelope(False, DATABASE_ERROR_MESSAGE)
    if get_settings().is_development:
        body["error"] = str(exc.orig)

    return ORJSONResponse(body, status_code=status.HTTP_400_BAD_REQUEST)


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Render any unhandled exception as a 500 without leaking internals.

    Args:
        request: The request that failed.
        exc: The unhandled exception.

    Returns:
        Response: Error envelope; details only in development.
    """
    logger.opt(exception=exc).error(
        "Unhandled exception: {}",
        type(exc).__name__,
        **error_log_context(exc, _request_context(request)),
    )

    body = envelope(False, INTERNAL_ERROR_MESSAGE)
    if get_settings().is_development:
        body["error"] = str(exc)
        body["stack"] = "".join(traceback.format_exception(exc))

    return ORJSONResponse(body, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the application.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(MutualsError, mutuals_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
