"""Structured logging built on Loguru.

Two outputs are supported:

- **console**: human-readable lines with the request context inline
  (development)
- **json**: one JSON object per line for log collectors (staging,
  production)

Records emitted through the standard library (uvicorn, SQLAlchemy, httpx)
are routed into Loguru by ``InterceptHandler`` so every line shares the
same format and the same correlation id.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Final, cast

import orjson
from loguru import logger

from mutuals.core.config import Settings
from mutuals.core.redaction import redact

DEFAULT_LOG_FORMAT: Final[str] = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{message}"
)
CORRELATION_ID_DISPLAY_LENGTH: Final[int] = 8
MAX_FIELD_VALUE_LENGTH: Final[int] = 100

# Shown first, in this order, on console lines
PRIORITY_FIELDS: Final[tuple[str, ...]] = (
    "correlation_id",
    "request_id",
    "method",
    "path",
    "status_code",
    "duration_ms",
    "client_ip",
    "user_id",
)

_configured = False


def _escape(value: object) -> str:
    return str(value).replace("{", "{{").replace("}", "}}").replace("<", r"\<")


def _format_priority_field(field: str, value: object) -> str:
    if field == "correlation_id" and len(str(value)) > CORRELATION_ID_DISPLAY_LENGTH:
        return _escape(str(value)[:CORRELATION_ID_DISPLAY_LENGTH])
    if field == "duration_ms":
        return f"{_escape(value)}ms"
    if field == "status_code":
        color = {"2": "green", "3": "yellow"}.get(str(value)[:1], "red")
        return f"<{color}>{_escape(value)}</{color}>"
    return _escape(value)


def _format_extra_field(key: str, value: object) -> str:
    str_value = str(redact(value, key))
    if len(str_value) > MAX_FIELD_VALUE_LENGTH:
        str_value = str_value[: MAX_FIELD_VALUE_LENGTH - 3] + "..."
    return f"{_escape(key)}={_escape(str_value)}"


def format_console_with_context(record: dict[str, Any]) -> str:
    """Format a record for the console with its context fields inline.

    Args:
        record: Loguru record to format.

    Returns:
        str: Loguru format string for the record.
    """
    extra = record.get("extra", {})
    context_parts = [
        f"[<yellow>{_format_priority_field(field, extra[field])}</yellow>]"
        for field in PRIORITY_FIELDS
        if extra.get(field) is not None
    ]
    context_parts.extend(
        f"[<dim>{_format_extra_field(key, value)}</dim>]"
        for key, value in extra.items()
        if key not in PRIORITY_FIELDS and not key.startswith("_") and value is not None
    )

    parts = [
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green>",
        "<level>{level: <8}</level>",
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>",
    ]
    if context_parts:
        parts.append(" ".join(context_parts))
    parts.append("{message}")

    line = " | ".join(parts) + "\n"
    if record.get("exception"):
        line += "{exception}"
    return line


def serialize_for_json(record: dict[str, Any]) -> str:
    """Render a record as a single JSON line.

    Args:
        record: Loguru record to render.

    Returns:
        str: JSON-formatted log entry with newline.
    """
    log_entry: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
    }

    extra = {k: v for k, v in record.get("extra", {}).items() if not k.startswith("_")}
    if extra:
        log_entry.update(redact(extra))

    if exc := record.get("exception"):
        log_entry["exception"] = {
            "type": exc.type.__name__ if exc.type else None,
            "value": str(exc.value) if exc.value else None,
        }

    return orjson.dumps(log_entry, default=str).decode() + "\n"


def _json_sink(message: Any) -> None:  # noqa: ANN401 - loguru Message
    sys.stdout.write(serialize_for_json(message.record))
    sys.stdout.flush()


class InterceptHandler(logging.Handler):
    """Forward standard library log records to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        """Forward a record, preserving its level and caller.

        Args:
            record: Standard library LogRecord to forward.
        """
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller outside of the logging module
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(settings: Settings) -> None:
    """Configure Loguru sinks and capture standard library logging.

    Safe to call more than once; only the first call has an effect.

    Args:
        settings: Application settings containing log configuration.
    """
    global _configured  # noqa: PLW0603
    if _configured:
        return

    logger.remove()
    formatter_type = settings.log_config.log_formatter_type or "console"

    if formatter_type == "json":
        logger.add(
            _json_sink,
            level=settings.log_config.log_level,
            enqueue=True,
            diagnose=False,
            backtrace=False,
        )
    else:
        logger.add(
            sys.stdout,
            format=cast("Any", format_console_with_context),
            level=settings.log_config.log_level,
            enqueue=True,
            colorize=True,
            diagnose=settings.debug,
            backtrace=settings.debug,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(logger_name)
        uvicorn_logger.handlers = [InterceptHandler()]
        uvicorn_logger.propagate = False

    # Request lines come from our middleware
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logger.info(
        "Logging configured with {} formatter",
        formatter_type,
        log_level=settings.log_config.log_level,
    )
    _configured = True
