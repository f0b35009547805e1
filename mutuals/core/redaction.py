"""Redaction of credentials and personal data before anything is logged.

Login and registration bodies, bearer headers and validation failures all
pass through the logging pipeline; this module strips the values that must
never land in a log sink. Original data is left untouched, only copies are
redacted.
"""

from __future__ import annotations

import re
from re import Pattern
from typing import Any, Final

from mutuals.core.config import get_settings
from mutuals.core.constants import REDACTED

SENSITIVE_HEADERS: Final[frozenset[str]] = frozenset(
    {
        "authorization",
        "cookie",
        "set-cookie",
        "x-api-key",
        "x-auth-token",
        "proxy-authorization",
    }
)

SENSITIVE_FIELD_PATTERN: Final[Pattern[str]] = re.compile(
    r"(password|passwd|pwd|secret|token|api[_-]?key|apikey|authorization|"
    r"credential|private[_-]?key|session|card[_-]?number|cvv)",
    re.IGNORECASE,
)

MAX_DEPTH: Final[int] = 10


def is_sensitive_field(field_name: str) -> bool:
    """Check whether a field name indicates a secret.

    Args:
        field_name: The field name to check.

    Returns:
        bool: True if the value stored under this name must be redacted.
    """
    if SENSITIVE_FIELD_PATTERN.search(field_name):
        return True

    lowered = field_name.lower()
    return any(
        configured.lower() in lowered
        for configured in get_settings().log_config.sensitive_fields
    )


def redact(value: Any, field_name: str = "", depth: int = 0) -> Any:  # noqa: ANN401
    """Return a copy of ``value`` with sensitive entries replaced.

    Args:
        value: Scalar or nested dict/list structure.
        field_name: Name the value is stored under, if known.
        depth: Current recursion depth.

    Returns:
        Any: The redacted copy.
    """
    if depth > MAX_DEPTH:
        return REDACTED
    if field_name and is_sensitive_field(field_name):
        return REDACTED
    if isinstance(value, dict):
        return {k: redact(v, str(k), depth + 1) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [redact(item, "", depth + 1) for item in value]
    return value


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact credential-bearing HTTP headers."""
    return {
        k: REDACTED if k.lower() in SENSITIVE_HEADERS else v for k, v in headers.items()
    }


def error_log_context(
    error: Exception, context: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Build the redacted context logged alongside a handled error.

    Args:
        error: The exception being handled.
        context: Request details to include.

    Returns:
        dict[str, Any]: Context safe to pass to ``logger.bind``.
    """
    log_context: dict[str, Any] = {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }
    if context:
        log_context.update(redact(context))

    error_context = getattr(error, "context", None)
    if isinstance(error_context, dict) and error_context:
        log_context["error_context"] = redact(error_context)

    return log_context
