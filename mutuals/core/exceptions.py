"""Structured exception hierarchy for consistent error handling.

Every failure a request can end with is raised as a ``MutualsError``
subclass. Each class knows the HTTP status it maps to, so a single terminal
handler can turn any of them into the response envelope.

Key components:
- **ErrorCode enum**: Standardized error identifiers for programmatic handling
- **Severity enum**: Error classification for monitoring and alerting
- **MutualsError**: Base exception with context, cause chaining and a
  fingerprint for grouping
- **Specialized exceptions**: authentication, authorization, validation,
  lookup, conflict, quota and upstream failures
"""

import hashlib
import traceback
from enum import Enum
from typing import Any, ClassVar, TypedDict


class ErrorCode(Enum):
    """Standardized error codes for the Mutuals+ API."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred in the system."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Input validation failed due to invalid or malformed data."""

    NOT_FOUND = "NOT_FOUND"
    """The requested resource could not be found."""

    CONFLICT = "CONFLICT"
    """The request collides with existing state (duplicate unique field)."""

    UNAUTHORIZED = "UNAUTHORIZED"
    """No usable credential was presented."""

    INVALID_TOKEN = "INVALID_TOKEN"
    """The bearer token failed signature or structure checks."""

    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    """The bearer token is past its expiry."""

    FORBIDDEN = "FORBIDDEN"
    """The caller is authenticated but its role is not permitted."""

    RATE_LIMITED = "RATE_LIMITED"
    """The caller exhausted the quota of a route group."""

    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    """A third-party service call failed."""


class Severity(Enum):
    """Severity levels used to pick log levels and alerting."""

    LOW = "LOW"
    """Expected failures caused by client input."""

    MEDIUM = "MEDIUM"
    """Failures that affect a feature but not the service."""

    HIGH = "HIGH"
    """Security relevant or data integrity failures."""

    CRITICAL = "CRITICAL"
    """Failures requiring immediate attention."""


class FieldError(TypedDict):
    """A single field-level validation failure."""

    field: str
    message: str


class MutualsError(Exception):
    """Base exception class for all Mutuals+ application exceptions.

    Args:
        error_code: Unique identifier for the error type (string or ErrorCode enum)
        message: Human-readable error message, sent to the client as is
        severity: Severity level of the error (defaults to MEDIUM)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    status_code: ClassVar[int] = 500

    def __init__(
        self,
        error_code: str | ErrorCode,
        message: str,
        severity: Severity = Severity.MEDIUM,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.error_code = (
            error_code.value if isinstance(error_code, ErrorCode) else error_code
        )
        self.message = message
        self.severity = severity
        self.context = context or {}
        self.cause = cause

        # Exclude this frame
        self.stack_trace = traceback.format_stack()[:-1]
        self.fingerprint = self._generate_fingerprint()

        super().__init__(message)
        if cause:
            self.__cause__ = cause

    def _generate_fingerprint(self) -> str:
        """Generate a fingerprint for error grouping.

        Returns:
            str: A hash of the error type and the application frames that raised it
        """
        max_frames = 5
        relevant_frames = self.stack_trace[-max_frames:]

        fingerprint_data = f"{self.__class__.__name__}:{self.error_code}"
        for frame in relevant_frames:
            if "site-packages" not in frame and "mutuals/" in frame:
                lines = frame.strip().split("\n")
                if lines:
                    fingerprint_data += f":{lines[0]}"

        return hashlib.sha256(fingerprint_data.encode()).hexdigest()[:16]

    @property
    def is_expected(self) -> bool:
        """Whether this error is part of normal operation (LOW or MEDIUM)."""
        return self.severity in (Severity.LOW, Severity.MEDIUM)

    @property
    def headers(self) -> dict[str, str] | None:
        """Extra response headers to send with the error envelope."""
        return None

    @property
    def data(self) -> Any:  # noqa: ANN401 - envelope data is free-form
        """Payload for the envelope ``data`` field, if any."""
        return None

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        class_name = self.__class__.__name__
        context_str = f", context={self.context}" if self.context else ""
        return (
            f"{class_name}(error_code='{self.error_code}', "
            f"message='{self.message}', severity={self.severity.value}{context_str})"
        )


class ValidationError(MutualsError):
    """Raised when a request fails its declared field rules.

    Carries every violation found, not just the first one.

    Args:
        errors: Field-level failures, in rule declaration order
        message: Envelope message (defaults to "Validation failed")
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    status_code = 400

    def __init__(
        self,
        errors: list[FieldError] | None = None,
        message: str = "Validation failed",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.errors: list[FieldError] = list(errors or [])
        super().__init__(
            ErrorCode.VALIDATION_ERROR, message, Severity.LOW, context, cause
        )

    @property
    def data(self) -> list[FieldError] | None:
        return self.errors or None


class NotFoundError(MutualsError):
    """Raised when a requested resource does not exist."""

    status_code = 404

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.NOT_FOUND,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class ConflictError(MutualsError):
    """Raised when a write collides with existing state."""

    status_code = 400

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.CONFLICT,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class UnauthorizedError(MutualsError):
    """Raised when no valid credential accompanies the request."""

    status_code = 401

    def __init__(
        self,
        message: str = "No token provided",
        error_code: str | ErrorCode = ErrorCode.UNAUTHORIZED,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.MEDIUM, context, cause)


class InvalidTokenError(UnauthorizedError):
    """Raised when a bearer token fails verification."""

    def __init__(
        self,
        message: str = "Invalid token",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.INVALID_TOKEN, context, cause)


class TokenExpiredError(UnauthorizedError):
    """Raised when a bearer token is past its expiry."""

    def __init__(
        self,
        message: str = "Token expired",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.TOKEN_EXPIRED, context, cause)


class ForbiddenError(MutualsError):
    """Raised when the caller's role is not in the route's allow-list."""

    status_code = 403

    def __init__(
        self,
        message: str = "Not authorized to access this resource",
        error_code: str | ErrorCode = ErrorCode.FORBIDDEN,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.HIGH, context, cause)


class RateLimitError(MutualsError):
    """Raised when a client exceeds the quota of a route group.

    Args:
        message: Fixed, group specific message
        retry_after: Seconds until the window resets
        context: Additional context information about the error
    """

    status_code = 429

    def __init__(
        self,
        message: str = "Too many requests from this IP, please try again later.",
        retry_after: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        self.retry_after = retry_after
        super().__init__(ErrorCode.RATE_LIMITED, message, Severity.LOW, context)

    @property
    def headers(self) -> dict[str, str] | None:
        if self.retry_after is None:
            return None
        return {"Retry-After": str(max(self.retry_after, 0))}


class UpstreamError(MutualsError):
    """Raised when a third-party service call fails.

    Best-effort integrations catch this and carry on; anything that lets it
    escape turns into a 502.
    """

    status_code = 502

    def __init__(
        self,
        message: str,
        service: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.service = service
        super().__init__(
            ErrorCode.UPSTREAM_ERROR,
            message,
            Severity.HIGH,
            {"service": service, **(context or {})},
            cause,
        )


class StoreUnavailableError(Exception):
    """Raised by key-value store backends when the store cannot be reached.

    This never reaches the client: the cache and rate limit layers log it and
    fall back to running without the store.
    """
