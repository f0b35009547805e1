"""Pydantic models describing the API wire format for OpenAPI."""

from mutuals.api.schemas.envelope import (
    ERROR_RESPONSES,
    Envelope,
    ErrorEnvelope,
    FieldErrorDetail,
    PaginationMeta,
)

__all__ = [
    "ERROR_RESPONSES",
    "Envelope",
    "ErrorEnvelope",
    "FieldErrorDetail",
    "PaginationMeta",
]
