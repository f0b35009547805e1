"""Response envelope models.

These describe the wire shape for OpenAPI; responses themselves are built by
``mutuals.api.utils.responses``.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PaginationMeta(BaseModel):
    """Paging information attached to list responses."""

    model_config = ConfigDict(populate_by_name=True)

    total: int = Field(..., ge=0, description="Rows matching the filters")
    page: int = Field(..., ge=1, description="Current page, 1-based")
    limit: int = Field(..., ge=1, le=100, description="Page size")
    total_pages: int = Field(
        ..., ge=0, alias="totalPages", description="ceil(total / limit)"
    )


class FieldErrorDetail(BaseModel):
    """A single field-level validation failure."""

    field: str = Field(..., examples=["email"])
    message: str = Field(..., examples=["Please provide a valid email"])


class Envelope(BaseModel):
    """Shape shared by every JSON response."""

    success: bool = Field(..., description="Whether the request succeeded")
    message: str = Field(..., description="Human-readable outcome")
    data: Any | None = Field(default=None, description="Payload, when any")
    meta: PaginationMeta | None = Field(
        default=None, description="Present on paginated lists only"
    )


class ErrorEnvelope(BaseModel):
    """Failure envelope, as produced by the terminal error handlers."""

    success: bool = Field(default=False)
    message: str = Field(..., examples=["Validation failed"])
    data: list[FieldErrorDetail] | None = Field(
        default=None, description="Field errors on validation failures"
    )
    stack: str | None = Field(
        default=None, description="Stack trace, development only"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "success": False,
                    "message": "Validation failed",
                    "data": [
                        {"field": "email", "message": "Please provide a valid email"}
                    ],
                },
                {"success": False, "message": "Article not found"},
                {
                    "success": False,
                    "message": "Too many requests from this IP, please try again later.",
                },
            ]
        }
    )


ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorEnvelope, "description": "Validation or conflict error"},
    401: {"model": ErrorEnvelope, "description": "Missing or invalid token"},
    403: {"model": ErrorEnvelope, "description": "Role not permitted"},
    404: {"model": ErrorEnvelope, "description": "Resource not found"},
    429: {"model": ErrorEnvelope, "description": "Rate limit exceeded"},
}
