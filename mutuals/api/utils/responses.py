"""orjson responses and the uniform response envelope.

Every JSON body the API sends has the shape::

    {"success": bool, "message": str, "data"?: any, "meta"?: PaginationMeta}

The helpers below are the only way routes and handlers build responses, so
the envelope cannot drift between modules.
"""

from typing import Any

import orjson
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from starlette import status

from mutuals.api.pagination import pagination_meta


def _default(value: Any) -> Any:  # noqa: ANN401 - orjson fallback hook
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    raise TypeError


class ORJSONResponse(JSONResponse):
    """JSON response serialized with orjson, keys sorted for stable output.

    Pydantic models are dumped by alias, so domain schemas render with their
    camelCase wire names.
    """

    media_type = "application/json"

    def render(self, content: Any) -> bytes:  # noqa: ANN401 - any JSON-serializable content
        if isinstance(content, BaseModel):
            content = content.model_dump(mode="json", by_alias=True)
        return orjson.dumps(content, default=_default, option=orjson.OPT_SORT_KEYS)


def envelope(
    success: bool,
    message: str,
    data: Any = None,  # noqa: ANN401
    meta: dict[str, int] | None = None,
) -> dict[str, Any]:
    """Build an envelope body; ``data`` and ``meta`` are omitted when None."""
    body: dict[str, Any] = {"success": success, "message": message}
    if data is not None:
        body["data"] = data
    if meta is not None:
        body["meta"] = meta
    return body


def success_response(
    data: Any = None,  # noqa: ANN401
    message: str = "Success",
    status_code: int = status.HTTP_200_OK,
) -> ORJSONResponse:
    """Plain success envelope."""
    return ORJSONResponse(envelope(True, message, data), status_code=status_code)


def created_response(
    data: Any = None,  # noqa: ANN401
    message: str = "Resource created successfully",
) -> ORJSONResponse:
    """Success envelope with status 201."""
    return success_response(data, message, status.HTTP_201_CREATED)


def no_content_response() -> Response:
    """Empty 204 response; a 204 cannot carry an envelope body."""
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def paginated_response(
    data: list[Any],
    total: int,
    page: int,
    limit: int,
    message: str = "Success",
) -> ORJSONResponse:
    """Success envelope with ``meta`` computed from the total row count."""
    return ORJSONResponse(
        envelope(True, message, data, pagination_meta(total, page, limit))
    )


def error_response(
    message: str,
    status_code: int = status.HTTP_400_BAD_REQUEST,
    errors: Any = None,  # noqa: ANN401
    headers: dict[str, str] | None = None,
) -> ORJSONResponse:
    """Failure envelope; ``data`` carries the error details when present."""
    return ORJSONResponse(
        envelope(False, message, errors or None),
        status_code=status_code,
        headers=headers,
    )
