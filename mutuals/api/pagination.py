"""Page/limit parsing shared by every listing endpoint."""

import math
import re
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request

from mutuals.core.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True, slots=True)
class PageParams:
    """Clamped pagination window."""

    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def parse_int(raw: str | int | None) -> int | None:
    """Leading integer of ``raw``; None when there is none."""
    if raw is None:
        return None
    if isinstance(raw, int):
        return raw
    match = _LEADING_INT.match(raw)
    return int(match.group(1)) if match else None


def parse_pagination(
    page: str | int | None = None, limit: str | int | None = None
) -> PageParams:
    """Normalize raw ``page`` and ``limit`` query values.

    Missing or unparsable values fall back to the defaults; anything
    else, zero and negatives included, is clamped to ``page >= 1`` and
    ``1 <= limit <= 100``.

    Example:
        >>> parse_pagination("0", "500")
        PageParams(page=1, limit=100)
    """
    page_number = parse_int(page)
    if page_number is None:
        page_number = DEFAULT_PAGE
    page_size = parse_int(limit)
    if page_size is None:
        page_size = DEFAULT_PAGE_SIZE
    return PageParams(
        page=max(DEFAULT_PAGE, page_number),
        limit=min(MAX_PAGE_SIZE, max(1, page_size)),
    )


def pagination_meta(total: int, page: int, limit: int) -> dict[str, int]:
    """Build the ``meta`` block of a paginated envelope."""
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": math.ceil(total / limit) if limit else 0,
    }


def get_pagination(request: Request) -> PageParams:
    """Read ``page``/``limit`` from the query string."""
    return parse_pagination(
        request.query_params.get("page"), request.query_params.get("limit")
    )


Pagination = Annotated[PageParams, Depends(get_pagination)]
