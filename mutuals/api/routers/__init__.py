"""Module routers, assembled under the general rate limit."""

from fastapi import APIRouter, Depends

from mutuals.api.dependencies import rate_limit
from mutuals.api.routers import articles, auth, newsletter, submissions


def build_api_router(prefix: str) -> APIRouter:
    """All module routers mounted under ``prefix``.

    The general rate limit applies to every route; stricter groups are
    attached per route on top of it.
    """
    api_router = APIRouter(prefix=prefix, dependencies=[Depends(rate_limit("general"))])
    for module in (auth, articles, newsletter, submissions):
        api_router.include_router(module.router)
    return api_router


__all__ = ["build_api_router"]
