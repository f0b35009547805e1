"""Response caching for read routes and purging on writes.

``cache_response`` stores the exact bytes of a successful GET response under
``cache:<path>?<query>`` and replays them on the next hit without running the
handler. ``invalidate_cache`` deletes every key matching its patterns once a
write returns 2xx. The request's database session is committed before the
purge, so a concurrent read cannot cache rows that are not yet visible.

Both decorators sit below the route decorator, so they run after the rate
limit, auth and validation gates. Store failures are logged and the request
proceeds uncached.
"""

import functools
import inspect
from collections.abc import Awaitable, Callable
from typing import Any, ParamSpec

import orjson
from fastapi import Request, Response
from loguru import logger

from mutuals.api.constants import CACHEABLE_METHOD
from mutuals.core.config import CacheConfig
from mutuals.core.exceptions import StoreUnavailableError
from mutuals.infrastructure.kv import KeyValueStore

P = ParamSpec("P")

CACHE_STATUS_HEADER = "X-Cache"


class ResponseCache:
    """Stores rendered responses in a ``KeyValueStore``.

    Args:
        store: Shared key-value store.
        config: Key prefix and default TTL.
    """

    def __init__(self, store: KeyValueStore, config: CacheConfig) -> None:
        self.store = store
        self.config = config

    def key_for(self, request: Request) -> str:
        """Cache key for the full request URL, query string included."""
        key = f"{self.config.key_prefix}{request.url.path}"
        if request.url.query:
            key += f"?{request.url.query}"
        return key

    async def get(self, key: str) -> Response | None:
        try:
            raw = await self.store.get(key)
        except StoreUnavailableError as e:
            logger.warning("Cache read failed for {}: {}", key, e)
            return None
        if raw is None:
            return None

        record = orjson.loads(raw)
        return Response(
            content=record["body"].encode(),
            status_code=record["status"],
            media_type=record["media_type"],
        )

    async def set(self, key: str, response: Response, ttl: int | None = None) -> None:
        record = {
            "status": response.status_code,
            "media_type": response.media_type,
            "body": bytes(response.body).decode(),
        }
        try:
            await self.store.set(key, orjson.dumps(record), ttl or self.config.default_ttl)
        except StoreUnavailableError as e:
            logger.warning("Cache write failed for {}: {}", key, e)

    async def invalidate(self, *patterns: str) -> int:
        """Delete every key matching any of ``patterns``.

        Returns:
            Number of keys removed.
        """
        removed = 0
        for pattern in patterns:
            try:
                keys = await self.store.keys(pattern)
                if keys:
                    removed += await self.store.delete(*keys)
            except StoreUnavailableError as e:
                logger.warning("Cache invalidation failed for {}: {}", pattern, e)
        if removed:
            logger.debug("Invalidated {} cached responses", removed, patterns=patterns)
        return removed


def get_response_cache(request: Request) -> ResponseCache:
    """The response cache built at startup."""
    return request.app.state.response_cache


def _request_argument(
    handler: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]
) -> Request:
    bound = inspect.signature(handler).bind_partial(*args, **kwargs)
    return bound.arguments["request"]


def _require_request_parameter(handler: Callable[..., Any]) -> None:
    if "request" not in inspect.signature(handler).parameters:
        msg = f"{handler.__name__} must accept a 'request: Request' parameter"
        raise TypeError(msg)


def cache_response(
    ttl: int | None = None,
) -> Callable[[Callable[P, Awaitable[Response]]], Callable[P, Awaitable[Response]]]:
    """Cache successful GET responses of a route.

    Args:
        ttl: Seconds to keep a response; defaults to ``CacheConfig.default_ttl``.

    Returns:
        A decorator for async route handlers taking ``request: Request``.
    """

    def decorator(
        handler: Callable[P, Awaitable[Response]],
    ) -> Callable[P, Awaitable[Response]]:
        _require_request_parameter(handler)

        @functools.wraps(handler)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> Response:
            request = _request_argument(handler, args, kwargs)
            if request.method != CACHEABLE_METHOD:
                return await handler(*args, **kwargs)

            cache = get_response_cache(request)
            key = cache.key_for(request)

            cached = await cache.get(key)
            if cached is not None:
                logger.debug("Cache hit for {}", key)
                cached.headers[CACHE_STATUS_HEADER] = "HIT"
                return cached

            response = await handler(*args, **kwargs)
            if 200 <= response.status_code < 300:
                await cache.set(key, response, ttl)
            response.headers[CACHE_STATUS_HEADER] = "MISS"
            return response

        return wrapper

    return decorator


def invalidate_cache(
    *patterns: str,
) -> Callable[[Callable[P, Awaitable[Response]]], Callable[P, Awaitable[Response]]]:
    """Commit the write, then purge cached responses.

    Patterns are glob-style and may reference the application's API prefix
    as ``{api_prefix}``, e.g. ``cache:{api_prefix}/articles*``. A failed
    commit propagates and nothing is purged.

    Returns:
        A decorator for async route handlers taking ``request: Request``.
    """

    def decorator(
        handler: Callable[P, Awaitable[Response]],
    ) -> Callable[P, Awaitable[Response]]:
        _require_request_parameter(handler)

        @functools.wraps(handler)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> Response:
            request = _request_argument(handler, args, kwargs)
            response = await handler(*args, **kwargs)

            if 200 <= response.status_code < 300:
                # Readers must not refill the cache from pre-commit rows.
                session = getattr(request.state, "db_session", None)
                if session is not None:
                    await session.commit()
                api_prefix = request.app.state.settings.api_prefix
                await get_response_cache(request).invalidate(
                    *(p.format(api_prefix=api_prefix) for p in patterns)
                )
            return response

        return wrapper

    return decorator
