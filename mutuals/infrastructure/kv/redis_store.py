"""Redis-backed key-value store."""

from typing import Any

import redis.asyncio as redis
from loguru import logger
from redis.exceptions import RedisError

from mutuals.core.exceptions import StoreUnavailableError


class RedisStore:
    """``KeyValueStore`` backed by redis.asyncio.

    Every Redis failure surfaces as ``StoreUnavailableError`` so callers
    never depend on the client library's exception types.

    Args:
        client: Connected redis.asyncio client.
    """

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str, socket_timeout: float | None = None) -> "RedisStore":
        """Create a store with its own connection pool."""
        client = redis.from_url(
            url,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        return cls(client)

    async def _call(self, operation: str, coro: Any) -> Any:  # noqa: ANN401
        try:
            return await coro
        except RedisError as e:
            raise StoreUnavailableError(f"Redis {operation} failed: {e}") from e

    async def get(self, key: str) -> bytes | None:
        return await self._call("GET", self._client.get(key))

    async def set(self, key: str, value: bytes, ttl: int | None = None) -> None:
        await self._call("SET", self._client.set(key, value, ex=ttl))

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return int(await self._call("DEL", self._client.delete(*keys)))

    async def keys(self, pattern: str) -> list[str]:
        async def collect() -> list[str]:
            return [
                key.decode() if isinstance(key, bytes) else key
                async for key in self._client.scan_iter(match=pattern, count=500)
            ]

        return await self._call("SCAN", collect())

    async def incr(self, key: str, ttl: int) -> tuple[int, int]:
        async def run() -> tuple[int, int]:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.incr(key)
                pipe.expire(key, ttl, nx=True)
                pipe.ttl(key)
                count, _, remaining = await pipe.execute()
            return int(count), max(int(remaining), 0)

        return await self._call("INCR", run())

    async def decr(self, key: str) -> int:
        return int(await self._call("DECR", self._client.decr(key)))

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError as e:
            logger.warning("Redis ping failed: {}", e)
            return False

    async def close(self) -> None:
        await self._client.aclose()
