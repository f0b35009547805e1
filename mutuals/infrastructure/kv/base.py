"""Contract shared by the key-value store backends.

The response cache and the rate limiter only ever talk to a
``KeyValueStore``. Every operation touches a single key (or a key set
resolved first), so no in-process locking is needed on top of it.

Backends raise ``StoreUnavailableError`` when the store cannot be reached;
callers decide whether to degrade or propagate.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """Async key-value store with per-key expiry."""

    async def get(self, key: str) -> bytes | None:
        """Return the value stored under ``key`` or None if absent or expired."""
        ...

    async def set(self, key: str, value: bytes, ttl: int | None = None) -> None:
        """Store ``value`` under ``key``, expiring after ``ttl`` seconds."""
        ...

    async def delete(self, *keys: str) -> int:
        """Delete the given keys and return how many existed."""
        ...

    async def keys(self, pattern: str) -> list[str]:
        """List live keys matching a glob-style pattern."""
        ...

    async def incr(self, key: str, ttl: int) -> tuple[int, int]:
        """Atomically increment a counter.

        The expiry starts with the first increment of a window and is not
        extended by later ones.

        Returns:
            tuple[int, int]: The new count and the seconds until it resets.
        """
        ...

    async def decr(self, key: str) -> int:
        """Decrement a counter without touching its expiry."""
        ...

    async def ping(self) -> bool:
        """Check that the store answers."""
        ...

    async def close(self) -> None:
        """Release connections held by the backend."""
        ...
