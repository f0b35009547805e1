"""In-process key-value store.

Used when no Redis URL is configured (single-process development) and in
tests, where the clock is injected so window expiry can be driven without
sleeping. Expired entries are dropped on access and by a periodic sweep
on writes, so keys that are never read again do not accumulate.
"""

import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from fnmatch import fnmatchcase

SWEEP_INTERVAL = 60.0


@dataclass(slots=True)
class _Entry:
    value: bytes | int
    expires_at: float | None


class MemoryStore:
    """Dict-backed ``KeyValueStore`` with lazy expiry and a periodic sweep.

    Args:
        clock: Monotonic time source in seconds.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._data: dict[str, _Entry] = {}
        self._next_sweep = clock() + SWEEP_INTERVAL

    def _live(self, key: str) -> _Entry | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        if entry.expires_at is not None and entry.expires_at <= self._clock():
            del self._data[key]
            return None
        return entry

    def _sweep(self) -> None:
        now = self._clock()
        if now < self._next_sweep:
            return
        self._next_sweep = now + SWEEP_INTERVAL
        expired = [
            key
            for key, entry in self._data.items()
            if entry.expires_at is not None and entry.expires_at <= now
        ]
        for key in expired:
            del self._data[key]

    async def get(self, key: str) -> bytes | None:
        entry = self._live(key)
        if entry is None:
            return None
        if isinstance(entry.value, int):
            return str(entry.value).encode()
        return entry.value

    async def set(self, key: str, value: bytes, ttl: int | None = None) -> None:
        self._sweep()
        expires_at = self._clock() + ttl if ttl else None
        self._data[key] = _Entry(value, expires_at)

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._live(key) is not None:
                del self._data[key]
                removed += 1
        return removed

    async def keys(self, pattern: str) -> list[str]:
        return [
            key
            for key in list(self._data)
            if fnmatchcase(key, pattern) and self._live(key) is not None
        ]

    async def incr(self, key: str, ttl: int) -> tuple[int, int]:
        self._sweep()
        now = self._clock()
        entry = self._live(key)
        if entry is None or not isinstance(entry.value, int):
            entry = _Entry(0, now + ttl)
            self._data[key] = entry
        entry.value = int(entry.value) + 1
        expires_at = entry.expires_at if entry.expires_at is not None else now + ttl
        return entry.value, max(math.ceil(expires_at - now), 0)

    async def decr(self, key: str) -> int:
        entry = self._live(key)
        if entry is None or not isinstance(entry.value, int):
            return 0
        entry.value = max(entry.value - 1, 0)
        return entry.value

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._data.clear()
