"""Unit tests for the in-process key-value store."""

from collections.abc import Callable

import pytest

from mutuals.core.config import CacheConfig
from mutuals.infrastructure.kv import MemoryStore, RedisStore, create_store
from mutuals.infrastructure.kv.memory_store import SWEEP_INTERVAL


@pytest.mark.unit
class TestMemoryStore:
    """Test suite for MemoryStore."""

    async def test_get_returns_stored_bytes(self, memory_store: MemoryStore) -> None:
        """Test that a stored value is returned unchanged."""
        # Arrange
        await memory_store.set("key", b"value")

        # Act
        result = await memory_store.get("key")

        # Assert
        assert result == b"value"

    async def test_get_missing_key_returns_none(self, memory_store: MemoryStore) -> None:
        """Test that unknown keys read as None."""
        assert await memory_store.get("missing") is None

    async def test_value_expires_after_ttl(
        self,
        memory_store: MemoryStore,
        advance_clock: Callable[[float], None],
    ) -> None:
        """Test that a value with a TTL disappears once the TTL has passed."""
        # Arrange
        await memory_store.set("key", b"value", ttl=10)

        # Act
        advance_clock(9)
        before_expiry = await memory_store.get("key")
        advance_clock(1)
        after_expiry = await memory_store.get("key")

        # Assert
        assert before_expiry == b"value"
        assert after_expiry is None

    async def test_value_without_ttl_never_expires(
        self,
        memory_store: MemoryStore,
        advance_clock: Callable[[float], None],
    ) -> None:
        """Test that values stored without a TTL are kept indefinitely."""
        await memory_store.set("key", b"value")
        advance_clock(10**6)

        assert await memory_store.get("key") == b"value"

    async def test_delete_counts_only_live_keys(
        self,
        memory_store: MemoryStore,
        advance_clock: Callable[[float], None],
    ) -> None:
        """Test that delete reports how many live keys it removed."""
        # Arrange
        await memory_store.set("a", b"1")
        await memory_store.set("b", b"2", ttl=1)
        advance_clock(2)

        # Act
        removed = await memory_store.delete("a", "b", "c")

        # Assert
        assert removed == 1
        assert await memory_store.get("a") is None

    async def test_writes_sweep_expired_keys_that_are_never_read(
        self,
        memory_store: MemoryStore,
        advance_clock: Callable[[float], None],
    ) -> None:
        """Test that expired entries nobody reads again are swept by a later write."""
        # Arrange
        await memory_store.set("ratelimit:gone", b"1", ttl=1)
        await memory_store.incr("ratelimit:counter", ttl=5)
        await memory_store.set("kept", b"2", ttl=600)
        advance_clock(SWEEP_INTERVAL)

        # Act
        await memory_store.set("fresh", b"3")

        # Assert
        assert sorted(memory_store._data) == ["fresh", "kept"]

    async def test_sweep_waits_for_the_interval(
        self,
        memory_store: MemoryStore,
        advance_clock: Callable[[float], None],
    ) -> None:
        """Test that writes inside the interval leave expired entries to lazy expiry."""
        await memory_store.set("gone", b"1", ttl=1)
        advance_clock(2)

        await memory_store.set("fresh", b"2")

        assert "gone" in memory_store._data
        assert await memory_store.get("gone") is None

    async def test_keys_matches_glob_pattern(self, memory_store: MemoryStore) -> None:
        """Test that keys supports the glob patterns used for cache purges."""
        # Arrange
        await memory_store.set("cache:/api/v1/articles", b"1")
        await memory_store.set("cache:/api/v1/articles?page=2", b"2")
        await memory_store.set("cache:/api/v1/articles/featured", b"3")
        await memory_store.set("cache:/api/v1/newsletter/stats", b"4")

        # Act
        keys = await memory_store.keys("cache:/api/v1/articles*")

        # Assert
        assert sorted(keys) == [
            "cache:/api/v1/articles",
            "cache:/api/v1/articles/featured",
            "cache:/api/v1/articles?page=2",
        ]

    async def test_incr_starts_window_on_first_hit(
        self,
        memory_store: MemoryStore,
        advance_clock: Callable[[float], None],
    ) -> None:
        """Test that the window is fixed by the first increment."""
        # Act
        first = await memory_store.incr("counter", ttl=60)
        advance_clock(20)
        second = await memory_store.incr("counter", ttl=60)

        # Assert
        assert first == (1, 60)
        assert second == (2, 40)

    async def test_incr_resets_after_window(
        self,
        memory_store: MemoryStore,
        advance_clock: Callable[[float], None],
    ) -> None:
        """Test that the counter starts over once its window expires."""
        # Arrange
        await memory_store.incr("counter", ttl=60)
        await memory_store.incr("counter", ttl=60)

        # Act
        advance_clock(60)
        count, reset_in = await memory_store.incr("counter", ttl=60)

        # Assert
        assert count == 1
        assert reset_in == 60

    async def test_counter_reads_back_as_bytes(self, memory_store: MemoryStore) -> None:
        """Test that counters are readable through get like Redis integers."""
        await memory_store.incr("counter", ttl=60)
        await memory_store.incr("counter", ttl=60)

        assert await memory_store.get("counter") == b"2"

    async def test_decr_never_goes_below_zero(self, memory_store: MemoryStore) -> None:
        """Test that releasing more hits than were counted floors at zero."""
        # Arrange
        await memory_store.incr("counter", ttl=60)

        # Act
        first = await memory_store.decr("counter")
        second = await memory_store.decr("counter")
        missing = await memory_store.decr("unknown")

        # Assert
        assert (first, second, missing) == (0, 0, 0)

    async def test_close_clears_all_data(self, memory_store: MemoryStore) -> None:
        """Test that closing the store drops everything it held."""
        await memory_store.set("key", b"value")

        await memory_store.close()

        assert await memory_store.get("key") is None
        assert await memory_store.ping() is True


@pytest.mark.unit
class TestCreateStore:
    """Test suite for backend selection."""

    def test_without_redis_url_uses_memory_store(self) -> None:
        """Test that the in-process store is the fallback backend."""
        store = create_store(CacheConfig())

        assert isinstance(store, MemoryStore)

    def test_with_redis_url_uses_redis_store(self) -> None:
        """Test that a configured Redis URL selects the Redis backend."""
        store = create_store(CacheConfig(redis_url="redis://localhost:6379/0"))

        assert isinstance(store, RedisStore)

    def test_empty_redis_url_is_treated_as_unset(self) -> None:
        """Test that an empty REDIS_URL falls back to the in-process store."""
        store = create_store(CacheConfig(redis_url=""))

        assert isinstance(store, MemoryStore)
