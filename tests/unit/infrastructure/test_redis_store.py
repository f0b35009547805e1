"""Unit tests for the Redis key-value store adapter."""

import pytest
from pytest_mock import MockerFixture, MockType
from redis.exceptions import ConnectionError as RedisConnectionError

from mutuals.core.exceptions import StoreUnavailableError
from mutuals.infrastructure.kv import RedisStore


@pytest.fixture
def redis_client(mocker: MockerFixture) -> MockType:
    """Mock redis.asyncio client."""
    return mocker.AsyncMock()


@pytest.mark.unit
class TestRedisStore:
    """Test suite for RedisStore."""

    async def test_set_passes_ttl_as_expiry(self, redis_client: MockType) -> None:
        """Test that the TTL is forwarded as the EX option."""
        store = RedisStore(redis_client)

        await store.set("key", b"value", ttl=30)

        redis_client.set.assert_awaited_once_with("key", b"value", ex=30)

    async def test_delete_without_keys_skips_redis(self, redis_client: MockType) -> None:
        """Test that an empty delete does not issue a DEL command."""
        store = RedisStore(redis_client)

        removed = await store.delete()

        assert removed == 0
        redis_client.delete.assert_not_called()

    async def test_redis_errors_become_store_unavailable(
        self, redis_client: MockType
    ) -> None:
        """Test that client failures surface as StoreUnavailableError."""
        # Arrange
        redis_client.get.side_effect = RedisConnectionError("connection refused")
        store = RedisStore(redis_client)

        # Act & Assert
        with pytest.raises(StoreUnavailableError, match="Redis GET failed"):
            await store.get("key")

    async def test_ping_failure_reports_false(self, redis_client: MockType) -> None:
        """Test that a failed ping is reported, not raised."""
        redis_client.ping.side_effect = RedisConnectionError("down")
        store = RedisStore(redis_client)

        assert await store.ping() is False
