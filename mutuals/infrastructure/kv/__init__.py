"""Key-value store backends for the response cache and the rate limiter."""

from loguru import logger

from mutuals.core.config import CacheConfig
from mutuals.infrastructure.kv.base import KeyValueStore
from mutuals.infrastructure.kv.memory_store import MemoryStore
from mutuals.infrastructure.kv.redis_store import RedisStore


def create_store(config: CacheConfig) -> KeyValueStore:
    """Build the store selected by configuration.

    Args:
        config: Cache settings; ``redis_url`` selects Redis.

    Returns:
        KeyValueStore: A Redis store, or an in-process one when no URL is set.
    """
    if config.redis_url:
        logger.info("Using Redis key-value store")
        return RedisStore.from_url(config.redis_url, config.socket_timeout)

    logger.warning("No Redis URL configured, using in-process key-value store")
    return MemoryStore()


__all__ = ["KeyValueStore", "MemoryStore", "RedisStore", "create_store"]
