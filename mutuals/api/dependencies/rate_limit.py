"""Fixed-window rate limiting per client address and route group.

Counters live in the shared key-value store under
``ratelimit:<group>:<client-ip>``. The window starts with the first request
a client makes in a group and the counter resets when it expires.

If the store cannot be reached the request is let through: a store outage
degrades throttling, never availability.
"""

from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass

from fastapi import Request
from loguru import logger

from mutuals.api.client import get_client_ip
from mutuals.core.config import RateLimitConfig, RateLimitRule
from mutuals.core.exceptions import RateLimitError, StoreUnavailableError
from mutuals.infrastructure.constants import RATE_LIMIT_KEY_PREFIX
from mutuals.infrastructure.kv import KeyValueStore


@dataclass(frozen=True, slots=True)
class RateLimitDecision:
    """Outcome of counting one request against a group quota."""

    allowed: bool
    count: int
    limit: int
    reset_in: int

    @property
    def remaining(self) -> int:
        return max(self.limit - self.count, 0)


class RateLimiter:
    """Counts requests per (group, client) in a ``KeyValueStore``.

    Args:
        store: Shared key-value store.
        config: Quotas per group and proxy trust settings.
    """

    def __init__(self, store: KeyValueStore, config: RateLimitConfig) -> None:
        self.store = store
        self.config = config

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def rule(self, group: str) -> RateLimitRule:
        """Quota for ``group``.

        Raises:
            KeyError: The group is not configured.
        """
        return self.config.groups[group]

    def client_key(self, request: Request, group: str) -> str:
        client_ip = get_client_ip(request, self.config.trust_proxy_headers)
        return f"{RATE_LIMIT_KEY_PREFIX}{group}:{client_ip}"

    async def hit(self, key: str, rule: RateLimitRule) -> RateLimitDecision | None:
        """Count one request.

        Returns:
            The decision, or None when the store is unavailable.
        """
        try:
            count, reset_in = await self.store.incr(key, rule.window_seconds)
        except StoreUnavailableError as e:
            logger.warning("Rate limit store unavailable, allowing request: {}", e)
            return None

        return RateLimitDecision(
            allowed=count <= rule.max_requests,
            count=count,
            limit=rule.max_requests,
            reset_in=reset_in,
        )

    async def release(self, key: str) -> None:
        """Give back one request, used when successful requests are not counted."""
        try:
            await self.store.decr(key)
        except StoreUnavailableError as e:
            logger.warning("Rate limit store unavailable on release: {}", e)


def get_rate_limiter(request: Request) -> RateLimiter:
    """The limiter built at startup."""
    return request.app.state.rate_limiter


def rate_limit(group: str) -> Callable[[Request], AsyncIterator[None]]:
    """Build a rate limit gate for a route group.

    Args:
        group: Name of a group in ``RateLimitConfig.groups``.

    Returns:
        A FastAPI dependency that raises ``RateLimitError`` once the client
        exceeds the group quota.
    """

    async def limit(request: Request) -> AsyncIterator[None]:
        limiter = get_rate_limiter(request)
        if not limiter.enabled:
            yield
            return

        rule = limiter.rule(group)
        key = limiter.client_key(request, group)
        decision = await limiter.hit(key, rule)

        if decision is not None and not decision.allowed:
            logger.warning(
                "Rate limit exceeded for group {}",
                group,
                rate_limit_key=key,
                count=decision.count,
                limit=decision.limit,
            )
            raise RateLimitError(
                rule.message,
                retry_after=decision.reset_in,
                context={"group": group},
            )

        # Anything raised downstream is re-thrown here, so reaching the
        # release means the request succeeded.
        yield

        if decision is not None and rule.skip_successful_requests:
            await limiter.release(key)

    limit.__name__ = f"rate_limit_{group}"
    return limit
