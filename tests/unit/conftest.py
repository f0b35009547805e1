"""Fixtures shared by unit tests."""

from collections.abc import Callable
from typing import Any

import pytest
from fastapi import FastAPI
from starlette.requests import Request
from starlette.types import Message

from mutuals.core.config import AuthConfig, CacheConfig, RateLimitConfig
from mutuals.infrastructure.kv import MemoryStore

RequestFactory = Callable[..., Request]


class FakeClock:
    """Manually advanced monotonic clock for store expiry tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """A clock that only moves when the test says so."""
    return FakeClock()


@pytest.fixture
def advance_clock(clock: FakeClock) -> Callable[[float], None]:
    """Move the fake clock forward by a number of seconds."""
    return clock.advance


@pytest.fixture
def memory_store(clock: FakeClock) -> MemoryStore:
    """In-process store driven by the fake clock."""
    return MemoryStore(clock=clock)


@pytest.fixture
def auth_config() -> AuthConfig:
    """Token settings with a known secret and fast hashing."""
    return AuthConfig(
        jwt_secret="unit-test-secret",
        jwt_refresh_secret="unit-test-refresh-secret",
        bcrypt_rounds=4,
    )


@pytest.fixture
def cache_config() -> CacheConfig:
    return CacheConfig(default_ttl=60)


@pytest.fixture
def rate_limit_config() -> RateLimitConfig:
    return RateLimitConfig()


@pytest.fixture
def make_request() -> RequestFactory:
    """Build real Starlette requests from a hand-written ASGI scope.

    Usage:
        request = make_request("POST", "/api/v1/auth/login", body=b"{}")
    """

    def _make(
        method: str = "GET",
        path: str = "/api/v1/test",
        *,
        query: str = "",
        headers: dict[str, str] | None = None,
        body: bytes = b"",
        path_params: dict[str, Any] | None = None,
        client: tuple[str, int] | None = ("127.0.0.1", 50000),
        app: FastAPI | None = None,
    ) -> Request:
        scope: dict[str, Any] = {
            "type": "http",
            "http_version": "1.1",
            "method": method,
            "scheme": "http",
            "server": ("testserver", 80),
            "root_path": "",
            "path": path,
            "raw_path": path.encode(),
            "query_string": query.encode(),
            "headers": [
                (name.lower().encode(), value.encode())
                for name, value in (headers or {}).items()
            ],
            "path_params": path_params or {},
            "client": client,
        }
        if app is not None:
            scope["app"] = app

        async def receive() -> Message:
            return {"type": "http.request", "body": body, "more_body": False}

        return Request(scope, receive)

    return _make
