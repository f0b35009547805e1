"""Shared fixtures for integration tests.

Each test gets a fresh application running its real lifespan against a
throwaway SQLite database and the in-process key-value store, so the full
gate pipeline (rate limit, auth, validation, cache) runs exactly as in
production. Outbound email and mailing list calls stay unconfigured and
degrade to logged warnings.
"""

import itertools
from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from mutuals.api.main import create_app
from mutuals.core.config import Settings, get_settings
from mutuals.infrastructure.database import models  # noqa: F401 - registers tables
from mutuals.infrastructure.database.base import Base
from mutuals.infrastructure.database.session import _db_manager, get_engine

API = "/api/v1"

AuthHeadersFactory = Callable[..., Awaitable[dict[str, str]]]

_emails = itertools.count(1)


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Settings pointing at a per-test SQLite file and no external services."""
    monkeypatch.setenv(
        "DATABASE_CONFIG__DATABASE_URL",
        f"sqlite+aiosqlite:///{tmp_path / 'mutuals_test.db'}",
    )
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("API_PREFIX", API)
    for name in (
        "CACHE_CONFIG__REDIS_URL",
        "EMAIL_CONFIG__SENDGRID_API_KEY",
        "MAILING_LIST_CONFIG__API_KEY",
        "RATE_LIMIT_CONFIG__ENABLED",
    ):
        monkeypatch.delenv(name, raising=False)

    get_settings.cache_clear()
    return get_settings()


@pytest.fixture
async def app(settings: Settings) -> AsyncGenerator[FastAPI]:
    """Application with its schema created and lifespan entered."""
    _db_manager.reset()
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    application = create_app(settings)
    async with application.router.lifespan_context(application):
        yield application

    _db_manager.reset()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """HTTP client speaking to the app in-process.

    Application exceptions are rendered by the handlers instead of being
    re-raised into the test.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def unique_email() -> Callable[[str], str]:
    """Generate addresses that never collide within a test session."""

    def _make(prefix: str = "user") -> str:
        return f"{prefix}{next(_emails)}@example.com"

    return _make


@pytest.fixture
def auth_headers(
    client: AsyncClient, unique_email: Callable[[str], str]
) -> AuthHeadersFactory:
    """Register a user with the given role and return its bearer headers.

    Usage:
        headers = await auth_headers("ADMIN")
    """

    async def _make(role: str = "EDITOR") -> dict[str, str]:
        response = await client.post(
            f"{API}/auth/register",
            json={
                "email": unique_email(role.lower()),
                "password": "s3cret-pass",
                "firstName": "Test",
                "lastName": role.title(),
                "role": role,
            },
        )
        assert response.status_code == 201, response.text
        token = response.json()["data"]["accessToken"]
        return {"Authorization": f"Bearer {token}"}

    return _make
