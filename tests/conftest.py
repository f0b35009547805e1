"""Root conftest.py for the Mutuals+ API test suite.

This file contains project-wide fixtures and pytest configuration.
"""

import os
from collections.abc import Generator

import pytest
from loguru import logger

# Cheap hashing for every test that registers or logs in a user
os.environ.setdefault("AUTH_CONFIG__BCRYPT_ROUNDS", "4")

from mutuals.core import logging as mutuals_logging  # noqa: E402
from mutuals.core.config import get_settings  # noqa: E402
from mutuals.core.context import RequestContext  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that test multiple components"
    )


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None]:
    """Give every test a fresh settings instance built from its environment."""
    get_settings.cache_clear()

    yield

    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def clean_request_context() -> Generator[None]:
    """Keep correlation ids and user ids from leaking between tests."""
    RequestContext.clear()

    yield

    RequestContext.clear()


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Drop log sinks and keep app creation from adding stdout handlers."""
    logger.remove()
    monkeypatch.setattr(mutuals_logging, "_configured", True)

    yield

    logger.remove()
