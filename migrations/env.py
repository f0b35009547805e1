"""Alembic environment for async migrations.

The database URL comes from the application settings, never from
alembic.ini, and Alembic's own log output goes through loguru.
"""

import asyncio
from typing import Any

from alembic import context
from loguru import logger
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from mutuals.core.config import get_settings
from mutuals.core.logging import setup_logging
from mutuals.infrastructure.database import models  # noqa: F401 - registers tables
from mutuals.infrastructure.database.base import Base

config = context.config
target_metadata = Base.metadata

settings = get_settings()
setup_logging(settings)


def _configure_kwargs() -> dict[str, Any]:
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "compare_server_default": True,
        # SQLite cannot ALTER most constraints in place
        "render_as_batch": settings.database_config.is_sqlite,
    }


def run_migrations_offline() -> None:
    """Emit SQL for the configured database without connecting to it."""
    logger.info("Running migrations in offline mode")

    context.configure(
        url=settings.database_config.database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_kwargs(),
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(connection=connection, **_configure_kwargs())

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Apply migrations over a short-lived async engine."""
    logger.info("Running migrations in online mode with async engine")

    db_config = settings.database_config
    configuration: dict[str, Any] = {
        "sqlalchemy.url": db_config.database_url,
        "sqlalchemy.echo": db_config.echo,
    }

    # NullPool: migrations hold one connection and exit
    connectable = async_engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
