"""Database infrastructure: async SQLAlchemy with the repository pattern.

Core components:
- **base**: Declarative base and common model fields
- **models**: Users, articles, newsletter subscribers, contact submissions
- **session**: Async engine and session management
- **repository**: Generic repository with CRUD and paged listing
- **dependencies**: FastAPI dependency injection helpers
"""

from mutuals.infrastructure.database.base import Base, BaseModel
from mutuals.infrastructure.database.dependencies import DatabaseSession, get_db
from mutuals.infrastructure.database.repository import BaseRepository
from mutuals.infrastructure.database.session import (
    check_database_connection,
    close_database,
    create_database_engine,
    get_async_session,
    get_engine,
    get_session_factory,
)

__all__ = [
    "Base",
    "BaseModel",
    "BaseRepository",
    "DatabaseSession",
    "check_database_connection",
    "close_database",
    "create_database_engine",
    "get_async_session",
    "get_db",
    "get_engine",
    "get_session_factory",
]
