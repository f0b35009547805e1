"""FastAPI dependency injection for database session management.

``DatabaseSession`` gives a route one session for the whole request,
committed when the route returns and rolled back when it raises. The
session is also kept on ``request.state.db_session`` so route decorators
can commit early, e.g. before purging cached reads.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from mutuals.infrastructure.database.session import get_async_session


async def get_db(request: Request) -> AsyncGenerator[AsyncSession]:
    """Provide a request-scoped database session.

    Yields:
        AsyncSession: Session committed on success, rolled back on error.

    Example:
        @router.get("/users")
        async def list_users(db: DatabaseSession) -> Response:
            ...
    """
    async with get_async_session() as session:
        request.state.db_session = session
        yield session


DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
