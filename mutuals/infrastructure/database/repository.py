"""Base repository pattern implementation for database operations.

This module provides a generic repository base class that implements
common CRUD operations for SQLAlchemy models using async patterns. Module
repositories subclass it and add their own filtered listings.
"""

import uuid
from collections.abc import Mapping, Sequence
from typing import Any

from loguru import logger
from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy import delete as sql_delete
from sqlalchemy.ext.asyncio import AsyncSession

from mutuals.infrastructure.database.base import BaseModel

DEFAULT_PAGINATION_LIMIT = 100


class BaseRepository[T: BaseModel]:
    """Base repository class providing common CRUD operations.

    Args:
        session: The async SQLAlchemy session to use for operations.
        model_class: The SQLAlchemy model class this repository manages.

    Example:
        class UserRepository(BaseRepository[User]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(session, User)
    """

    def __init__(self, session: AsyncSession, model_class: type[T]) -> None:
        self.session = session
        self.model_class = model_class

    async def get_by_id(self, entity_id: uuid.UUID) -> T | None:
        """Retrieve a model instance by its ID.

        Args:
            entity_id: The primary key of the model to retrieve.

        Returns:
            T | None: The model instance if found, None otherwise.
        """
        stmt = select(self.model_class).where(self.model_class.id == entity_id)
        result = await self.session.execute(stmt)
        return result.unique().scalar_one_or_none()

    async def get_all(
        self, skip: int = 0, limit: int = DEFAULT_PAGINATION_LIMIT
    ) -> list[T]:
        """Retrieve model instances, oldest first.

        Args:
            skip: Number of records to skip.
            limit: Maximum number of records to return.

        Returns:
            list[T]: List of model instances.
        """
        stmt = (
            select(self.model_class)
            .order_by(self.model_class.created_at)
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.unique().scalars().all())

    async def find_one_by(self, **kwargs: object) -> T | None:
        """Find the first model instance whose fields equal the given values.

        Args:
            **kwargs: Field-value pairs to filter by.

        Returns:
            T | None: The first matching instance if found, None otherwise.
        """
        stmt = select(self.model_class).limit(1)
        for field, value in kwargs.items():
            stmt = stmt.where(getattr(self.model_class, field) == value)
        result = await self.session.execute(stmt)
        return result.unique().scalar_one_or_none()

    async def count(self, *conditions: ColumnElement[bool]) -> int:
        """Count instances matching all conditions.

        Args:
            *conditions: SQLAlchemy boolean expressions.

        Returns:
            int: The number of matching rows.
        """
        stmt = select(func.count()).select_from(self.model_class).where(*conditions)
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def list_page(
        self,
        conditions: Sequence[ColumnElement[bool]],
        order_by: Sequence[Any],
        offset: int,
        limit: int,
    ) -> tuple[list[T], int]:
        """Fetch one page of matching rows together with the total count.

        Args:
            conditions: Filters applied to both the page and the count.
            order_by: Ordering of the page.
            offset: Rows to skip.
            limit: Page size.

        Returns:
            tuple[list[T], int]: The page and the total number of matches.
        """
        stmt: Select[tuple[T]] = (
            select(self.model_class)
            .where(*conditions)
            .order_by(*order_by)
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        items = list(result.unique().scalars().all())
        total = await self.count(*conditions)
        return items, total

    async def create(self, obj: T) -> T:
        """Persist a new model instance.

        Args:
            obj: The model instance to create.

        Returns:
            T: The created instance with server-generated values loaded.
        """
        self.session.add(obj)
        await self.session.flush()
        await self.session.refresh(obj)

        logger.info("Created {} with ID: {}", self.model_class.__name__, obj.id)
        return obj

    async def update(self, obj: T, data: Mapping[str, object]) -> T:
        """Apply partial changes to a loaded instance.

        Args:
            obj: The instance to update.
            data: Attribute values to set.

        Returns:
            T: The refreshed instance.
        """
        for key, value in data.items():
            if hasattr(obj, key):
                setattr(obj, key, value)
            else:
                logger.warning(
                    "Attempted to update non-existent field '{}' on {}",
                    key,
                    self.model_class.__name__,
                )

        await self.session.flush()
        await self.session.refresh(obj)

        logger.info(
            "Updated {} ID {} - fields: {}",
            self.model_class.__name__,
            obj.id,
            list(data.keys()),
        )
        return obj

    async def delete(self, entity_id: uuid.UUID) -> bool:
        """Delete a model instance by its ID.

        Args:
            entity_id: The primary key of the model to delete.

        Returns:
            bool: True if the instance was deleted, False if not found.
        """
        stmt = sql_delete(self.model_class).where(self.model_class.id == entity_id)
        result = await self.session.execute(stmt)
        deleted = result.rowcount > 0  # type: ignore[attr-defined]

        if deleted:
            logger.info(
                "Deleted {} with ID: {}", self.model_class.__name__, entity_id
            )
        return deleted
