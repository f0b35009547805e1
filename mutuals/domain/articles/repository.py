"""Article and article relation persistence."""

import uuid
from dataclasses import dataclass

from sqlalchemy import ColumnElement, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from mutuals.core.constants import ArticleStatus
from mutuals.infrastructure.database.models import Article, ArticleRelation
from mutuals.infrastructure.database.repository import BaseRepository

NEWEST_FIRST = (Article.publish_date.desc().nulls_last(), Article.created_at.desc())


@dataclass(frozen=True, slots=True)
class ArticleFilters:
    """Listing filters; ``status`` defaults to published content."""

    category: str | None = None
    status: ArticleStatus = ArticleStatus.PUBLISHED
    featured: bool | None = None
    search: str | None = None

    def conditions(self) -> list[ColumnElement[bool]]:
        conditions: list[ColumnElement[bool]] = [Article.status == self.status]
        if self.category:
            conditions.append(Article.category == self.category)
        if self.featured is not None:
            conditions.append(Article.featured.is_(self.featured))
        if self.search:
            conditions.append(
                or_(
                    Article.title.icontains(self.search, autoescape=True),
                    Article.subtitle.icontains(self.search, autoescape=True),
                    Article.content.icontains(self.search, autoescape=True),
                )
            )
        return conditions


class ArticleRepository(BaseRepository[Article]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Article)

    async def list_filtered(
        self, filters: ArticleFilters, offset: int, limit: int
    ) -> tuple[list[Article], int]:
        return await self.list_page(filters.conditions(), NEWEST_FIRST, offset, limit)

    async def list_featured(self, limit: int) -> list[Article]:
        stmt = (
            select(Article)
            .where(Article.featured.is_(True), Article.status == ArticleStatus.PUBLISHED)
            .order_by(*NEWEST_FIRST)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.unique().scalars().all())

    async def get_by_slug_with_related(self, slug: str) -> Article | None:
        """Article by slug with its relations and their targets loaded."""
        stmt = (
            select(Article)
            .where(Article.slug == slug)
            .options(selectinload(Article.related_articles))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.unique().scalar_one_or_none()

    async def slug_exists(self, slug: str, exclude_id: uuid.UUID | None = None) -> bool:
        conditions: list[ColumnElement[bool]] = [Article.slug == slug]
        if exclude_id is not None:
            conditions.append(Article.id != exclude_id)
        return await self.count(*conditions) > 0

    async def increment_view_count(self, article_id: uuid.UUID) -> None:
        stmt = (
            update(Article)
            .where(Article.id == article_id)
            .values(view_count=Article.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)


class ArticleRelationRepository(BaseRepository[ArticleRelation]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ArticleRelation)

    async def exists(self, article_id: uuid.UUID, related_article_id: uuid.UUID) -> bool:
        count = await self.count(
            ArticleRelation.article_id == article_id,
            ArticleRelation.related_article_id == related_article_id,
        )
        return count > 0
