"""Article listing, publishing and cross-linking."""

import uuid
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from mutuals.core.exceptions import ConflictError, NotFoundError
from mutuals.domain.articles.repository import (
    ArticleFilters,
    ArticleRelationRepository,
    ArticleRepository,
)
from mutuals.domain.articles.schemas import (
    ArticleDetail,
    ArticleRead,
    ArticleRelationRead,
)
from mutuals.domain.articles.slug import generate_slug, generate_slug_with_counter
from mutuals.infrastructure.database.models import Article, ArticleRelation

ARTICLE_NOT_FOUND = "Article not found"
DEFAULT_FEATURED_LIMIT = 5

# Wire field name -> column name, for the fields a client may write
WRITABLE_FIELDS = {
    "title": "title",
    "subtitle": "subtitle",
    "description": "description",
    "readTime": "read_time",
    "content": "content",
    "excerpt": "excerpt",
    "heroMediaUrl": "hero_media_url",
    "heroMediaType": "hero_media_type",
    "category": "category",
    "tags": "tags",
    "status": "status",
    "publishDate": "publish_date",
    "featured": "featured",
}


def to_columns(data: Mapping[str, Any]) -> dict[str, Any]:
    """Translate a validated request body into column values."""
    values = {
        WRITABLE_FIELDS[key]: value
        for key, value in data.items()
        if key in WRITABLE_FIELDS
    }
    if isinstance(values.get("publish_date"), str):
        values["publish_date"] = datetime.fromisoformat(values["publish_date"])
    if "tags" in values:
        values["tags"] = [str(tag) for tag in values["tags"]]
    return values


class ArticleService:
    """Editorial content operations.

    Args:
        session: Request-scoped database session.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.articles = ArticleRepository(session)
        self.relations = ArticleRelationRepository(session)

    async def _unique_slug(self, title: str, exclude_id: uuid.UUID | None = None) -> str:
        slug = generate_slug(title)
        counter = 0
        while await self.articles.slug_exists(slug, exclude_id):
            counter += 1
            slug = generate_slug_with_counter(title, counter)
        return slug

    async def _get_or_404(self, article_id: uuid.UUID) -> Article:
        article = await self.articles.get_by_id(article_id)
        if article is None:
            raise NotFoundError(ARTICLE_NOT_FOUND)
        return article

    async def list_articles(
        self, filters: ArticleFilters, offset: int, limit: int
    ) -> tuple[list[ArticleRead], int]:
        articles, total = await self.articles.list_filtered(filters, offset, limit)
        return [ArticleRead.model_validate(a) for a in articles], total

    async def list_featured(self, limit: int = DEFAULT_FEATURED_LIMIT) -> list[ArticleRead]:
        articles = await self.articles.list_featured(limit)
        return [ArticleRead.model_validate(a) for a in articles]

    async def get_by_slug(self, slug: str) -> ArticleDetail:
        """Article page; each read bumps the view counter.

        Raises:
            NotFoundError: No article has this slug.
        """
        article = await self.articles.get_by_slug_with_related(slug)
        if article is None:
            raise NotFoundError(ARTICLE_NOT_FOUND)

        detail = ArticleDetail.model_validate(article)
        await self.articles.increment_view_count(article.id)
        return detail

    async def get_by_id(self, article_id: uuid.UUID) -> ArticleRead:
        return ArticleRead.model_validate(await self._get_or_404(article_id))

    async def create(self, data: Mapping[str, Any], author_id: uuid.UUID) -> ArticleRead:
        """Create an article with a slug unique across all articles."""
        values = to_columns(data)
        values.setdefault("tags", [])
        values["slug"] = await self._unique_slug(values["title"])

        article = await self.articles.create(Article(**values, author_id=author_id))
        return ArticleRead.model_validate(article)

    async def update(self, article_id: uuid.UUID, data: Mapping[str, Any]) -> ArticleRead:
        """Apply a partial update; a changed title regenerates the slug.

        Raises:
            NotFoundError: The article does not exist.
        """
        article = await self._get_or_404(article_id)
        values = to_columns(data)

        new_title = values.get("title")
        if new_title and new_title != article.title:
            values["slug"] = await self._unique_slug(new_title, exclude_id=article.id)

        article = await self.articles.update(article, values)
        return ArticleRead.model_validate(article)

    async def delete(self, article_id: uuid.UUID) -> dict[str, str]:
        if not await self.articles.delete(article_id):
            raise NotFoundError(ARTICLE_NOT_FOUND)
        return {"message": "Article deleted successfully"}

    async def add_related(
        self, article_id: uuid.UUID, related_article_id: uuid.UUID
    ) -> ArticleRelationRead:
        """Link ``related_article_id`` as "see also" from ``article_id``.

        Raises:
            NotFoundError: Either article does not exist.
            ConflictError: The link already exists.
        """
        article = await self.articles.get_by_id(article_id)
        related = await self.articles.get_by_id(related_article_id)
        if article is None or related is None:
            raise NotFoundError("One or both articles not found")

        if await self.relations.exists(article_id, related_article_id):
            raise ConflictError("Relation already exists")

        relation = await self.relations.create(
            ArticleRelation(article_id=article_id, related_article_id=related_article_id)
        )
        logger.info("Linked article {} to {}", article_id, related_article_id)
        return ArticleRelationRead.model_validate(relation)
