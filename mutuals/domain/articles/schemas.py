"""Read schemas for articles and their relations."""

import uuid
from datetime import datetime

from mutuals.core.constants import ArticleStatus, HeroMediaType
from mutuals.domain.schemas import CamelModel


class AuthorSummary(CamelModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str


class ArticleRead(CamelModel):
    """Article as listed and returned by writes."""

    id: uuid.UUID
    title: str
    slug: str
    subtitle: str | None
    description: str | None
    read_time: str | None
    content: str
    excerpt: str | None
    hero_media_url: str | None
    hero_media_type: HeroMediaType | None
    category: str
    tags: list[str]
    status: ArticleStatus
    publish_date: datetime | None
    featured: bool
    view_count: int
    author_id: uuid.UUID
    author: AuthorSummary
    created_at: datetime
    updated_at: datetime


class RelatedArticleSummary(CamelModel):
    id: uuid.UUID
    title: str
    slug: str
    excerpt: str | None
    hero_media_url: str | None
    category: str
    publish_date: datetime | None


class ArticleRelationRead(CamelModel):
    id: uuid.UUID
    article_id: uuid.UUID
    related_article_id: uuid.UUID
    created_at: datetime


class ArticleRelationDetail(ArticleRelationRead):
    related_article: RelatedArticleSummary


class ArticleDetail(ArticleRead):
    """Single article page, with its "see also" links."""

    related_articles: list[ArticleRelationDetail]
