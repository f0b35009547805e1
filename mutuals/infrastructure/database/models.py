"""ORM models for the Mutuals+ content platform."""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mutuals.core.constants import (
    ArticleStatus,
    HeroMediaType,
    SubmissionStatus,
    SubmissionType,
    SubscriptionSource,
    SubscriptionStatus,
    UserRole,
)
from mutuals.infrastructure.database.base import BaseModel, utcnow


def _enum(enum_class: type, name: str) -> Enum:
    # Store the member values, not the Python names
    return Enum(
        enum_class,
        name=name,
        native_enum=False,
        values_callable=lambda members: [m.value for m in members],
    )


class User(BaseModel):
    """Back-office account that can author and manage content."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    first_name: Mapped[str] = mapped_column(String(100))
    last_name: Mapped[str] = mapped_column(String(100))
    role: Mapped[UserRole] = mapped_column(
        _enum(UserRole, "user_role"), default=UserRole.EDITOR
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class Article(BaseModel):
    """Editorial piece published on the platform."""

    __tablename__ = "articles"

    title: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(300), unique=True, index=True)
    subtitle: Mapped[str | None] = mapped_column(String(500))
    description: Mapped[str | None] = mapped_column(Text)
    read_time: Mapped[str | None] = mapped_column(String(50))
    content: Mapped[str] = mapped_column(Text)
    excerpt: Mapped[str | None] = mapped_column(Text)
    hero_media_url: Mapped[str | None] = mapped_column(String(1000))
    hero_media_type: Mapped[HeroMediaType | None] = mapped_column(
        _enum(HeroMediaType, "hero_media_type")
    )
    category: Mapped[str] = mapped_column(String(100), index=True)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    status: Mapped[ArticleStatus] = mapped_column(
        _enum(ArticleStatus, "article_status"),
        default=ArticleStatus.DRAFT,
        index=True,
    )
    publish_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    featured: Mapped[bool] = mapped_column(Boolean, default=False)
    view_count: Mapped[int] = mapped_column(Integer, default=0)
    author_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT")
    )

    author: Mapped[User] = relationship(lazy="joined")
    related_articles: Mapped[list["ArticleRelation"]] = relationship(
        foreign_keys="ArticleRelation.article_id",
        viewonly=True,
        lazy="raise",
    )


class ArticleRelation(BaseModel):
    """Directed "see also" link between two articles."""

    __tablename__ = "article_relations"
    __table_args__ = (UniqueConstraint("article_id", "related_article_id"),)

    article_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("articles.id", ondelete="CASCADE"), index=True
    )
    related_article_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("articles.id", ondelete="CASCADE")
    )

    related_article: Mapped[Article] = relationship(
        foreign_keys=[related_article_id], lazy="joined"
    )


class NewsletterSubscriber(BaseModel):
    """Email address signed up for the newsletter."""

    __tablename__ = "newsletter_subscribers"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    name: Mapped[str | None] = mapped_column(String(255))
    source: Mapped[SubscriptionSource] = mapped_column(
        _enum(SubscriptionSource, "subscription_source"),
        default=SubscriptionSource.HOMEPAGE,
    )
    status: Mapped[SubscriptionStatus] = mapped_column(
        _enum(SubscriptionStatus, "subscription_status"),
        default=SubscriptionStatus.ACTIVE,
        index=True,
    )
    preferences: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    subscribed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    unsubscribed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class ContactSubmission(BaseModel):
    """Message sent through the public contact form."""

    __tablename__ = "contact_submissions"

    name: Mapped[str] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(255))
    subject: Mapped[str | None] = mapped_column(String(500))
    message: Mapped[str] = mapped_column(Text)
    submission_type: Mapped[SubmissionType] = mapped_column(
        _enum(SubmissionType, "submission_type"), default=SubmissionType.GENERAL
    )
    status: Mapped[SubmissionStatus] = mapped_column(
        _enum(SubmissionStatus, "submission_status"),
        default=SubmissionStatus.NEW,
        index=True,
    )
