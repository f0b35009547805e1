"""Initial schema: users, articles, newsletter, contact submissions.

Revision ID: 0001
Revises:
Create Date: 2025-10-01 09:00:00.000000
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def _enum(name: str, *values: str) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column(
            "role",
            _enum("user_role", "SUPER_ADMIN", "ADMIN", "EDITOR", "CONTRIBUTOR"),
            nullable=False,
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_users")),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "articles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=300), nullable=False),
        sa.Column("subtitle", sa.String(length=500), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("read_time", sa.String(length=50), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("excerpt", sa.Text(), nullable=True),
        sa.Column("hero_media_url", sa.String(length=1000), nullable=True),
        sa.Column(
            "hero_media_type", _enum("hero_media_type", "IMAGE", "VIDEO"), nullable=True
        ),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column(
            "status",
            _enum("article_status", "DRAFT", "PUBLISHED", "ARCHIVED"),
            nullable=False,
        ),
        sa.Column("publish_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("featured", sa.Boolean(), nullable=False),
        sa.Column("view_count", sa.Integer(), nullable=False),
        sa.Column("author_id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["author_id"],
            ["users.id"],
            name=op.f("fk_articles_author_id_users"),
            ondelete="RESTRICT",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_articles")),
    )
    op.create_index(op.f("ix_articles_slug"), "articles", ["slug"], unique=True)
    op.create_index(op.f("ix_articles_category"), "articles", ["category"])
    op.create_index(op.f("ix_articles_status"), "articles", ["status"])

    op.create_table(
        "article_relations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("article_id", sa.Uuid(), nullable=False),
        sa.Column("related_article_id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["article_id"],
            ["articles.id"],
            name=op.f("fk_article_relations_article_id_articles"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["related_article_id"],
            ["articles.id"],
            name=op.f("fk_article_relations_related_article_id_articles"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_article_relations")),
        sa.UniqueConstraint(
            "article_id",
            "related_article_id",
            name=op.f("uq_article_relations_article_id"),
        ),
    )
    op.create_index(
        op.f("ix_article_relations_article_id"), "article_relations", ["article_id"]
    )

    op.create_table(
        "newsletter_subscribers",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column(
            "source",
            _enum("subscription_source", "HOMEPAGE", "FOOTER", "POPUP", "EVENT"),
            nullable=False,
        ),
        sa.Column(
            "status",
            _enum("subscription_status", "ACTIVE", "UNSUBSCRIBED"),
            nullable=False,
        ),
        sa.Column("preferences", sa.JSON(), nullable=True),
        sa.Column("subscribed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("unsubscribed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_newsletter_subscribers")),
    )
    op.create_index(
        op.f("ix_newsletter_subscribers_email"),
        "newsletter_subscribers",
        ["email"],
        unique=True,
    )
    op.create_index(
        op.f("ix_newsletter_subscribers_status"), "newsletter_subscribers", ["status"]
    )

    op.create_table(
        "contact_submissions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("subject", sa.String(length=500), nullable=True),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column(
            "submission_type",
            _enum("submission_type", "GENERAL", "ARTIST", "DJ", "DESIGNER"),
            nullable=False,
        ),
        sa.Column(
            "status",
            _enum("submission_status", "NEW", "REVIEWED", "ARCHIVED"),
            nullable=False,
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_contact_submissions")),
    )
    op.create_index(
        op.f("ix_contact_submissions_status"), "contact_submissions", ["status"]
    )


def downgrade() -> None:
    op.drop_table("contact_submissions")
    op.drop_table("newsletter_subscribers")
    op.drop_table("article_relations")
    op.drop_table("articles")
    op.drop_table("users")
