"""Newsletter subscriber persistence."""

from sqlalchemy import ColumnElement
from sqlalchemy.ext.asyncio import AsyncSession

from mutuals.core.constants import SubscriptionStatus
from mutuals.infrastructure.database.models import NewsletterSubscriber
from mutuals.infrastructure.database.repository import BaseRepository


class SubscriberRepository(BaseRepository[NewsletterSubscriber]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, NewsletterSubscriber)

    async def get_by_email(self, email: str) -> NewsletterSubscriber | None:
        return await self.find_one_by(email=email)

    async def list_by_status(
        self, status: SubscriptionStatus | None, offset: int, limit: int
    ) -> tuple[list[NewsletterSubscriber], int]:
        conditions: list[ColumnElement[bool]] = []
        if status is not None:
            conditions.append(NewsletterSubscriber.status == status)
        return await self.list_page(
            conditions,
            (NewsletterSubscriber.subscribed_at.desc(),),
            offset,
            limit,
        )

    async def count_by_status(self, status: SubscriptionStatus) -> int:
        return await self.count(NewsletterSubscriber.status == status)
