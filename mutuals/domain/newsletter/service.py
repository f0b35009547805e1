"""Newsletter subscription lifecycle.

The database is the source of truth. Mailing list sync and the welcome email
run after the write and never fail the request.
"""

from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from mutuals.core.constants import SubscriptionSource, SubscriptionStatus
from mutuals.core.exceptions import ConflictError, NotFoundError, UpstreamError
from mutuals.domain.newsletter.repository import SubscriberRepository
from mutuals.domain.newsletter.schemas import NewsletterStats, SubscriberRead
from mutuals.infrastructure.database.base import utcnow
from mutuals.infrastructure.database.models import NewsletterSubscriber
from mutuals.infrastructure.integrations import EmailClient, MailingListClient


class NewsletterService:
    """Subscribe, unsubscribe and report on newsletter signups.

    Args:
        session: Request-scoped database session.
        mailing_list: Mailing list sync client.
        email: Transactional email client.
    """

    def __init__(
        self,
        session: AsyncSession,
        mailing_list: MailingListClient,
        email: EmailClient,
    ) -> None:
        self.subscribers = SubscriberRepository(session)
        self.mailing_list = mailing_list
        self.email = email

    async def subscribe(
        self,
        email: str,
        name: str | None = None,
        source: SubscriptionSource | None = None,
        preferences: dict[str, Any] | None = None,
    ) -> SubscriberRead:
        """Sign an address up, reactivating it if it had unsubscribed.

        Raises:
            ConflictError: The address is already an active subscriber.
        """
        existing = await self.subscribers.get_by_email(email)
        is_new = existing is None

        if existing is None:
            subscriber = await self.subscribers.create(
                NewsletterSubscriber(
                    email=email,
                    name=name,
                    source=source or SubscriptionSource.HOMEPAGE,
                    status=SubscriptionStatus.ACTIVE,
                    preferences=preferences,
                    subscribed_at=utcnow(),
                )
            )
        elif existing.status == SubscriptionStatus.ACTIVE:
            raise ConflictError("Email is already subscribed")
        else:
            subscriber = await self.subscribers.update(
                existing,
                {
                    "status": SubscriptionStatus.ACTIVE,
                    "name": name or existing.name,
                    "source": source or existing.source,
                    "preferences": preferences or existing.preferences,
                    "unsubscribed_at": None,
                },
            )
            logger.info("Reactivated newsletter subscriber {}", subscriber.id)

        result = SubscriberRead.model_validate(subscriber)

        synced = await self.mailing_list.add_subscriber(email, name, source)
        if not synced:
            logger.warning("Subscriber {} saved but not synced to mailing list", result.id)

        if is_new:
            try:
                await self.email.send_welcome_email(email, name)
            except UpstreamError as e:
                logger.warning("Welcome email not sent to subscriber {}: {}", result.id, e)

        return result

    async def unsubscribe(self, email: str) -> SubscriberRead:
        """Mark an address unsubscribed.

        Raises:
            NotFoundError: The address never subscribed.
            ConflictError: The address is already unsubscribed.
        """
        subscriber = await self.subscribers.get_by_email(email)
        if subscriber is None:
            raise NotFoundError("Email not found in subscription list")
        if subscriber.status == SubscriptionStatus.UNSUBSCRIBED:
            raise ConflictError("Email is already unsubscribed")

        subscriber = await self.subscribers.update(
            subscriber,
            {"status": SubscriptionStatus.UNSUBSCRIBED, "unsubscribed_at": utcnow()},
        )
        result = SubscriberRead.model_validate(subscriber)

        if not await self.mailing_list.unsubscribe_subscriber(email):
            logger.warning("Unsubscribe of {} not synced to mailing list", result.id)

        return result

    async def list_subscribers(
        self, status: SubscriptionStatus | None, offset: int, limit: int
    ) -> tuple[list[SubscriberRead], int]:
        subscribers, total = await self.subscribers.list_by_status(status, offset, limit)
        return [SubscriberRead.model_validate(s) for s in subscribers], total

    async def get_stats(self) -> NewsletterStats:
        return NewsletterStats(
            total=await self.subscribers.count(),
            active=await self.subscribers.count_by_status(SubscriptionStatus.ACTIVE),
            unsubscribed=await self.subscribers.count_by_status(
                SubscriptionStatus.UNSUBSCRIBED
            ),
        )
