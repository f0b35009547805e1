"""Read schemas for newsletter subscriptions."""

import uuid
from datetime import datetime
from typing import Any

from mutuals.core.constants import SubscriptionSource, SubscriptionStatus
from mutuals.domain.schemas import CamelModel


class SubscriberRead(CamelModel):
    id: uuid.UUID
    email: str
    name: str | None
    source: SubscriptionSource
    status: SubscriptionStatus
    preferences: dict[str, Any] | None
    subscribed_at: datetime
    unsubscribed_at: datetime | None
    created_at: datetime
    updated_at: datetime


class NewsletterStats(CamelModel):
    total: int
    active: int
    unsubscribed: int
