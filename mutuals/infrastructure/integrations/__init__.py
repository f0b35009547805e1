"""HTTP clients for third-party SaaS used by the domain services."""

from mutuals.infrastructure.integrations.email import EmailClient
from mutuals.infrastructure.integrations.mailing_list import (
    MailingListClient,
    subscriber_hash,
)

__all__ = ["EmailClient", "MailingListClient", "subscriber_hash"]
