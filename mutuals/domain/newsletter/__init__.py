"""Newsletter signups synced to the mailing list provider."""

from mutuals.domain.newsletter.service import NewsletterService

__all__ = ["NewsletterService"]
