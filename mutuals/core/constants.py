"""Core application constants."""

from enum import StrEnum

MILLISECONDS_PER_SECOND = 1000

REDACTED = "[REDACTED]"

# Pagination bounds applied to every listing endpoint
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class UserRole(StrEnum):
    """Roles an identity can hold."""

    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    EDITOR = "EDITOR"
    CONTRIBUTOR = "CONTRIBUTOR"


class ArticleStatus(StrEnum):
    """Publication state of an article."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class HeroMediaType(StrEnum):
    """Kind of media shown at the top of an article."""

    IMAGE = "IMAGE"
    VIDEO = "VIDEO"


class SubscriptionSource(StrEnum):
    """Where a newsletter signup came from."""

    HOMEPAGE = "HOMEPAGE"
    FOOTER = "FOOTER"
    POPUP = "POPUP"
    EVENT = "EVENT"


class SubscriptionStatus(StrEnum):
    """Newsletter subscription state."""

    ACTIVE = "ACTIVE"
    UNSUBSCRIBED = "UNSUBSCRIBED"


class SubmissionType(StrEnum):
    """Category of a contact form submission."""

    GENERAL = "GENERAL"
    ARTIST = "ARTIST"
    DJ = "DJ"
    DESIGNER = "DESIGNER"


class SubmissionStatus(StrEnum):
    """Review state of a submission."""

    NEW = "NEW"
    REVIEWED = "REVIEWED"
    ARCHIVED = "ARCHIVED"
