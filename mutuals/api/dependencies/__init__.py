"""Request gates declared by routes.

Routes compose them in a fixed order: rate limit, authentication,
authorization and validation. A gate that fails raises a ``MutualsError``
and nothing after it runs.
"""

from mutuals.api.dependencies.auth import (
    CurrentIdentity,
    Identity,
    authenticate,
    get_identity,
    require_roles,
)
from mutuals.api.dependencies.rate_limit import RateLimiter, rate_limit
from mutuals.api.dependencies.validation import (
    FieldRule,
    Format,
    ValidatedRequest,
    evaluate_rules,
    validate_request,
)

__all__ = [
    "CurrentIdentity",
    "FieldRule",
    "Format",
    "Identity",
    "RateLimiter",
    "ValidatedRequest",
    "authenticate",
    "evaluate_rules",
    "get_identity",
    "rate_limit",
    "require_roles",
    "validate_request",
]
