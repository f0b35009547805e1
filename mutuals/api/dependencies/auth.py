"""Authentication and authorization gates.

``authenticate`` turns a bearer token into an ``Identity``;
``require_roles`` checks that identity against a fixed allow-list. Both are
FastAPI dependencies, so a route declares them next to its other gates and
they run in declaration order.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request
from loguru import logger

from mutuals.api.constants import AUTHORIZATION_HEADER, BEARER_PREFIX
from mutuals.core.config import get_settings
from mutuals.core.constants import UserRole
from mutuals.core.context import RequestContext
from mutuals.core.exceptions import ForbiddenError, UnauthorizedError
from mutuals.domain.auth.security import decode_access_token


@dataclass(frozen=True, slots=True)
class Identity:
    """The verified caller of one request."""

    id: str
    email: str
    role: str


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get(AUTHORIZATION_HEADER)
    if not header or not header.startswith(BEARER_PREFIX):
        return None
    return header[len(BEARER_PREFIX) :].strip() or None


async def authenticate(request: Request) -> Identity:
    """Verify the bearer token and attach the caller to the request.

    Raises:
        UnauthorizedError: No ``Bearer`` credential was sent.
        InvalidTokenError: The token failed verification.
        TokenExpiredError: The token is past its expiry.
    """
    token = _bearer_token(request)
    if token is None:
        raise UnauthorizedError()

    claims = decode_access_token(get_settings().auth_config, token)
    identity = Identity(id=claims["id"], email=claims["email"], role=claims["role"])

    request.state.identity = identity
    RequestContext.set_user_id(identity.id)
    return identity


CurrentIdentity = Annotated[Identity, Depends(authenticate)]


def get_identity(request: Request) -> Identity | None:
    """The identity attached by ``authenticate``, if it ran."""
    return getattr(request.state, "identity", None)


def require_roles(*roles: UserRole) -> Callable[[Request], Awaitable[Identity]]:
    """Build a gate that admits only the given roles.

    Must be declared after ``authenticate``.

    Args:
        *roles: Roles allowed on the route, fixed at declaration time.

    Returns:
        A FastAPI dependency returning the admitted identity.
    """
    allowed = frozenset(role.value for role in roles)

    async def check_role(request: Request) -> Identity:
        identity = get_identity(request)
        if identity is None:
            raise UnauthorizedError("Not authenticated")
        if identity.role not in allowed:
            logger.warning(
                "Role {} denied on {}",
                identity.role,
                request.url.path,
                allowed_roles=sorted(allowed),
            )
            raise ForbiddenError()
        return identity

    check_role.__name__ = f"require_roles_{'_'.join(sorted(allowed)).lower()}"
    return check_role
