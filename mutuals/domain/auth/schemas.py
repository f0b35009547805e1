"""Read schemas for users and issued tokens."""

import uuid
from datetime import datetime

from mutuals.core.constants import UserRole
from mutuals.domain.schemas import CamelModel


class UserRead(CamelModel):
    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    role: UserRole


class RegisteredUser(UserRead):
    created_at: datetime


class UserProfile(UserRead):
    """Full profile returned by ``/auth/me``."""

    is_active: bool
    created_at: datetime
    updated_at: datetime


class AuthTokens(CamelModel):
    """Tokens issued on register and login."""

    user: UserRead
    access_token: str
    refresh_token: str


class AccessToken(CamelModel):
    access_token: str
