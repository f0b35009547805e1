"""Registration, login, token refresh and profile lookup."""

import uuid

import jwt
from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mutuals.core.config import AuthConfig
from mutuals.core.constants import UserRole
from mutuals.core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from mutuals.domain.auth.repository import UserRepository
from mutuals.domain.auth.schemas import (
    AccessToken,
    AuthTokens,
    RegisteredUser,
    UserProfile,
    UserRead,
)
from mutuals.domain.auth.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_password,
    verify_password,
)
from mutuals.infrastructure.database.models import User

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_REFRESH_TOKEN = "Invalid or expired refresh token"


class AuthService:
    """Account operations backed by the ``users`` table.

    Args:
        session: Request-scoped database session.
        config: Token and hashing settings.
    """

    def __init__(self, session: AsyncSession, config: AuthConfig) -> None:
        self.users = UserRepository(session)
        self.config = config

    def _issue_tokens(self, user: User) -> tuple[str, str]:
        access = create_access_token(
            self.config, user_id=str(user.id), email=user.email, role=user.role.value
        )
        refresh = create_refresh_token(self.config, user_id=str(user.id))
        return access, refresh

    async def register(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: UserRole | None = None,
    ) -> AuthTokens:
        """Create an account and sign it in.

        Raises:
            ConflictError: The email is already registered.
        """
        if await self.users.get_by_email(email) is not None:
            raise ConflictError("User with this email already exists")

        user = User(
            email=email,
            password_hash=await hash_password(password, self.config.bcrypt_rounds),
            first_name=first_name,
            last_name=last_name,
            role=role or UserRole.EDITOR,
            is_active=True,
        )
        try:
            user = await self.users.create(user)
        except IntegrityError as e:
            raise ConflictError("User with this email already exists", cause=e) from e

        access, refresh = self._issue_tokens(user)
        return AuthTokens(
            user=RegisteredUser.model_validate(user),
            access_token=access,
            refresh_token=refresh,
        )

    async def login(self, *, email: str, password: str) -> AuthTokens:
        """Check credentials and issue a fresh token pair.

        Raises:
            UnauthorizedError: Unknown email, wrong password or inactive account.
        """
        user = await self.users.get_by_email(email)
        if user is None:
            raise UnauthorizedError(INVALID_CREDENTIALS)
        if not user.is_active:
            raise UnauthorizedError("Account is deactivated")
        if not await verify_password(password, user.password_hash):
            logger.warning("Failed login for user {}", user.id)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        access, refresh = self._issue_tokens(user)
        return AuthTokens(
            user=UserRead.model_validate(user),
            access_token=access,
            refresh_token=refresh,
        )

    async def refresh(self, refresh_token: str) -> AccessToken:
        """Exchange a refresh token for a new access token.

        Every failure, expiry and unknown users included, surfaces as the
        same 401 so callers cannot probe which part was wrong.
        """
        try:
            user_id = uuid.UUID(decode_refresh_token(self.config, refresh_token))
        except (jwt.InvalidTokenError, ValueError) as e:
            raise UnauthorizedError(INVALID_REFRESH_TOKEN, cause=e) from e

        user = await self.users.get_by_id(user_id)
        if user is None or not user.is_active:
            raise UnauthorizedError(INVALID_REFRESH_TOKEN)

        access = create_access_token(
            self.config, user_id=str(user.id), email=user.email, role=user.role.value
        )
        return AccessToken(access_token=access)

    async def get_profile(self, user_id: str) -> UserProfile:
        """Profile of the authenticated user.

        Raises:
            NotFoundError: The account was removed after the token was issued.
        """
        try:
            user = await self.users.get_by_id(uuid.UUID(user_id))
        except ValueError:
            user = None
        if user is None:
            raise NotFoundError("User not found")
        return UserProfile.model_validate(user)
