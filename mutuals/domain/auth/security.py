"""Password hashing and token signing.

Access tokens carry ``{id, email, role}`` and are signed with the access
secret. Refresh tokens carry only ``{userId}`` and are signed with a
separate secret, so neither kind verifies as the other.
"""

import time
from typing import Any

import bcrypt
import jwt
from starlette.concurrency import run_in_threadpool

from mutuals.core.config import AuthConfig
from mutuals.core.exceptions import InvalidTokenError, TokenExpiredError


def _now_epoch_s() -> int:
    return int(time.time())


async def hash_password(plain_password: str, rounds: int) -> str:
    """Hash a password with bcrypt off the event loop."""
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = await run_in_threadpool(bcrypt.hashpw, plain_password.encode(), salt)
    return hashed.decode()


async def verify_password(plain_password: str, password_hash: str) -> bool:
    """Check a password against its bcrypt hash off the event loop."""
    if not plain_password or not password_hash:
        return False
    try:
        return await run_in_threadpool(
            bcrypt.checkpw, plain_password.encode(), password_hash.encode()
        )
    except ValueError:
        return False


def create_access_token(
    config: AuthConfig, *, user_id: str, email: str, role: str
) -> str:
    """Sign an access token for an authenticated user."""
    issued_at = _now_epoch_s()
    payload = {
        "id": user_id,
        "email": email,
        "role": role,
        "iat": issued_at,
        "exp": issued_at + config.access_token_ttl_seconds,
    }
    return jwt.encode(payload, config.jwt_secret, algorithm=config.jwt_algorithm)


def create_refresh_token(config: AuthConfig, *, user_id: str) -> str:
    """Sign a long-lived refresh token."""
    issued_at = _now_epoch_s()
    payload = {
        "userId": user_id,
        "iat": issued_at,
        "exp": issued_at + config.refresh_token_ttl_seconds,
    }
    return jwt.encode(
        payload, config.jwt_refresh_secret, algorithm=config.jwt_algorithm
    )


def decode_access_token(config: AuthConfig, token: str) -> dict[str, Any]:
    """Verify an access token and return its claims.

    Raises:
        TokenExpiredError: The signature is valid but the token has expired.
        InvalidTokenError: The token is malformed, tampered with or incomplete.
    """
    try:
        claims = jwt.decode(
            token,
            config.jwt_secret,
            algorithms=[config.jwt_algorithm],
            options={"require": ["exp", "iat"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenExpiredError(cause=e) from e
    except jwt.InvalidTokenError as e:
        raise InvalidTokenError(cause=e) from e

    if not all(isinstance(claims.get(k), str) for k in ("id", "email", "role")):
        raise InvalidTokenError(context={"reason": "missing identity claims"})
    return claims


def decode_refresh_token(config: AuthConfig, token: str) -> str:
    """Verify a refresh token and return the user id it was issued for.

    Raises:
        jwt.InvalidTokenError: Any verification failure, expiry included.
    """
    claims = jwt.decode(
        token,
        config.jwt_refresh_secret,
        algorithms=[config.jwt_algorithm],
        options={"require": ["exp"]},
    )
    user_id = claims.get("userId")
    if not isinstance(user_id, str):
        raise jwt.InvalidTokenError("refresh token has no userId")
    return user_id
