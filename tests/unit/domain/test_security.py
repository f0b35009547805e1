"""Unit tests for password hashing and token signing."""

import jwt
import pytest
from pytest_mock import MockerFixture

from mutuals.core.config import AuthConfig
from mutuals.core.exceptions import InvalidTokenError, TokenExpiredError
from mutuals.domain.auth import security
from mutuals.domain.auth.security import (
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    hash_password,
    verify_password,
)


@pytest.mark.unit
class TestPasswordHashing:
    """Test suite for bcrypt helpers."""

    async def test_hash_verifies_against_original(self) -> None:
        """Test that a hashed password verifies with the same plain text."""
        hashed = await hash_password("s3cret-pass", rounds=4)

        assert hashed != "s3cret-pass"
        assert await verify_password("s3cret-pass", hashed) is True

    async def test_wrong_password_does_not_verify(self) -> None:
        """Test that a different password is rejected."""
        hashed = await hash_password("s3cret-pass", rounds=4)

        assert await verify_password("other-pass", hashed) is False

    @pytest.mark.parametrize(
        ("plain", "hashed"),
        [("", "$2b$04$abc"), ("pass", ""), ("pass", "not-a-bcrypt-hash")],
    )
    async def test_unusable_input_does_not_verify(self, plain: str, hashed: str) -> None:
        """Test that empty or malformed inputs are rejected without raising."""
        assert await verify_password(plain, hashed) is False


@pytest.mark.unit
class TestAccessTokens:
    """Test suite for access token signing and verification."""

    def test_round_trip_keeps_identity_claims(self, auth_config: AuthConfig) -> None:
        """Test that a signed token decodes back to the same identity."""
        # Arrange
        token = create_access_token(
            auth_config, user_id="u-1", email="ada@example.com", role="EDITOR"
        )

        # Act
        claims = decode_access_token(auth_config, token)

        # Assert
        assert claims["id"] == "u-1"
        assert claims["email"] == "ada@example.com"
        assert claims["role"] == "EDITOR"
        assert claims["exp"] - claims["iat"] == auth_config.access_token_ttl_seconds

    def test_expired_token_raises_token_expired(
        self, auth_config: AuthConfig, mocker: MockerFixture
    ) -> None:
        """Test that a token past its expiry is reported as expired."""
        # Arrange
        issued = 1_700_000_000
        mocker.patch.object(security, "_now_epoch_s", return_value=issued)
        token = create_access_token(
            auth_config, user_id="u-1", email="ada@example.com", role="EDITOR"
        )

        # Act & Assert
        with pytest.raises(TokenExpiredError) as exc_info:
            decode_access_token(auth_config, token)

        assert exc_info.value.message == "Token expired"

    def test_tampered_token_raises_invalid_token(self, auth_config: AuthConfig) -> None:
        """Test that a token signed with another secret is rejected."""
        other = auth_config.model_copy(update={"jwt_secret": "someone-else"})
        token = create_access_token(
            other, user_id="u-1", email="ada@example.com", role="EDITOR"
        )

        with pytest.raises(InvalidTokenError) as exc_info:
            decode_access_token(auth_config, token)

        assert exc_info.value.message == "Invalid token"

    def test_refresh_token_is_not_an_access_token(self, auth_config: AuthConfig) -> None:
        """Test that the two token kinds do not verify as each other."""
        refresh = create_refresh_token(auth_config, user_id="u-1")

        with pytest.raises(InvalidTokenError):
            decode_access_token(auth_config, refresh)

    def test_token_without_identity_claims_is_invalid(
        self, auth_config: AuthConfig
    ) -> None:
        """Test that a validly signed token missing identity claims is rejected."""
        token = jwt.encode(
            {"iat": 1, "exp": 2**31 - 1, "id": "u-1"},
            auth_config.jwt_secret,
            algorithm=auth_config.jwt_algorithm,
        )

        with pytest.raises(InvalidTokenError):
            decode_access_token(auth_config, token)


@pytest.mark.unit
class TestRefreshTokens:
    """Test suite for refresh token signing and verification."""

    def test_round_trip_returns_user_id(self, auth_config: AuthConfig) -> None:
        """Test that a refresh token decodes to the user it was issued for."""
        token = create_refresh_token(auth_config, user_id="u-42")

        assert decode_refresh_token(auth_config, token) == "u-42"

    def test_access_token_is_not_a_refresh_token(self, auth_config: AuthConfig) -> None:
        """Test that an access token fails refresh verification."""
        access = create_access_token(
            auth_config, user_id="u-1", email="ada@example.com", role="EDITOR"
        )

        with pytest.raises(jwt.InvalidTokenError):
            decode_refresh_token(auth_config, access)
