"""User accounts, password hashing and JWT issuance."""

from mutuals.domain.auth.service import AuthService

__all__ = ["AuthService"]
