"""Authentication adapter interfaces."""

from abc import ABC, abstractmethod
from datetime import timedelta

from app.schemas.auth import AuthPrincipal

TOKEN_TTL = timedelta(hours=2)


class AuthVerificationError(Exception):
    """Raised when a token cannot be verified or normalized."""


class TokenInvalidError(AuthVerificationError):
    """Token is malformed, signed with an unknown key, or its signature does not match."""


class TokenExpiredError(AuthVerificationError):
    """Token signature is valid but its validity window has passed."""


class HashingError(Exception):
    """Password hashing primitive failed."""


class SigningError(Exception):
    """Token could not be signed."""


class PasswordHasher(ABC):
    """One-way, salted password hashing."""

    @abstractmethod
    def hash_password(self, password: str) -> str:
        """Return a storable hash for the plaintext password."""

    @abstractmethod
    def verify_password(self, password: str, password_hash: str) -> bool:
        """Return whether the plaintext matches the stored hash."""

    @abstractmethod
    def dummy_verify(self) -> None:
        """Spend the same work as a real verification, for callers with no stored hash."""


class TokenService(ABC):
    """Issues and verifies bearer tokens bound to a principal."""

    @abstractmethod
    def issue_token(self, *, user_id: int, email: str) -> str:
        """Sign a new token for the principal."""

    @abstractmethod
    def verify_token(self, token: str) -> AuthPrincipal:
        """Verify token and return normalized principal."""


__all__ = [
    "TOKEN_TTL",
    "AuthVerificationError",
    "HashingError",
    "PasswordHasher",
    "SigningError",
    "TokenExpiredError",
    "TokenInvalidError",
    "TokenService",
]
