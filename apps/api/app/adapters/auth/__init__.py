"""Auth adapters: password hashing and bearer tokens."""

from .base import (
    TOKEN_TTL,
    AuthVerificationError,
    HashingError,
    PasswordHasher,
    SigningError,
    TokenExpiredError,
    TokenInvalidError,
    TokenService,
)
from .jwt_tokens import JwtTokenService
from .passwords import PasslibPasswordHasher

__all__ = [
    "TOKEN_TTL",
    "AuthVerificationError",
    "HashingError",
    "JwtTokenService",
    "PasslibPasswordHasher",
    "PasswordHasher",
    "SigningError",
    "TokenExpiredError",
    "TokenInvalidError",
    "TokenService",
]
