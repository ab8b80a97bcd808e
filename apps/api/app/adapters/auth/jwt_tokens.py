"""HMAC-signed JWT token service."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

import jwt

from app.adapters.auth.base import (
    TOKEN_TTL,
    SigningError,
    TokenExpiredError,
    TokenInvalidError,
    TokenService,
)
from app.schemas.auth import AuthPrincipal

_ALGORITHM = "HS256"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class JwtTokenService(TokenService):
    """Issues HS256 JWTs and verifies them against a keyring.

    Every token carries the ``kid`` of the key that signed it. The active key
    signs new tokens; any key still present in ``signing_keys`` verifies, which
    lets a retired secret keep validating outstanding tokens until they expire.

    Claims are ``userId``, ``email``, ``issuedAt`` and ``expiredAt`` (Unix
    seconds). Expiry is checked here rather than through PyJWT's registered
    ``exp`` claim so the clock stays injectable.
    """

    def __init__(
        self,
        *,
        signing_keys: Mapping[str, str],
        active_key_id: str,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if not signing_keys.get(active_key_id):
            raise ValueError(f"Active signing key {active_key_id!r} is not configured")
        self._keys = dict(signing_keys)
        self._active_key_id = active_key_id
        self._clock = clock or _utcnow

    def issue_token(self, *, user_id: int, email: str) -> str:
        issued_at = int(self._clock().timestamp())
        claims: dict[str, Any] = {
            "userId": user_id,
            "email": email,
            "issuedAt": issued_at,
            "expiredAt": issued_at + int(TOKEN_TTL.total_seconds()),
        }
        try:
            return jwt.encode(
                claims,
                self._keys[self._active_key_id],
                algorithm=_ALGORITHM,
                headers={"kid": self._active_key_id},
            )
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            raise SigningError("Token could not be signed") from exc

    def verify_token(self, token: str) -> AuthPrincipal:
        try:
            header = jwt.get_unverified_header(token)
        except jwt.PyJWTError as exc:
            raise TokenInvalidError("Malformed token") from exc

        key_id = header.get("kid")
        secret = self._keys.get(key_id) if isinstance(key_id, str) else None
        if not secret:
            raise TokenInvalidError("Token signed with an unknown key")

        try:
            claims = jwt.decode(token, secret, algorithms=[_ALGORITHM])
        except jwt.InvalidSignatureError as exc:
            raise TokenInvalidError("Token signature mismatch") from exc
        except jwt.PyJWTError as exc:
            raise TokenInvalidError("Malformed token") from exc

        user_id = claims.get("userId")
        email = claims.get("email")
        expired_at = claims.get("expiredAt")
        if not _is_int(user_id) or user_id < 1:
            raise TokenInvalidError("Token missing user identity")
        if not isinstance(email, str) or not email:
            raise TokenInvalidError("Token missing email")
        if not _is_int(expired_at):
            raise TokenInvalidError("Token missing expiry")

        if int(self._clock().timestamp()) > expired_at:
            raise TokenExpiredError("Token has expired")

        return AuthPrincipal(user_id=user_id, email=email)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


__all__ = ["JwtTokenService"]
