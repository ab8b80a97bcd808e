"""Passlib-backed password hashing adapter."""

from __future__ import annotations

from passlib.context import CryptContext

from app.adapters.auth.base import HashingError, PasswordHasher

_SCHEME = "pbkdf2_sha256"


class PasslibPasswordHasher(PasswordHasher):
    """Salted PBKDF2-SHA256 hashes in passlib's modular crypt format."""

    def __init__(self, rounds: int | None = None) -> None:
        options: dict[str, int] = {}
        if rounds is not None:
            options[f"{_SCHEME}__default_rounds"] = rounds
        self._context = CryptContext(schemes=[_SCHEME], deprecated="auto", **options)

    def hash_password(self, password: str) -> str:
        try:
            return self._context.hash(password)
        except (TypeError, ValueError) as exc:
            raise HashingError("Password could not be hashed") from exc

    def verify_password(self, password: str, password_hash: str) -> bool:
        if not password or not password_hash:
            return False
        try:
            return self._context.verify(password, password_hash)
        except (TypeError, ValueError):
            # Unidentified or malformed hash formats count as a mismatch.
            return False

    def dummy_verify(self) -> None:
        self._context.dummy_verify()


__all__ = ["PasslibPasswordHasher"]
