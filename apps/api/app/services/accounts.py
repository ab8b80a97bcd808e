"""Signup and login service layer."""

from __future__ import annotations

import logging

from app.adapters.auth import TOKEN_TTL, HashingError, PasswordHasher, SigningError, TokenService
from app.core.logging_safety import safe_log_email, safe_log_identifier
from app.errors import ApiError
from app.repositories.base import DuplicateEmailError, EventStore
from app.schemas.auth import LoginResponse, User

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(self, store: EventStore, hasher: PasswordHasher, tokens: TokenService) -> None:
        self._store = store
        self._hasher = hasher
        self._tokens = tokens

    def signup(self, *, email: str, password: str) -> User:
        try:
            password_hash = self._hasher.hash_password(password)
        except HashingError as exc:
            logger.error("account.signup_failed email=%s reason=hashing_failed", safe_log_email(email))
            raise ApiError(status_code=500, code="HASHING_FAILED", message="Could not create user") from exc

        try:
            record = self._store.create_user(email=email, password_hash=password_hash)
        except DuplicateEmailError as exc:
            raise ApiError(
                status_code=409,
                code="EMAIL_ALREADY_REGISTERED",
                message="Email is already registered",
            ) from exc

        logger.info(
            "account.signup_completed principal_id=%s email=%s",
            safe_log_identifier(record.id, prefix="pid"),
            safe_log_email(record.email),
        )
        return User(id=record.id, email=record.email)

    def login(self, *, email: str, password: str) -> LoginResponse:
        record = self._store.find_user_by_email(email)
        # Unknown email and wrong password are reported identically, in body and in timing.
        if record is None:
            self._hasher.dummy_verify()
        if record is None or not self._hasher.verify_password(password, record.password_hash):
            logger.warning(
                "account.login_rejected email=%s reason=%s",
                safe_log_email(email),
                "unknown_email" if record is None else "password_mismatch",
            )
            raise ApiError(status_code=401, code="INVALID_CREDENTIALS", message="Could not authenticate user")

        try:
            token = self._tokens.issue_token(user_id=record.id, email=record.email)
        except SigningError as exc:
            logger.error(
                "account.login_failed principal_id=%s reason=signing_failed",
                safe_log_identifier(record.id, prefix="pid"),
            )
            raise ApiError(status_code=500, code="TOKEN_SIGNING_FAILED", message="Could not generate token") from exc

        logger.info("account.login_succeeded principal_id=%s", safe_log_identifier(record.id, prefix="pid"))
        return LoginResponse(token=token, expires_in=int(TOKEN_TTL.total_seconds()))
