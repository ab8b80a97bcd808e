"""Authorization gate: bearer verification and ownership enforcement."""

from __future__ import annotations

import logging

from app.adapters.auth import AuthVerificationError, TokenExpiredError, TokenService
from app.core.logging_safety import safe_log_identifier
from app.domain.ownership import MutationAction, ensure_owner
from app.errors import ApiError, unauthenticated_error
from app.repositories.base import EventStore, StoreError
from app.schemas.auth import AuthPrincipal

logger = logging.getLogger(__name__)


class AuthorizationGate:
    """Decides whether a request is authenticated and entitled to act.

    Checks run in a fixed order and stop at the first failure: a missing
    token is rejected before verification, and verification always happens
    before any owner lookup touches the store.
    """

    def __init__(self, tokens: TokenService, store: EventStore, *, hide_foreign_resources: bool = False) -> None:
        self._tokens = tokens
        self._store = store
        self._hide_foreign_resources = hide_foreign_resources

    def authenticate(self, token: str | None) -> AuthPrincipal:
        if not token:
            raise unauthenticated_error("Not authorized", reason="missing_token")

        try:
            return self._tokens.verify_token(token)
        except TokenExpiredError as exc:
            raise unauthenticated_error("Token has expired", reason="token_expired") from exc
        except AuthVerificationError as exc:
            raise unauthenticated_error("Could not verify token", reason="token_invalid") from exc

    def authorize_event_mutation(
        self,
        principal: AuthPrincipal,
        event_id: int,
        *,
        action: MutationAction,
    ) -> None:
        try:
            owner_id = self._store.find_event_owner(event_id)
        except StoreError:
            logger.exception("authz.owner_lookup_failed event_id=%s action=%s", event_id, action)
            owner_id = None

        try:
            ensure_owner(
                owner_id=owner_id,
                principal_id=principal.user_id,
                action=action,
                hide_foreign=self._hide_foreign_resources,
            )
        except ApiError:
            logger.warning(
                "authz.rejected principal_id=%s event_id=%s action=%s reason=%s",
                safe_log_identifier(principal.user_id, prefix="pid"),
                event_id,
                action,
                "not_found" if owner_id is None else "not_owner",
            )
            raise

    @staticmethod
    def stamp_owner(principal: AuthPrincipal) -> int:
        """Owner id for a resource the principal is creating."""
        return principal.user_id
