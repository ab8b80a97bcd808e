"""Dependency wiring for routes."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Annotated
from uuid import uuid4

from fastapi import Depends, Path, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.adapters.auth import JwtTokenService, PasslibPasswordHasher, PasswordHasher, TokenService
from app.core.config import Settings, get_settings
from app.core.logging_safety import safe_log_identifier
from app.domain.ownership import MutationAction
from app.errors import ApiError
from app.repositories.base import EventStore
from app.repositories.memory import InMemoryStore
from app.repositories.sqlite import SqliteStore
from app.schemas.auth import AuthPrincipal
from app.services.accounts import AccountService
from app.services.authorization import AuthorizationGate
from app.services.events import EventService

bearer_scheme = HTTPBearer(auto_error=False, scheme_name="bearerAuth")
logger = logging.getLogger(__name__)

_ACTIONS_BY_METHOD: dict[str, MutationAction] = {
    "PUT": "update",
    "PATCH": "update",
    "DELETE": "delete",
}


def _request_correlation_id(request: Request) -> str:
    existing = getattr(request.state, "correlation_id", None)
    if isinstance(existing, str) and existing:
        return existing

    correlation_id = request.headers.get("X-Correlation-Id")
    if correlation_id:
        request.state.correlation_id = correlation_id
        return correlation_id

    generated = f"req-{uuid4()}"
    request.state.correlation_id = generated
    return generated


def build_store(settings: Settings) -> EventStore:
    if settings.database_path:
        return SqliteStore(settings.database_path)
    return InMemoryStore()


def get_store(request: Request, settings: Annotated[Settings, Depends(get_settings)]) -> EventStore:
    """Return the app-wide store, building it from settings on first use."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        store = build_store(settings)
        request.app.state.store = store
    return store


@lru_cache(maxsize=8)
def _password_hasher(rounds: int | None) -> PasswordHasher:
    return PasslibPasswordHasher(rounds=rounds)


@lru_cache(maxsize=8)
def _token_service(signing_keys: tuple[tuple[str, str], ...], active_key_id: str) -> TokenService:
    return JwtTokenService(signing_keys=dict(signing_keys), active_key_id=active_key_id)


def get_password_hasher(settings: Annotated[Settings, Depends(get_settings)]) -> PasswordHasher:
    return _password_hasher(settings.password_hash_rounds)


def get_token_service(settings: Annotated[Settings, Depends(get_settings)]) -> TokenService:
    """Shared per keyring; a settings change yields a new service."""
    return _token_service(tuple(sorted(settings.signing_keys().items())), settings.token_key_id)


def get_authorization_gate(
    tokens: Annotated[TokenService, Depends(get_token_service)],
    store: Annotated[EventStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthorizationGate:
    return AuthorizationGate(tokens, store, hide_foreign_resources=settings.hide_foreign_resources)


def get_authenticated_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    gate: Annotated[AuthorizationGate, Depends(get_authorization_gate)],
) -> AuthPrincipal:
    """Validate bearer token and attach normalized principal to request context."""
    correlation_id = _request_correlation_id(request)
    safe_correlation_id = safe_log_identifier(correlation_id, prefix="cid")
    token = None
    if credentials is not None and credentials.scheme.lower() == "bearer":
        token = credentials.credentials

    try:
        principal = gate.authenticate(token)
    except ApiError as exc:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s reason=%s",
            safe_correlation_id,
            request.method,
            request.url.path,
            (exc.payload.details or {}).get("reason", "unknown"),
        )
        raise

    logger.info(
        "auth.accepted correlation_id=%s method=%s path=%s principal_id=%s",
        safe_correlation_id,
        request.method,
        request.url.path,
        safe_log_identifier(principal.user_id, prefix="pid"),
    )
    request.state.auth_principal = principal
    return principal


def require_event_owner(
    request: Request,
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    gate: Annotated[AuthorizationGate, Depends(get_authorization_gate)],
    event_id: Annotated[int, Path(alias="eventId")],
) -> AuthPrincipal:
    """Authenticate, then allow only the event's owner through."""
    action = _ACTIONS_BY_METHOD.get(request.method.upper(), "manage")
    gate.authorize_event_mutation(principal, event_id, action=action)
    return principal


def get_account_service(
    store: Annotated[EventStore, Depends(get_store)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AccountService:
    return AccountService(store, hasher, tokens)


def get_event_service(store: Annotated[EventStore, Depends(get_store)]) -> EventService:
    return EventService(store)
