"""Persistence records and the store interface shared by all backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class UserRecord:
    id: int
    email: str
    password_hash: str
    created_at: datetime


@dataclass(slots=True)
class EventRecord:
    id: int
    name: str
    description: str
    location: str
    date_time: datetime
    owner_id: int
    created_at: datetime


@dataclass(slots=True)
class RegistrationRecord:
    event_id: int
    user_id: int
    created_at: datetime


class StoreError(Exception):
    """Backend failure (connection, I/O, corrupted schema)."""


class DuplicateEmailError(Exception):
    """A user with this email already exists."""


class DuplicateRegistrationError(Exception):
    """The user is already registered for the event."""


class MissingReferenceError(Exception):
    """A referenced user or event does not exist (e.g. a token outliving its account)."""


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class EventStore(ABC):
    """Users, events and registrations.

    Event ownership is assigned by ``create_event`` and never changes;
    ``update_event`` has no way to touch ``owner_id``.

    Backends that enforce referential integrity raise ``MissingReferenceError``
    from ``create_event`` and ``register_for_event`` for unknown users or events;
    the in-memory store does not check.
    """

    @abstractmethod
    def create_user(self, *, email: str, password_hash: str) -> UserRecord: ...

    @abstractmethod
    def find_user_by_email(self, email: str) -> UserRecord | None: ...

    @abstractmethod
    def create_event(
        self,
        *,
        owner_id: int,
        name: str,
        description: str,
        location: str,
        date_time: datetime,
    ) -> EventRecord: ...

    @abstractmethod
    def list_events(self) -> list[EventRecord]: ...

    @abstractmethod
    def get_event(self, event_id: int) -> EventRecord | None: ...

    @abstractmethod
    def find_event_owner(self, event_id: int) -> int | None: ...

    @abstractmethod
    def update_event(
        self,
        *,
        event_id: int,
        name: str,
        description: str,
        location: str,
        date_time: datetime,
    ) -> EventRecord | None: ...

    @abstractmethod
    def delete_event(self, event_id: int) -> bool: ...

    @abstractmethod
    def register_for_event(self, *, event_id: int, user_id: int) -> RegistrationRecord: ...

    @abstractmethod
    def unregister_from_event(self, *, event_id: int, user_id: int) -> bool: ...

    @abstractmethod
    def list_registrations(self, event_id: int) -> list[RegistrationRecord]: ...
