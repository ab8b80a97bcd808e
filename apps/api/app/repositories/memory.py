"""In-memory repository used by local runs and tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from app.repositories.base import (
    DuplicateEmailError,
    DuplicateRegistrationError,
    EventRecord,
    EventStore,
    RegistrationRecord,
    UserRecord,
    normalize_email,
)


@dataclass(slots=True)
class InMemoryStore(EventStore):
    """Simple, deterministic persistence layer for scaffolding and tests."""

    users: dict[int, UserRecord] = field(default_factory=dict)
    user_ids_by_email: dict[str, int] = field(default_factory=dict)
    events: dict[int, EventRecord] = field(default_factory=dict)
    registrations: dict[tuple[int, int], RegistrationRecord] = field(default_factory=dict)
    next_user_id: int = 1
    next_event_id: int = 1
    user_write_count: int = 0
    event_write_count: int = 0
    owner_lookup_count: int = 0

    def create_user(self, *, email: str, password_hash: str) -> UserRecord:
        normalized = normalize_email(email)
        if normalized in self.user_ids_by_email:
            raise DuplicateEmailError(normalized)

        user = UserRecord(
            id=self.next_user_id,
            email=normalized,
            password_hash=password_hash,
            created_at=datetime.now(UTC),
        )
        self.next_user_id += 1
        self.users[user.id] = user
        self.user_ids_by_email[normalized] = user.id
        self.user_write_count += 1
        return user

    def find_user_by_email(self, email: str) -> UserRecord | None:
        user_id = self.user_ids_by_email.get(normalize_email(email))
        if user_id is None:
            return None
        return self.users.get(user_id)

    def create_event(
        self,
        *,
        owner_id: int,
        name: str,
        description: str,
        location: str,
        date_time: datetime,
    ) -> EventRecord:
        event = EventRecord(
            id=self.next_event_id,
            name=name,
            description=description,
            location=location,
            date_time=date_time,
            owner_id=owner_id,
            created_at=datetime.now(UTC),
        )
        self.next_event_id += 1
        self.events[event.id] = event
        self.event_write_count += 1
        return event

    def list_events(self) -> list[EventRecord]:
        return sorted(self.events.values(), key=lambda record: record.id)

    def get_event(self, event_id: int) -> EventRecord | None:
        return self.events.get(event_id)

    def find_event_owner(self, event_id: int) -> int | None:
        self.owner_lookup_count += 1
        event = self.events.get(event_id)
        return event.owner_id if event is not None else None

    def update_event(
        self,
        *,
        event_id: int,
        name: str,
        description: str,
        location: str,
        date_time: datetime,
    ) -> EventRecord | None:
        event = self.events.get(event_id)
        if event is None:
            return None
        event.name = name
        event.description = description
        event.location = location
        event.date_time = date_time
        self.event_write_count += 1
        return event

    def delete_event(self, event_id: int) -> bool:
        if self.events.pop(event_id, None) is None:
            return False
        for key in [key for key in self.registrations if key[0] == event_id]:
            del self.registrations[key]
        self.event_write_count += 1
        return True

    def register_for_event(self, *, event_id: int, user_id: int) -> RegistrationRecord:
        key = (event_id, user_id)
        if key in self.registrations:
            raise DuplicateRegistrationError(f"user {user_id} already registered for event {event_id}")
        registration = RegistrationRecord(event_id=event_id, user_id=user_id, created_at=datetime.now(UTC))
        self.registrations[key] = registration
        return registration

    def unregister_from_event(self, *, event_id: int, user_id: int) -> bool:
        return self.registrations.pop((event_id, user_id), None) is not None

    def list_registrations(self, event_id: int) -> list[RegistrationRecord]:
        registrations = [record for key, record in self.registrations.items() if key[0] == event_id]
        registrations.sort(key=lambda record: (record.created_at, record.user_id))
        return registrations
