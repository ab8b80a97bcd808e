"""Event and registration service layer."""

from datetime import datetime

from app.errors import ApiError, not_found_error, unauthenticated_error
from app.repositories.base import (
    DuplicateRegistrationError,
    EventRecord,
    EventStore,
    MissingReferenceError,
    RegistrationRecord,
)
from app.schemas.event import Event, Registration


class EventService:
    def __init__(self, store: EventStore) -> None:
        self._store = store

    def list_events(self) -> list[Event]:
        return [self._to_event(record) for record in self._store.list_events()]

    def get_event(self, *, event_id: int) -> Event:
        record = self._store.get_event(event_id)
        if record is None:
            raise not_found_error()
        return self._to_event(record)

    def create_event(
        self,
        *,
        owner_id: int,
        name: str,
        description: str,
        location: str,
        date_time: datetime,
    ) -> Event:
        try:
            record = self._store.create_event(
                owner_id=owner_id,
                name=name,
                description=description,
                location=location,
                date_time=date_time,
            )
        except MissingReferenceError as exc:
            # Token is still valid but its account is gone.
            raise unauthenticated_error("Account no longer exists", reason="token_invalid") from exc
        return self._to_event(record)

    def update_event(
        self,
        *,
        event_id: int,
        name: str,
        description: str,
        location: str,
        date_time: datetime,
    ) -> Event:
        record = self._store.update_event(
            event_id=event_id,
            name=name,
            description=description,
            location=location,
            date_time=date_time,
        )
        if record is None:
            raise not_found_error()
        return self._to_event(record)

    def delete_event(self, *, event_id: int) -> None:
        if not self._store.delete_event(event_id):
            raise not_found_error()

    def register(self, *, event_id: int, user_id: int) -> Registration:
        if self._store.get_event(event_id) is None:
            raise not_found_error()
        try:
            record = self._store.register_for_event(event_id=event_id, user_id=user_id)
        except DuplicateRegistrationError as exc:
            raise ApiError(
                status_code=409,
                code="ALREADY_REGISTERED",
                message="Already registered for event",
            ) from exc
        except MissingReferenceError as exc:
            raise not_found_error() from exc
        return self._to_registration(record)

    def unregister(self, *, event_id: int, user_id: int) -> None:
        if not self._store.unregister_from_event(event_id=event_id, user_id=user_id):
            raise not_found_error()

    def list_registrations(self, *, event_id: int) -> list[Registration]:
        return [self._to_registration(record) for record in self._store.list_registrations(event_id)]

    @staticmethod
    def _to_event(record: EventRecord) -> Event:
        return Event(
            id=record.id,
            name=record.name,
            description=record.description,
            location=record.location,
            date_time=record.date_time,
            user_id=record.owner_id,
            created_at=record.created_at,
        )

    @staticmethod
    def _to_registration(record: RegistrationRecord) -> Registration:
        return Registration(event_id=record.event_id, user_id=record.user_id, created_at=record.created_at)
