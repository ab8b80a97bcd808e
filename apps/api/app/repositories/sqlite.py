"""SQLite-backed repository."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path

from app.repositories.base import (
    DuplicateEmailError,
    DuplicateRegistrationError,
    EventRecord,
    EventStore,
    MissingReferenceError,
    RegistrationRecord,
    StoreError,
    UserRecord,
    normalize_email,
)

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    description TEXT NOT NULL,
    location TEXT NOT NULL,
    date_time TEXT NOT NULL,
    user_id INTEGER NOT NULL REFERENCES users(id),
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS registrations (
    event_id INTEGER NOT NULL REFERENCES events(id) ON DELETE CASCADE,
    user_id INTEGER NOT NULL REFERENCES users(id),
    created_at TEXT NOT NULL,
    PRIMARY KEY (event_id, user_id)
);
"""

_EVENT_COLUMNS = "id, name, description, location, date_time, user_id, created_at"


def _to_text(value: datetime) -> str:
    return value.isoformat()


def _from_text(value: str) -> datetime:
    return datetime.fromisoformat(value)


def _is_integrity_violation(exc: StoreError, marker: str) -> bool:
    cause = exc.__cause__
    return isinstance(cause, sqlite3.IntegrityError) and marker in str(cause)


class SqliteStore(EventStore):
    """One short-lived connection per operation; schema is created on init."""

    def __init__(self, path: str) -> None:
        if path.lower().startswith("sqlite:///"):
            path = path[len("sqlite:///") :]
        if not path or path == ":memory:":
            raise ValueError("SqliteStore needs a file path; use InMemoryStore for ephemeral data")
        self._path = path
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        logger.info("store.init backend=sqlite path=%s", path)
        with self._connect() as conn:
            conn.executescript(_SCHEMA)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self._path, timeout=30)
        except sqlite3.Error as exc:
            raise StoreError(f"Could not open database: {exc}") from exc
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON;")
            conn.execute("PRAGMA busy_timeout = 5000;")
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise StoreError(str(exc)) from exc
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def create_user(self, *, email: str, password_hash: str) -> UserRecord:
        normalized = normalize_email(email)
        created_at = datetime.now(UTC)
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    "INSERT INTO users (email, password_hash, created_at) VALUES (?, ?, ?)",
                    (normalized, password_hash, _to_text(created_at)),
                )
                user_id = cursor.lastrowid
        except StoreError as exc:
            if _is_integrity_violation(exc, "UNIQUE"):
                raise DuplicateEmailError(normalized) from exc
            raise
        if user_id is None:
            raise StoreError("Insert returned no user id")
        return UserRecord(id=user_id, email=normalized, password_hash=password_hash, created_at=created_at)

    def find_user_by_email(self, email: str) -> UserRecord | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT id, email, password_hash, created_at FROM users WHERE email = ?",
                (normalize_email(email),),
            ).fetchone()
        if row is None:
            return None
        return UserRecord(
            id=row["id"],
            email=row["email"],
            password_hash=row["password_hash"],
            created_at=_from_text(row["created_at"]),
        )

    def create_event(
        self,
        *,
        owner_id: int,
        name: str,
        description: str,
        location: str,
        date_time: datetime,
    ) -> EventRecord:
        created_at = datetime.now(UTC)
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO events (name, description, location, date_time, user_id, created_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (name, description, location, _to_text(date_time), owner_id, _to_text(created_at)),
                )
                event_id = cursor.lastrowid
        except StoreError as exc:
            if _is_integrity_violation(exc, "FOREIGN KEY"):
                raise MissingReferenceError(f"user {owner_id} does not exist") from exc
            raise
        if event_id is None:
            raise StoreError("Insert returned no event id")
        return EventRecord(
            id=event_id,
            name=name,
            description=description,
            location=location,
            date_time=date_time,
            owner_id=owner_id,
            created_at=created_at,
        )

    def list_events(self) -> list[EventRecord]:
        with self._connect() as conn:
            rows = conn.execute(f"SELECT {_EVENT_COLUMNS} FROM events ORDER BY id").fetchall()
        return [self._event_from_row(row) for row in rows]

    def get_event(self, event_id: int) -> EventRecord | None:
        with self._connect() as conn:
            row = conn.execute(f"SELECT {_EVENT_COLUMNS} FROM events WHERE id = ?", (event_id,)).fetchone()
        return self._event_from_row(row) if row is not None else None

    def find_event_owner(self, event_id: int) -> int | None:
        with self._connect() as conn:
            row = conn.execute("SELECT user_id FROM events WHERE id = ?", (event_id,)).fetchone()
        return int(row["user_id"]) if row is not None else None

    def update_event(
        self,
        *,
        event_id: int,
        name: str,
        description: str,
        location: str,
        date_time: datetime,
    ) -> EventRecord | None:
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE events SET name = ?, description = ?, location = ?, date_time = ? WHERE id = ?",
                (name, description, location, _to_text(date_time), event_id),
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute(f"SELECT {_EVENT_COLUMNS} FROM events WHERE id = ?", (event_id,)).fetchone()
        return self._event_from_row(row)

    def delete_event(self, event_id: int) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM events WHERE id = ?", (event_id,))
            return cursor.rowcount > 0

    def register_for_event(self, *, event_id: int, user_id: int) -> RegistrationRecord:
        created_at = datetime.now(UTC)
        try:
            with self._connect() as conn:
                conn.execute(
                    "INSERT INTO registrations (event_id, user_id, created_at) VALUES (?, ?, ?)",
                    (event_id, user_id, _to_text(created_at)),
                )
        except StoreError as exc:
            if _is_integrity_violation(exc, "UNIQUE"):
                raise DuplicateRegistrationError(f"user {user_id} already registered for event {event_id}") from exc
            if _is_integrity_violation(exc, "FOREIGN KEY"):
                raise MissingReferenceError(f"event {event_id} or user {user_id} does not exist") from exc
            raise
        return RegistrationRecord(event_id=event_id, user_id=user_id, created_at=created_at)

    def unregister_from_event(self, *, event_id: int, user_id: int) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM registrations WHERE event_id = ? AND user_id = ?",
                (event_id, user_id),
            )
            return cursor.rowcount > 0

    def list_registrations(self, event_id: int) -> list[RegistrationRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT event_id, user_id, created_at FROM registrations WHERE event_id = ? "
                "ORDER BY created_at, user_id",
                (event_id,),
            ).fetchall()
        return [
            RegistrationRecord(
                event_id=row["event_id"],
                user_id=row["user_id"],
                created_at=_from_text(row["created_at"]),
            )
            for row in rows
        ]

    @staticmethod
    def _event_from_row(row: sqlite3.Row) -> EventRecord:
        return EventRecord(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            location=row["location"],
            date_time=_from_text(row["date_time"]),
            owner_id=row["user_id"],
            created_at=_from_text(row["created_at"]),
        )
