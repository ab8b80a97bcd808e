"""Ownership enforcement tests for event mutations and registrations."""

from __future__ import annotations

import os
import unittest
from datetime import UTC, datetime

from fastapi.testclient import TestClient

from app.adapters.auth.jwt_tokens import JwtTokenService
from app.core.config import get_settings
from app.domain.ownership import ensure_owner
from app.errors import ApiError
from app.main import create_app
from app.repositories.base import StoreError
from app.repositories.memory import InMemoryStore
from app.schemas.auth import AuthPrincipal
from app.services.authorization import AuthorizationGate

_SECRET = "test-signing-secret-0123456789abcdef"
_TOKENS = JwtTokenService(signing_keys={"v1": _SECRET}, active_key_id="v1")
_NOT_FOUND = {"code": "RESOURCE_NOT_FOUND", "message": "Resource not found"}


def _headers(user_id: int, email: str | None = None) -> dict[str, str]:
    token = _TOKENS.issue_token(user_id=user_id, email=email or f"user{user_id}@example.com")
    return {"Authorization": f"Bearer {token}"}


def _event_body(name: str = "Go Workshop Jakarta") -> dict[str, str]:
    return {
        "name": name,
        "description": "A beginner-friendly workshop covering fundamentals.",
        "location": "Jakarta",
        "date_time": "2025-12-16T09:00:00+07:00",
    }


class _SettingsEnvCase(unittest.TestCase):
    _env_keys = (
        "EVENTHUB_TOKEN_SECRET",
        "EVENTHUB_TOKEN_KEY_ID",
        "EVENTHUB_TOKEN_RETIRED_KEYS",
        "EVENTHUB_DATABASE_PATH",
        "EVENTHUB_HIDE_FOREIGN_RESOURCES",
        "EVENTHUB_PASSWORD_HASH_ROUNDS",
    )

    def setUp(self) -> None:
        self._old_env = {k: os.environ.get(k) for k in self._env_keys}
        for key in self._env_keys:
            os.environ.pop(key, None)
        os.environ["EVENTHUB_TOKEN_SECRET"] = _SECRET
        os.environ["EVENTHUB_PASSWORD_HASH_ROUNDS"] = "1000"
        get_settings.cache_clear()

    def tearDown(self) -> None:
        for key, value in self._old_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        get_settings.cache_clear()


class _FailingOwnerLookupStore(InMemoryStore):
    def find_event_owner(self, event_id: int) -> int | None:
        raise StoreError("database is locked")


class EventOwnershipApiTests(_SettingsEnvCase):
    def setUp(self) -> None:
        super().setUp()
        self.store = InMemoryStore()
        self.client = TestClient(create_app(store=self.store))

    def _create_event(self, owner_id: int, name: str = "Go Workshop Jakarta") -> int:
        response = self.client.post("/api/v1/events", headers=_headers(owner_id), json=_event_body(name))
        self.assertEqual(response.status_code, 201)
        return response.json()["id"]

    def test_create_stamps_authenticated_user_as_owner(self) -> None:
        response = self.client.post("/api/v1/events", headers=_headers(7), json=_event_body())

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["user_id"], 7)
        self.assertEqual(body["name"], "Go Workshop Jakarta")
        self.assertIn("created_at", body)
        self.assertEqual(self.store.events[body["id"]].owner_id, 7)

    def test_client_supplied_owner_is_ignored(self) -> None:
        payload = _event_body() | {"user_id": 99}

        response = self.client.post("/api/v1/events", headers=_headers(7), json=payload)

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["user_id"], 7)

    def test_owner_can_update_and_delete(self) -> None:
        event_id = self._create_event(owner_id=1)

        updated = self.client.put(
            f"/api/v1/events/{event_id}",
            headers=_headers(1),
            json=_event_body("Renamed Workshop"),
        )
        self.assertEqual(updated.status_code, 200)
        self.assertEqual(updated.json()["name"], "Renamed Workshop")
        self.assertEqual(updated.json()["user_id"], 1)

        deleted = self.client.delete(f"/api/v1/events/{event_id}", headers=_headers(1))
        self.assertEqual(deleted.status_code, 204)
        self.assertEqual(deleted.content, b"")
        self.assertNotIn(event_id, self.store.events)

    def test_non_owner_update_and_delete_return_403_without_side_effect(self) -> None:
        event_id = self._create_event(owner_id=1)
        writes_before = self.store.event_write_count

        updated = self.client.put(
            f"/api/v1/events/{event_id}",
            headers=_headers(2),
            json=_event_body("Hijacked"),
        )
        self.assertEqual(updated.status_code, 403)
        self.assertEqual(
            updated.json(),
            {"code": "FORBIDDEN", "message": "Not authorized to update event"},
        )

        deleted = self.client.delete(f"/api/v1/events/{event_id}", headers=_headers(2))
        self.assertEqual(deleted.status_code, 403)
        self.assertEqual(deleted.json()["message"], "Not authorized to delete event")

        self.assertEqual(self.store.event_write_count, writes_before)
        self.assertEqual(self.store.events[event_id].name, "Go Workshop Jakarta")

    def test_non_owner_with_invalid_body_is_still_forbidden(self) -> None:
        event_id = self._create_event(owner_id=1)

        response = self.client.put(f"/api/v1/events/{event_id}", headers=_headers(2), json={"name": ""})

        self.assertEqual(response.status_code, 403)

    def test_owner_with_invalid_body_gets_validation_error(self) -> None:
        event_id = self._create_event(owner_id=1)

        response = self.client.put(f"/api/v1/events/{event_id}", headers=_headers(1), json={"name": ""})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "VALIDATION_ERROR")
        self.assertEqual(response.json()["message"], "Could not parse request")

    def test_missing_event_returns_404_for_mutations(self) -> None:
        updated = self.client.put("/api/v1/events/404", headers=_headers(1), json=_event_body())
        deleted = self.client.delete("/api/v1/events/404", headers=_headers(1))

        self.assertEqual(updated.status_code, 404)
        self.assertEqual(updated.json(), _NOT_FOUND)
        self.assertEqual(deleted.status_code, 404)
        self.assertEqual(deleted.json(), _NOT_FOUND)

    def test_unauthenticated_mutations_never_look_up_owner(self) -> None:
        event_id = self._create_event(owner_id=1)
        lookups_before = self.store.owner_lookup_count

        for response in (
            self.client.put(f"/api/v1/events/{event_id}", json=_event_body("Anonymous")),
            self.client.delete(f"/api/v1/events/{event_id}"),
            self.client.put("/api/v1/events/404", json=_event_body()),
            self.client.delete(f"/api/v1/events/{event_id}", headers={"Authorization": "Bearer garbage"}),
        ):
            self.assertEqual(response.status_code, 401)

        self.assertEqual(self.store.owner_lookup_count, lookups_before)
        self.assertIn(event_id, self.store.events)

    def test_hidden_foreign_resources_match_missing_resource_response(self) -> None:
        os.environ["EVENTHUB_HIDE_FOREIGN_RESOURCES"] = "true"
        get_settings.cache_clear()
        event_id = self._create_event(owner_id=1)

        foreign = self.client.delete(f"/api/v1/events/{event_id}", headers=_headers(2))
        missing = self.client.delete("/api/v1/events/9999", headers=_headers(2))

        self.assertEqual(foreign.status_code, 404)
        self.assertEqual(foreign.json(), missing.json())
        self.assertEqual(foreign.json(), _NOT_FOUND)
        self.assertIn(event_id, self.store.events)

    def test_invalid_event_id_is_rejected_after_authentication(self) -> None:
        with_auth = self.client.delete("/api/v1/events/not-a-number", headers=_headers(1))
        without_auth = self.client.delete("/api/v1/events/not-a-number")

        self.assertEqual(with_auth.status_code, 400)
        self.assertEqual(with_auth.json()["code"], "VALIDATION_ERROR")
        self.assertEqual(without_auth.status_code, 401)
        self.assertEqual(self.store.owner_lookup_count, 0)

    def test_reads_are_public(self) -> None:
        first = self._create_event(owner_id=1, name="First")
        second = self._create_event(owner_id=2, name="Second")

        listed = self.client.get("/api/v1/events")
        self.assertEqual(listed.status_code, 200)
        self.assertEqual([event["id"] for event in listed.json()], [first, second])

        loaded = self.client.get(f"/api/v1/events/{second}")
        self.assertEqual(loaded.status_code, 200)
        self.assertEqual(loaded.json()["name"], "Second")

        missing = self.client.get("/api/v1/events/9999")
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(missing.json(), _NOT_FOUND)

    def test_registration_lifecycle(self) -> None:
        event_id = self._create_event(owner_id=1)
        path = f"/api/v1/events/{event_id}/registrations"

        registered = self.client.post(path, headers=_headers(2))
        self.assertEqual(registered.status_code, 201)
        self.assertEqual(registered.json()["event_id"], event_id)
        self.assertEqual(registered.json()["user_id"], 2)

        duplicate = self.client.post(path, headers=_headers(2))
        self.assertEqual(duplicate.status_code, 409)
        self.assertEqual(duplicate.json()["code"], "ALREADY_REGISTERED")

        owner_view = self.client.get(path, headers=_headers(1))
        self.assertEqual(owner_view.status_code, 200)
        self.assertEqual([item["user_id"] for item in owner_view.json()], [2])

        attendee_view = self.client.get(path, headers=_headers(2))
        self.assertEqual(attendee_view.status_code, 403)
        self.assertEqual(attendee_view.json()["message"], "Not authorized to manage event")

        cancelled = self.client.delete(path, headers=_headers(2))
        self.assertEqual(cancelled.status_code, 204)

        cancelled_again = self.client.delete(path, headers=_headers(2))
        self.assertEqual(cancelled_again.status_code, 404)

    def test_registration_requires_authentication_and_existing_event(self) -> None:
        anonymous = self.client.post("/api/v1/events/1/registrations")
        self.assertEqual(anonymous.status_code, 401)

        missing = self.client.post("/api/v1/events/9999/registrations", headers=_headers(2))
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(self.store.registrations, {})

    def test_deleting_event_removes_its_registrations(self) -> None:
        event_id = self._create_event(owner_id=1)
        other_id = self._create_event(owner_id=1, name="Other")
        self.client.post(f"/api/v1/events/{event_id}/registrations", headers=_headers(2))
        self.client.post(f"/api/v1/events/{other_id}/registrations", headers=_headers(2))

        response = self.client.delete(f"/api/v1/events/{event_id}", headers=_headers(1))

        self.assertEqual(response.status_code, 204)
        self.assertEqual(list(self.store.registrations), [(other_id, 2)])

    def test_rejected_mutation_is_logged(self) -> None:
        event_id = self._create_event(owner_id=1)

        with self.assertLogs("app.services.authorization", level="WARNING") as captured:
            self.client.delete(f"/api/v1/events/{event_id}", headers=_headers(2))

        output = "\n".join(captured.output)
        self.assertIn("authz.rejected", output)
        self.assertIn("action=delete", output)
        self.assertIn("reason=not_owner", output)


class AuthorizationGateUnitTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = InMemoryStore()
        self.gate = AuthorizationGate(_TOKENS, self.store)
        self.owner = AuthPrincipal(user_id=1, email="owner@example.com")
        self.other = AuthPrincipal(user_id=2, email="other@example.com")

    def _event_id(self) -> int:
        return self.store.create_event(
            owner_id=self.owner.user_id,
            name="Event",
            description="Description",
            location="Jakarta",
            date_time=datetime(2025, 12, 16, 9, 0, tzinfo=UTC),
        ).id

    def test_authenticate_rejects_missing_token(self) -> None:
        for token in (None, ""):
            with self.subTest(token=token):
                with self.assertRaises(ApiError) as context:
                    self.gate.authenticate(token)
                self.assertEqual(context.exception.status_code, 401)
                self.assertEqual(context.exception.payload.details, {"reason": "missing_token"})

    def test_authenticate_returns_principal_for_valid_token(self) -> None:
        token = _TOKENS.issue_token(user_id=3, email="c@example.com")

        principal = self.gate.authenticate(token)

        self.assertEqual(principal, AuthPrincipal(user_id=3, email="c@example.com"))

    def test_owner_is_allowed(self) -> None:
        event_id = self._event_id()

        self.gate.authorize_event_mutation(self.owner, event_id, action="update")

        self.assertEqual(self.store.owner_lookup_count, 1)

    def test_non_owner_is_forbidden(self) -> None:
        event_id = self._event_id()

        with self.assertRaises(ApiError) as context:
            self.gate.authorize_event_mutation(self.other, event_id, action="delete")

        self.assertEqual(context.exception.status_code, 403)
        self.assertEqual(context.exception.payload.code, "FORBIDDEN")

    def test_missing_event_is_not_found(self) -> None:
        with self.assertRaises(ApiError) as context:
            self.gate.authorize_event_mutation(self.owner, 404, action="update")

        self.assertEqual(context.exception.status_code, 404)

    def test_owner_lookup_failure_is_reported_as_not_found(self) -> None:
        gate = AuthorizationGate(_TOKENS, _FailingOwnerLookupStore())

        with self.assertLogs("app.services.authorization", level="ERROR"):
            with self.assertRaises(ApiError) as context:
                gate.authorize_event_mutation(self.owner, 1, action="update")

        self.assertEqual(context.exception.status_code, 404)
        self.assertEqual(context.exception.payload.code, "RESOURCE_NOT_FOUND")

    def test_stamp_owner_uses_principal_id(self) -> None:
        self.assertEqual(AuthorizationGate.stamp_owner(self.other), 2)


class EnsureOwnerTests(unittest.TestCase):
    def test_matching_owner_passes(self) -> None:
        self.assertIsNone(ensure_owner(owner_id=5, principal_id=5, action="update"))

    def test_absent_owner_is_not_found_even_when_hiding(self) -> None:
        for hide_foreign in (False, True):
            with self.subTest(hide_foreign=hide_foreign):
                with self.assertRaises(ApiError) as context:
                    ensure_owner(owner_id=None, principal_id=5, action="delete", hide_foreign=hide_foreign)
                self.assertEqual(context.exception.status_code, 404)

    def test_mismatch_is_forbidden_or_hidden(self) -> None:
        with self.assertRaises(ApiError) as forbidden:
            ensure_owner(owner_id=1, principal_id=2, action="manage", resource="registration list")
        self.assertEqual(forbidden.exception.status_code, 403)
        self.assertEqual(forbidden.exception.payload.message, "Not authorized to manage registration list")

        with self.assertRaises(ApiError) as hidden:
            ensure_owner(owner_id=1, principal_id=2, action="update", hide_foreign=True)
        self.assertEqual(hidden.exception.status_code, 404)
        self.assertEqual(hidden.exception.payload.code, "RESOURCE_NOT_FOUND")


if __name__ == "__main__":
    unittest.main()
