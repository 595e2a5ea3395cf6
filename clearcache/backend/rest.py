"""
Client for a Supabase-style project: PostgREST tables under /rest/v1 and the
GoTrue email one-time-code flow under /auth/v1.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

import httpx
from clearcache.backend.base import (AuthError, Backend, BackendError,
                                     NotFoundError)
from clearcache.backend.models import (Badge, Entry, FeatureFlag, Profile,
                                       User, UserBadge, UserStreaks)
from textual import log

TIMEOUT = 10.0


class SessionAuth(httpx.Auth):
    """Attaches the project key and the signed-in user's bearer token."""

    def __init__(self, api_key: str, get_access) -> None:
        self._api_key = api_key
        self._get_access = get_access

    def auth_flow(self, request):
        request.headers["apikey"] = self._api_key
        request.headers["Authorization"] = f"Bearer {self._get_access() or self._api_key}"
        yield request


class RestBackend(Backend):

    def __init__(self, url: str, api_key: str, transport: httpx.BaseTransport | None = None) -> None:
        self._access_token: str | None = None
        self._user: User | None = None
        self._client = httpx.Client(
            base_url=url.rstrip("/"),
            auth=SessionAuth(api_key, lambda: self._access_token),
            timeout=TIMEOUT,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    # ─────────────────────────────────────────────────────────────────────────
    # Transport
    # ─────────────────────────────────────────────────────────────────────────

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise BackendError(f"{method} {path} failed: {e}") from e
        if response.status_code in (401, 403):
            raise AuthError(self._message(response))
        if response.status_code == 404:
            raise NotFoundError(self._message(response))
        if response.is_error:
            raise BackendError(f"{method} {path} returned {response.status_code}: {self._message(response)}")
        return response

    @staticmethod
    def _message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase
        if isinstance(body, dict):
            return str(body.get("message") or body.get("msg") or body.get("error_description") or body)
        return str(body)

    def _select(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        return self._request("GET", f"/rest/v1/{table}", params={"select": "*", **params}).json()

    def _write(self, method: str, table: str, params: dict[str, str] | None, body: dict[str, Any]) -> list[dict[str, Any]]:
        response = self._request(
            method, f"/rest/v1/{table}",
            params=params,
            json=body,
            headers={"Prefer": "return=representation"},
        )
        return response.json()

    @staticmethod
    def _one(rows: list[dict[str, Any]], what: str) -> dict[str, Any]:
        if not rows:
            raise NotFoundError(f"{what} not found.")
        return rows[0]

    # ─────────────────────────────────────────────────────────────────────────
    # Auth
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def current_user(self) -> User | None:
        return self._user

    def request_login(self, email: str) -> None:
        self._request("POST", "/auth/v1/otp", json={"email": email.strip(), "create_user": True})
        log(f"Requested a login code for {email}.")

    def verify_login(self, email: str, code: str) -> User:
        try:
            response = self._request(
                "POST", "/auth/v1/verify",
                json={"type": "email", "email": email.strip(), "token": code.strip()},
            )
        except BackendError as e:
            raise AuthError(f"Could not verify code: {e}") from e
        body = response.json()
        user = body.get("user") or {}
        if not body.get("access_token") or not user.get("id"):
            raise AuthError("The server did not return a session.")
        self._access_token = body["access_token"]
        self._user = User(id=str(user["id"]), email=user.get("email"))
        return self._user

    def sign_out(self) -> None:
        try:
            if self._access_token:
                self._request("POST", "/auth/v1/logout")
        finally:
            self._access_token = None
            self._user = None

    # ─────────────────────────────────────────────────────────────────────────
    # Entries
    # ─────────────────────────────────────────────────────────────────────────

    def list_entries(self, newest_first: bool = True) -> list[Entry]:
        user = self.require_user()
        rows = self._select("entries", {
            "user_id": f"eq.{user.id}",
            "order": f"created_at.{'desc' if newest_first else 'asc'}",
        })
        return [Entry.from_row(row) for row in rows]

    def get_entry(self, entry_id: str) -> Entry:
        self.require_user()
        return Entry.from_row(self._one(self._select("entries", {"id": f"eq.{entry_id}"}), f"Entry {entry_id}"))

    def create_entry(self, title: str, content: str) -> Entry:
        user = self.require_user()
        rows = self._write("POST", "entries", None, {"user_id": user.id, "title": title, "content": content})
        return Entry.from_row(self._one(rows, "Created entry"))

    def update_entry(self, entry_id: str, title: str, content: str) -> Entry:
        self.require_user()
        rows = self._write("PATCH", "entries", {"id": f"eq.{entry_id}"}, {"title": title, "content": content})
        return Entry.from_row(self._one(rows, f"Entry {entry_id}"))

    def delete_entry(self, entry_id: str) -> None:
        self.require_user()
        self._request("DELETE", "/rest/v1/entries", params={"id": f"eq.{entry_id}"})

    def count_entries_since(self, moment: datetime) -> int:
        user = self.require_user()
        response = self._request(
            "HEAD", "/rest/v1/entries",
            params={"select": "*", "user_id": f"eq.{user.id}", "created_at": f"gte.{moment.isoformat()}"},
            headers={"Prefer": "count=exact"},
        )
        content_range = response.headers.get("content-range", "*/0")
        total = content_range.rsplit("/", 1)[-1]
        return int(total) if total.isdigit() else 0

    # ─────────────────────────────────────────────────────────────────────────
    # Profiles
    # ─────────────────────────────────────────────────────────────────────────

    def get_profile(self) -> Profile:
        user = self.require_user()
        row = self._one(self._select("profiles", {"user_id": f"eq.{user.id}"}), "Profile")
        return Profile.from_row({"email": user.email, **row})

    def update_profile(self, **fields) -> Profile:
        user = self.require_user()
        body = {name: value.to_dict() for name, value in fields.items()}
        row = self._one(self._write("PATCH", "profiles", {"user_id": f"eq.{user.id}"}, body), "Profile")
        return Profile.from_row({"email": user.email, **row})

    def list_profiles(self) -> list[Profile]:
        self.require_user()
        rows = self._select("profiles", {"order": "created_at.desc"})
        return [Profile.from_row(row) for row in rows]

    # ─────────────────────────────────────────────────────────────────────────
    # Gamification
    # ─────────────────────────────────────────────────────────────────────────

    def get_streaks(self) -> UserStreaks:
        user = self.require_user()
        rows = self._select("user_streaks", {"user_id": f"eq.{user.id}"})
        return UserStreaks.from_row(rows[0]) if rows else UserStreaks(user_id=user.id)

    def list_badges(self) -> list[Badge]:
        return [Badge.from_row(row) for row in self._select("badges", {"order": "requirement_value.asc"})]

    def list_user_badges(self) -> list[UserBadge]:
        user = self.require_user()
        response = self._request("GET", "/rest/v1/user_badges", params={
            "select": "*,badges(*)",
            "user_id": f"eq.{user.id}",
            "order": "earned_at.desc",
        })
        return [UserBadge.from_row(row) for row in response.json()]

    # ─────────────────────────────────────────────────────────────────────────
    # Feature flags
    # ─────────────────────────────────────────────────────────────────────────

    def list_feature_flags(self) -> list[FeatureFlag]:
        return [FeatureFlag.from_row(row) for row in self._select("feature_flags", {"order": "key.asc"})]

    def set_feature_flag(self, key: str, enabled: bool) -> FeatureFlag:
        self.require_user()
        rows = self._write("PATCH", "feature_flags", {"key": f"eq.{key}"}, {"enabled": enabled})
        return FeatureFlag.from_row(self._one(rows, f"Feature flag {key!r}"))
