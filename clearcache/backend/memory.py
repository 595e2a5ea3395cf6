"""
In-process backend used offline and by the tests.

Rows live in dicts guarded by one lock, since renderer workers call in from
threads. Streaks and badge awards are recomputed on every entry write the way
the hosted database triggers do.
"""
from __future__ import annotations

import secrets
import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable
from uuid import uuid4

from clearcache.backend.base import (AuthError, Backend, BackendError,
                                     NotFoundError)
from clearcache.backend.models import (Badge, BackgroundPreference, Entry,
                                       FeatureFlag, Profile,
                                       ScanlinePreferences, SoundPreferences,
                                       User, UserBadge, UserStreaks)
from clearcache.journal import local_day
from clearcache.streaks import compute_streaks, newly_earned
from textual import log

MOCK_USER = User(id="12345678-1234-1234-1234-123456789012", email="test@example.com")

DEFAULT_BADGES: tuple[Badge, ...] = (
    Badge("first-entry", "First Entry", "Wrote your first journal entry", "*", "entries", 1),
    Badge("week-warrior", "Week Warrior", "Journaled 7 days in a row", "W", "streak", 7),
    Badge("dedication", "Dedication", "Journaled 30 days in a row", "D", "streak", 30),
    Badge("prolific", "Prolific", "Wrote 50 journal entries", "P", "entries", 50),
)

DEFAULT_FLAGS: tuple[FeatureFlag, ...] = (
    FeatureFlag("voice_journaling", False, "Record entries with speech-to-text"),
    FeatureFlag("badges", True, "Award streak and entry badges"),
)

_PROFILE_FIELDS = {
    "background_preference": BackgroundPreference,
    "scanline_preferences": ScanlinePreferences,
    "sound_preferences": SoundPreferences,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemoryBackend(Backend):

    def __init__(
        self,
        user: User | None = MOCK_USER,
        role: str = "user",
        badges: tuple[Badge, ...] = DEFAULT_BADGES,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._lock = threading.RLock()
        self._clock = clock
        self._user = user
        self._entries: dict[str, Entry] = {}
        self._profiles: dict[str, Profile] = {}
        self._badges = {b.id: b for b in badges}
        self._user_badges: dict[str, list[UserBadge]] = {}
        self._flags = {f.key: replace(f) for f in DEFAULT_FLAGS}
        self.pending_codes: dict[str, str] = {}
        if user is not None:
            self._ensure_profile(user, role)

    def _ensure_profile(self, user: User, role: str = "user") -> Profile:
        profile = self._profiles.get(user.id)
        if profile is None:
            profile = Profile(user_id=user.id, created_at=self._clock(), role=role, email=user.email)
            self._profiles[user.id] = profile
        return profile

    # ─────────────────────────────────────────────────────────────────────────
    # Auth
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def current_user(self) -> User | None:
        return self._user

    def request_login(self, email: str) -> None:
        email = email.strip().lower()
        if "@" not in email:
            raise AuthError(f"{email!r} is not an email address.")
        code = f"{secrets.randbelow(1_000_000):06d}"
        with self._lock:
            self.pending_codes[email] = code
        log(f"Login code for {email}: {code}")

    def verify_login(self, email: str, code: str) -> User:
        email = email.strip().lower()
        with self._lock:
            if self.pending_codes.get(email) != code.strip():
                raise AuthError("Invalid or expired code.")
            del self.pending_codes[email]
            known = next((p for p in self._profiles.values() if p.email == email), None)
            user = User(id=known.user_id if known else str(uuid4()), email=email)
            self._ensure_profile(user)
            self._user = user
        return user

    def sign_out(self) -> None:
        self._user = None

    # ─────────────────────────────────────────────────────────────────────────
    # Entries
    # ─────────────────────────────────────────────────────────────────────────

    def _own_entries(self, user_id: str) -> list[Entry]:
        return [e for e in self._entries.values() if e.user_id == user_id]

    def list_entries(self, newest_first: bool = True) -> list[Entry]:
        user = self.require_user()
        with self._lock:
            entries = self._own_entries(user.id)
        return sorted(entries, key=lambda e: e.created_at, reverse=newest_first)

    def get_entry(self, entry_id: str) -> Entry:
        user = self.require_user()
        with self._lock:
            entry = self._entries.get(entry_id)
            if entry is None or entry.user_id != user.id:
                raise NotFoundError(f"Entry {entry_id} not found.")
            return replace(entry)

    def create_entry(self, title: str, content: str) -> Entry:
        user = self.require_user()
        now = self._clock()
        entry = Entry(id=str(uuid4()), user_id=user.id, title=title, content=content, created_at=now, updated_at=now)
        with self._lock:
            self._entries[entry.id] = entry
            self._award_badges(user.id)
        return replace(entry)

    def update_entry(self, entry_id: str, title: str, content: str) -> Entry:
        self.get_entry(entry_id)
        with self._lock:
            entry = self._entries[entry_id]
            entry.title, entry.content, entry.updated_at = title, content, self._clock()
            return replace(entry)

    def delete_entry(self, entry_id: str) -> None:
        self.get_entry(entry_id)
        with self._lock:
            del self._entries[entry_id]

    def count_entries_since(self, moment: datetime) -> int:
        user = self.require_user()
        with self._lock:
            return sum(1 for e in self._own_entries(user.id) if e.created_at >= moment)

    # ─────────────────────────────────────────────────────────────────────────
    # Profiles
    # ─────────────────────────────────────────────────────────────────────────

    def get_profile(self) -> Profile:
        user = self.require_user()
        with self._lock:
            return replace(self._ensure_profile(user))

    def update_profile(self, **fields) -> Profile:
        user = self.require_user()
        for name, value in fields.items():
            expected = _PROFILE_FIELDS.get(name)
            if expected is None or not isinstance(value, expected):
                raise BackendError(f"Cannot update profile field {name!r} with {value!r}.")
        with self._lock:
            profile = replace(self._ensure_profile(user), **fields)
            self._profiles[user.id] = profile
            return replace(profile)

    def list_profiles(self) -> list[Profile]:
        self._require_admin()
        with self._lock:
            return sorted(self._profiles.values(), key=lambda p: p.created_at, reverse=True)

    def _require_admin(self) -> None:
        if not self.get_profile().is_admin:
            raise AuthError("Admin access required.")

    # ─────────────────────────────────────────────────────────────────────────
    # Gamification
    # ─────────────────────────────────────────────────────────────────────────

    def _streaks(self, user_id: str) -> UserStreaks:
        entries = self._own_entries(user_id)
        return compute_streaks(
            user_id,
            (local_day(e.created_at) for e in entries),
            today=local_day(self._clock()),
            total_entries=len(entries),
        )

    def _award_badges(self, user_id: str) -> None:
        owned = self._user_badges.setdefault(user_id, [])
        for badge in newly_earned(self._badges.values(), self._streaks(user_id), (ub.badge_id for ub in owned)):
            owned.append(UserBadge(str(uuid4()), user_id, badge.id, self._clock(), badge))
            log(f"Awarded badge {badge.name!r} to {user_id}.")

    def get_streaks(self) -> UserStreaks:
        user = self.require_user()
        with self._lock:
            return self._streaks(user.id)

    def list_badges(self) -> list[Badge]:
        return sorted(self._badges.values(), key=lambda b: b.requirement_value)

    def list_user_badges(self) -> list[UserBadge]:
        user = self.require_user()
        with self._lock:
            owned = list(self._user_badges.get(user.id, []))
        return sorted(owned, key=lambda ub: ub.earned_at, reverse=True)

    # ─────────────────────────────────────────────────────────────────────────
    # Feature flags
    # ─────────────────────────────────────────────────────────────────────────

    def list_feature_flags(self) -> list[FeatureFlag]:
        with self._lock:
            return [replace(f) for f in sorted(self._flags.values(), key=lambda f: f.key)]

    def set_feature_flag(self, key: str, enabled: bool) -> FeatureFlag:
        self._require_admin()
        with self._lock:
            flag = self._flags.get(key)
            if flag is None:
                raise NotFoundError(f"Feature flag {key!r} not found.")
            flag.enabled = enabled
            return replace(flag)
