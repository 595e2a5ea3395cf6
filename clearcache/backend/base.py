"""
The journal backend interface.

Content renderers talk only to this interface; the desktop itself never does.
Every method may block and must be called from a worker thread.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from clearcache.backend.models import (Badge, Entry, FeatureFlag, Profile,
                                       User, UserBadge, UserStreaks)


class BackendError(Exception):
    """A backend call failed."""


class AuthError(BackendError):
    """No signed-in user, or the credentials were rejected."""


class NotFoundError(BackendError):
    """The requested row does not exist or is not visible to the user."""


class Backend(ABC):

    # ─────────────────────────────────────────────────────────────────────────
    # Auth
    # ─────────────────────────────────────────────────────────────────────────

    @property
    @abstractmethod
    def current_user(self) -> User | None: ...

    def require_user(self) -> User:
        user = self.current_user
        if user is None:
            raise AuthError("Not signed in.")
        return user

    @abstractmethod
    def request_login(self, email: str) -> None:
        """Sends a one-time code / magic link to the address."""

    @abstractmethod
    def verify_login(self, email: str, code: str) -> User: ...

    @abstractmethod
    def sign_out(self) -> None: ...

    # ─────────────────────────────────────────────────────────────────────────
    # Entries
    # ─────────────────────────────────────────────────────────────────────────

    @abstractmethod
    def list_entries(self, newest_first: bool = True) -> list[Entry]: ...

    @abstractmethod
    def get_entry(self, entry_id: str) -> Entry: ...

    @abstractmethod
    def create_entry(self, title: str, content: str) -> Entry: ...

    @abstractmethod
    def update_entry(self, entry_id: str, title: str, content: str) -> Entry: ...

    @abstractmethod
    def delete_entry(self, entry_id: str) -> None: ...

    @abstractmethod
    def count_entries_since(self, moment: datetime) -> int: ...

    # ─────────────────────────────────────────────────────────────────────────
    # Profiles
    # ─────────────────────────────────────────────────────────────────────────

    @abstractmethod
    def get_profile(self) -> Profile: ...

    @abstractmethod
    def update_profile(self, **fields) -> Profile:
        """Accepts background_preference, scanline_preferences, sound_preferences."""

    @abstractmethod
    def list_profiles(self) -> list[Profile]:
        """Every profile; admins only."""

    # ─────────────────────────────────────────────────────────────────────────
    # Gamification
    # ─────────────────────────────────────────────────────────────────────────

    @abstractmethod
    def get_streaks(self) -> UserStreaks: ...

    @abstractmethod
    def list_badges(self) -> list[Badge]: ...

    @abstractmethod
    def list_user_badges(self) -> list[UserBadge]: ...

    # ─────────────────────────────────────────────────────────────────────────
    # Feature flags
    # ─────────────────────────────────────────────────────────────────────────

    @abstractmethod
    def list_feature_flags(self) -> list[FeatureFlag]: ...

    @abstractmethod
    def set_feature_flag(self, key: str, enabled: bool) -> FeatureFlag: ...

    def close(self) -> None:
        """Releases network resources, if any."""
