"""Rows exchanged with the journal backend and the preference blobs stored on profiles."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    text = value.replace("Z", "+00:00")
    moment = datetime.fromisoformat(text)
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


def parse_date(value: str | date | None) -> date | None:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def _iso(value: datetime | date | None) -> str | None:
    return value.isoformat() if value is not None else None


# ─────────────────────────────────────────────────────────────────────────────
#  Preferences
# ─────────────────────────────────────────────────────────────────────────────

PATTERNS: dict[str, str] = {
    "swatch": "Swatch",
    "dots": "Dots",
    "lines": "Lines",
    "grid": "Grid",
    "gray-grid": "Gray Grid",
    "bubbles": "Bubbles",
    "stars": "Stars",
    "cats": "Cats",
    "bear": "Bear",
}
SOLID_COLORS: dict[str, str] = {
    "#E8E8E8": "Light Gray",
    "#FFFFFF": "White",
    "#000000": "Black",
}


@dataclass(frozen=True)
class BackgroundPreference:
    type: str = "pattern"  # 'pattern' | 'color'
    value: str = "swatch"

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> BackgroundPreference:
        if not data:
            return cls()
        return cls(type=str(data.get("type", "pattern")), value=str(data.get("value", "swatch")))

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "value": self.value}


INTENSITY_MAP: dict[str, float] = {
    "light": 0.03,
    "medium": 0.05,
    "heavy": 0.08,
    "extra-heavy": 0.12,
    "maximum": 0.15,
    "custom": 0.08,
}
INTENSITY_LABELS: dict[str, str] = {
    "light": "Light",
    "medium": "Medium",
    "heavy": "Heavy",
    "extra-heavy": "Extra Heavy",
    "maximum": "Maximum",
    "custom": "Custom",
}
MAX_CUSTOM_INTENSITY = 0.20
MIN_DENSITY, MAX_DENSITY, DENSITY_STEP = 1.0, 4.0, 0.5


@dataclass(frozen=True)
class ScanlinePreferences:
    enabled: bool = True
    intensity: str = "medium"
    density: float = 2.0
    custom_intensity: float = 0.08

    @property
    def effective_intensity(self) -> float:
        if not self.enabled:
            return 0.0
        if self.intensity == "custom":
            return self.custom_intensity
        return INTENSITY_MAP.get(self.intensity, INTENSITY_MAP["medium"])

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ScanlinePreferences:
        if not data:
            return cls()
        intensity = data.get("intensity", "medium")
        return cls(
            enabled=bool(data.get("enabled", True)),
            intensity=intensity if intensity in INTENSITY_MAP else "medium",
            density=min(MAX_DENSITY, max(MIN_DENSITY, float(data.get("density", 2.0)))),
            custom_intensity=min(MAX_CUSTOM_INTENSITY, max(0.0, float(data.get("customIntensity", 0.08)))),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "intensity": self.intensity,
            "density": self.density,
            "customIntensity": self.custom_intensity,
        }


SOUND_LABELS: dict[str, str] = {
    "windowClose": "Window Close",
    "keyboard": "Keyboard Sounds",
    "login": "Login Sound",
    "notification": "Notifications",
    "newEntry": "New Entry",
}


@dataclass(frozen=True)
class SoundPreferences:
    master_volume: float = 0.5
    sounds: dict[str, bool] = field(default_factory=lambda: {key: True for key in SOUND_LABELS})

    def enabled(self, sound: str) -> bool:
        return self.master_volume > 0 and self.sounds.get(sound, False)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SoundPreferences:
        if not data:
            return cls()
        stored = data.get("sounds") or {}
        sounds = {}
        for key in SOUND_LABELS:
            value = stored.get(key, True)
            sounds[key] = bool(value.get("enabled", True)) if isinstance(value, dict) else bool(value)
        volume = min(1.0, max(0.0, float(data.get("masterVolume", 0.5))))
        return cls(master_volume=volume, sounds=sounds)

    def to_dict(self) -> dict[str, Any]:
        return {
            "masterVolume": self.master_volume,
            "sounds": {key: {"enabled": value} for key, value in self.sounds.items()},
        }


# ─────────────────────────────────────────────────────────────────────────────
#  Rows
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class User:
    id: str
    email: str | None = None


@dataclass
class Entry:
    id: str
    user_id: str
    title: str | None
    content: str | None
    created_at: datetime
    updated_at: datetime
    transcript: str | None = None
    audio_path: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Entry:
        return cls(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            title=row.get("title"),
            content=row.get("content"),
            created_at=parse_timestamp(row["created_at"]),
            updated_at=parse_timestamp(row.get("updated_at") or row["created_at"]),
            transcript=row.get("transcript"),
            audio_path=row.get("audio_path"),
        )

    def to_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "content": self.content,
            "transcript": self.transcript,
            "audio_path": self.audio_path,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


@dataclass
class Profile:
    user_id: str
    created_at: datetime
    role: str = "user"
    email: str | None = None
    background_preference: BackgroundPreference = field(default_factory=BackgroundPreference)
    scanline_preferences: ScanlinePreferences = field(default_factory=ScanlinePreferences)
    sound_preferences: SoundPreferences = field(default_factory=SoundPreferences)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Profile:
        return cls(
            user_id=str(row["user_id"]),
            created_at=parse_timestamp(row["created_at"]),
            role=row.get("role") or "user",
            email=row.get("email"),
            background_preference=BackgroundPreference.from_dict(row.get("background_preference")),
            scanline_preferences=ScanlinePreferences.from_dict(row.get("scanline_preferences")),
            sound_preferences=SoundPreferences.from_dict(row.get("sound_preferences")),
        )


@dataclass
class UserStreaks:
    user_id: str
    current_streak: int = 0
    longest_streak: int = 0
    total_entries: int = 0
    last_entry_date: date | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> UserStreaks:
        return cls(
            user_id=str(row["user_id"]),
            current_streak=int(row.get("current_streak") or 0),
            longest_streak=int(row.get("longest_streak") or 0),
            total_entries=int(row.get("total_entries") or 0),
            last_entry_date=parse_date(row.get("last_entry_date")),
        )


@dataclass(frozen=True)
class Badge:
    id: str
    name: str
    description: str
    icon: str
    requirement_type: str  # 'streak' | 'entries'
    requirement_value: int

    @property
    def requirement_text(self) -> str:
        if self.requirement_type == "streak":
            return f"{self.requirement_value} day streak"
        return f"{self.requirement_value} entries"

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Badge:
        return cls(
            id=str(row["id"]),
            name=row["name"],
            description=row.get("description") or "",
            icon=row.get("icon") or "*",
            requirement_type=row.get("requirement_type") or "entries",
            requirement_value=int(row.get("requirement_value") or 0),
        )


@dataclass
class UserBadge:
    id: str
    user_id: str
    badge_id: str
    earned_at: datetime
    badge: Badge | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> UserBadge:
        nested = row.get("badges") or row.get("badge")
        return cls(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            badge_id=str(row["badge_id"]),
            earned_at=parse_timestamp(row["earned_at"]),
            badge=Badge.from_row(nested) if isinstance(nested, dict) else None,
        )


@dataclass
class FeatureFlag:
    key: str
    enabled: bool
    notes: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> FeatureFlag:
        return cls(key=row["key"], enabled=bool(row.get("enabled")), notes=row.get("notes"))
