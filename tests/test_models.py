from datetime import date, datetime, timezone

from clearcache.backend.models import (BackgroundPreference, Badge, Entry,
                                       Profile, ScanlinePreferences,
                                       SoundPreferences, UserBadge,
                                       UserStreaks, parse_timestamp)


def test_parse_timestamp_handles_zulu_and_naive():
    assert parse_timestamp("2025-03-05T12:00:00Z") == datetime(2025, 3, 5, 12, tzinfo=timezone.utc)
    assert parse_timestamp("2025-03-05T12:00:00").tzinfo is timezone.utc
    assert parse_timestamp(None) is None


def test_entry_row():
    entry = Entry.from_row({
        "id": 7, "user_id": "u", "title": "T", "content": "# T",
        "created_at": "2025-03-05T12:00:00+00:00",
    })
    assert entry.id == "7"
    assert entry.updated_at == entry.created_at
    assert entry.to_row()["created_at"] == "2025-03-05T12:00:00+00:00"


def test_profile_row_with_preferences():
    profile = Profile.from_row({
        "user_id": "u",
        "created_at": "2025-01-01T00:00:00Z",
        "role": "admin",
        "background_preference": {"type": "color", "value": "#000000"},
        "scanline_preferences": {"enabled": False, "intensity": "heavy", "density": 3, "customIntensity": 0.1},
        "sound_preferences": {"masterVolume": 0.2, "sounds": {"keyboard": {"enabled": False}, "login": False}},
    })
    assert profile.is_admin
    assert profile.background_preference == BackgroundPreference("color", "#000000")
    assert profile.scanline_preferences.intensity == "heavy"
    assert profile.scanline_preferences.density == 3.0
    assert profile.sound_preferences.master_volume == 0.2
    assert not profile.sound_preferences.enabled("keyboard")
    assert not profile.sound_preferences.enabled("login")
    assert profile.sound_preferences.enabled("newEntry")


def test_profile_defaults_when_columns_are_missing():
    profile = Profile.from_row({"user_id": "u", "created_at": "2025-01-01T00:00:00Z", "role": None})
    assert profile.role == "user"
    assert profile.background_preference == BackgroundPreference()
    assert profile.scanline_preferences == ScanlinePreferences()


def test_scanline_intensity():
    assert ScanlinePreferences(intensity="light").effective_intensity == 0.03
    assert ScanlinePreferences(intensity="custom", custom_intensity=0.17).effective_intensity == 0.17
    assert ScanlinePreferences(enabled=False).effective_intensity == 0.0


def test_scanline_values_are_bounded():
    prefs = ScanlinePreferences.from_dict({"intensity": "blinding", "density": 9, "customIntensity": 0.9})
    assert prefs.intensity == "medium"
    assert prefs.density == 4.0
    assert prefs.custom_intensity == 0.20


def test_preferences_serialise_in_camel_case():
    assert ScanlinePreferences().to_dict() == {
        "enabled": True, "intensity": "medium", "density": 2.0, "customIntensity": 0.08,
    }
    sounds = SoundPreferences().to_dict()
    assert sounds["masterVolume"] == 0.5
    assert sounds["sounds"]["windowClose"] == {"enabled": True}


def test_muted_master_volume_silences_everything():
    assert not SoundPreferences(master_volume=0.0).enabled("login")


def test_streak_row():
    streaks = UserStreaks.from_row({"user_id": "u", "current_streak": 2, "last_entry_date": "2025-03-05"})
    assert streaks.current_streak == 2
    assert streaks.longest_streak == 0
    assert streaks.last_entry_date == date(2025, 3, 5)


def test_badge_requirement_text():
    assert Badge("a", "A", "", "*", "streak", 7).requirement_text == "7 day streak"
    assert Badge("b", "B", "", "*", "entries", 50).requirement_text == "50 entries"


def test_user_badge_with_embedded_badge():
    owned = UserBadge.from_row({
        "id": "1", "user_id": "u", "badge_id": "b", "earned_at": "2025-03-05T12:00:00Z",
        "badges": {"id": "b", "name": "First Entry", "requirement_type": "entries", "requirement_value": 1},
    })
    assert owned.badge.name == "First Entry"
    assert owned.badge.requirement_value == 1
