from datetime import timedelta

import pytest
from clearcache.backend.base import AuthError, BackendError, NotFoundError
from clearcache.backend.memory import MOCK_USER, MemoryBackend
from clearcache.backend.models import BackgroundPreference


def test_mock_user_is_signed_in(backend):
    assert backend.current_user == MOCK_USER
    assert backend.get_profile().email == "test@example.com"


def test_entry_crud(backend, clock):
    entry = backend.create_entry("First", "# First\nhello")
    clock.advance(minutes=5)
    updated = backend.update_entry(entry.id, "Renamed", "# Renamed\nhello")
    assert updated.title == "Renamed"
    assert updated.updated_at > updated.created_at
    assert backend.get_entry(entry.id).content == "# Renamed\nhello"
    backend.delete_entry(entry.id)
    with pytest.raises(NotFoundError):
        backend.get_entry(entry.id)


def test_list_entries_ordering(backend, clock):
    first = backend.create_entry("a", "a")
    clock.advance(hours=1)
    second = backend.create_entry("b", "b")
    assert [e.id for e in backend.list_entries()] == [second.id, first.id]
    assert [e.id for e in backend.list_entries(newest_first=False)] == [first.id, second.id]


def test_returned_entries_are_copies(backend):
    entry = backend.create_entry("a", "a")
    entry.title = "changed"
    assert backend.get_entry(entry.id).title == "a"


def test_count_entries_since(backend, clock):
    start = clock.now
    backend.create_entry("a", "a")
    clock.advance(days=2)
    backend.create_entry("b", "b")
    assert backend.count_entries_since(start + timedelta(days=1)) == 1
    assert backend.count_entries_since(start) == 2


def test_streaks_and_badges(backend, clock):
    for _ in range(7):
        backend.create_entry("day", "day")
        clock.advance(days=1)
    streaks = backend.get_streaks()
    assert streaks.total_entries == 7
    assert streaks.longest_streak == 7
    earned = {ub.badge_id for ub in backend.list_user_badges()}
    assert earned == {"first-entry", "week-warrior"}


def test_badge_is_awarded_once(backend):
    backend.create_entry("a", "a")
    backend.create_entry("b", "b")
    assert [ub.badge_id for ub in backend.list_user_badges()] == ["first-entry"]


def test_badges_sorted_by_requirement(backend):
    assert [b.requirement_value for b in backend.list_badges()] == [1, 7, 30, 50]


def test_update_profile(backend):
    pref = BackgroundPreference("color", "#FFFFFF")
    profile = backend.update_profile(background_preference=pref)
    assert profile.background_preference == pref
    assert backend.get_profile().background_preference == pref


def test_update_profile_rejects_unknown_fields(backend):
    with pytest.raises(BackendError):
        backend.update_profile(role="admin")


def test_signed_out_calls_fail(backend):
    backend.sign_out()
    assert backend.current_user is None
    with pytest.raises(AuthError):
        backend.list_entries()


def test_email_code_login(backend):
    backend.sign_out()
    backend.request_login("Someone@Example.com")
    code = backend.pending_codes["someone@example.com"]
    with pytest.raises(AuthError):
        backend.verify_login("someone@example.com", "wrong")
    user = backend.verify_login("someone@example.com", code)
    assert backend.current_user == user
    assert user.email == "someone@example.com"
    assert backend.get_profile().user_id == user.id


def test_login_rejects_non_emails(backend):
    with pytest.raises(AuthError):
        backend.request_login("nobody")


def test_users_only_see_their_own_entries(backend):
    entry = backend.create_entry("mine", "mine")
    backend.sign_out()
    backend.request_login("other@example.com")
    backend.verify_login("other@example.com", backend.pending_codes["other@example.com"])
    assert backend.list_entries() == []
    with pytest.raises(NotFoundError):
        backend.get_entry(entry.id)


def test_admin_only_operations(backend):
    with pytest.raises(AuthError):
        backend.list_profiles()
    with pytest.raises(AuthError):
        backend.set_feature_flag("badges", False)


def test_admin_can_manage_flags(clock):
    admin = MemoryBackend(role="admin", clock=clock)
    assert admin.set_feature_flag("badges", False).enabled is False
    assert {f.key: f.enabled for f in admin.list_feature_flags()}["badges"] is False
    assert len(admin.list_profiles()) == 1
    with pytest.raises(NotFoundError):
        admin.set_feature_flag("teleport", True)
