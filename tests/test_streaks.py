from datetime import date, datetime, timedelta, timezone

import pytest
from clearcache.backend.models import Badge, UserBadge, UserStreaks
from clearcache.streaks import (compute_streaks, motivation, newly_earned,
                                period_starts, progress_rows, qualifies,
                                recent_badges)

TODAY = date(2025, 3, 5)


def days_back(*offsets: int) -> list[date]:
    return [TODAY - timedelta(days=n) for n in offsets]


def test_no_entries():
    streaks = compute_streaks("u", [], TODAY)
    assert (streaks.current_streak, streaks.longest_streak, streaks.total_entries) == (0, 0, 0)
    assert streaks.last_entry_date is None


def test_current_streak_ending_today():
    streaks = compute_streaks("u", days_back(0, 1, 2), TODAY)
    assert streaks.current_streak == 3
    assert streaks.longest_streak == 3


def test_streak_survives_until_tomorrow():
    assert compute_streaks("u", days_back(1, 2), TODAY).current_streak == 2


def test_streak_breaks_after_a_missed_day():
    streaks = compute_streaks("u", days_back(2, 3, 4, 5), TODAY)
    assert streaks.current_streak == 0
    assert streaks.longest_streak == 4


def test_longest_is_kept_across_gaps():
    streaks = compute_streaks("u", days_back(0, 1, 5, 6, 7, 8, 9), TODAY)
    assert streaks.current_streak == 2
    assert streaks.longest_streak == 5


def test_several_entries_on_one_day_count_once_for_streaks():
    streaks = compute_streaks("u", days_back(0, 0, 0, 1), TODAY, total_entries=4)
    assert streaks.current_streak == 2
    assert streaks.total_entries == 4


BADGES = [
    Badge("first", "First Entry", "", "*", "entries", 1),
    Badge("week", "Week Warrior", "", "W", "streak", 7),
]


def test_streak_badges_use_the_best_streak():
    broken = UserStreaks("u", current_streak=0, longest_streak=7, total_entries=7)
    assert qualifies(BADGES[1], broken)


def test_newly_earned_skips_owned_badges():
    streaks = UserStreaks("u", current_streak=7, longest_streak=7, total_entries=7)
    assert [b.id for b in newly_earned(BADGES, streaks, [])] == ["first", "week"]
    assert [b.id for b in newly_earned(BADGES, streaks, ["first"])] == ["week"]


def test_recent_badges_window():
    now = datetime(2025, 3, 5, 12, 0, 10, tzinfo=timezone.utc)
    fresh = UserBadge("1", "u", "first", now - timedelta(seconds=5))
    stale = UserBadge("2", "u", "week", now - timedelta(seconds=30))
    assert recent_badges([fresh, stale], now) == [fresh]


@pytest.mark.parametrize("current, text", [
    (0, "Start your streak today!"),
    (3, "Keep it up! 4 days to Week Warrior"),
    (10, "Amazing! 20 days to Dedication"),
    (45, "Incredible dedication!"),
])
def test_motivation(current, text):
    assert motivation(current) == text


def test_period_starts_on_a_wednesday():
    week, month = period_starts(datetime(2025, 3, 5, 15, 30))
    assert week == datetime(2025, 3, 2)
    assert month == datetime(2025, 3, 1)


def test_period_starts_on_a_sunday():
    week, _ = period_starts(datetime(2025, 3, 9, 0, 5))
    assert week == datetime(2025, 3, 9)


def test_period_starts_do_not_shift_the_input():
    now = datetime(2025, 4, 1, 9, 0)
    _, month = period_starts(now)
    assert now == datetime(2025, 4, 1, 9, 0)
    assert month == datetime(2025, 4, 1)


def test_progress_rows():
    rows = progress_rows(UserStreaks("u", current_streak=3, longest_streak=10), 14, 15)
    current, weekly, monthly, record = rows
    assert current.maximum == 10
    assert current.percentage == pytest.approx(30.0)
    assert weekly.percentage == 100.0
    assert monthly.percentage == pytest.approx(50.0)
    assert record.is_record and record.percentage == 100.0
