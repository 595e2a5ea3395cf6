"""Streak arithmetic, badge eligibility and the progress rows shown in the Streaks window."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable

from clearcache.backend.models import Badge, UserBadge, UserStreaks

WEEKLY_GOAL = 7
MONTHLY_GOAL = 30
RECENT_BADGE_SECONDS = 10


def compute_streaks(user_id: str, entry_days: Iterable[date], today: date, total_entries: int | None = None) -> UserStreaks:
    """
    Derives streak counters from the days on which entries were written.

    The current streak stays alive while the most recent entry is from today
    or yesterday.
    """
    days = sorted(set(entry_days))
    if not days:
        return UserStreaks(user_id=user_id, total_entries=total_entries or 0)

    longest = run = 1
    for previous, current in zip(days, days[1:]):
        run = run + 1 if current - previous == timedelta(days=1) else 1
        longest = max(longest, run)

    last = days[-1]
    current_streak = 0
    if today - last <= timedelta(days=1):
        current_streak = 1
        for previous, current in zip(reversed(days[:-1]), reversed(days)):
            if current - previous != timedelta(days=1):
                break
            current_streak += 1

    return UserStreaks(
        user_id=user_id,
        current_streak=current_streak,
        longest_streak=longest,
        total_entries=len(days) if total_entries is None else total_entries,
        last_entry_date=last,
    )


def qualifies(badge: Badge, streaks: UserStreaks) -> bool:
    if badge.requirement_type == "streak":
        return max(streaks.current_streak, streaks.longest_streak) >= badge.requirement_value
    return streaks.total_entries >= badge.requirement_value


def newly_earned(badges: Iterable[Badge], streaks: UserStreaks, owned: Iterable[str]) -> list[Badge]:
    """Badges the user qualifies for but has not been awarded yet."""
    owned = set(owned)
    return [b for b in badges if b.id not in owned and qualifies(b, streaks)]


def recent_badges(user_badges: Iterable[UserBadge], now: datetime, seconds: int = RECENT_BADGE_SECONDS) -> list[UserBadge]:
    cutoff = now - timedelta(seconds=seconds)
    return [ub for ub in user_badges if ub.earned_at >= cutoff]


def motivation(current_streak: int) -> str:
    if current_streak == 0:
        return "Start your streak today!"
    if current_streak < 7:
        return f"Keep it up! {7 - current_streak} days to Week Warrior"
    if current_streak < 30:
        return f"Amazing! {30 - current_streak} days to Dedication"
    return "Incredible dedication!"


def period_starts(now: datetime) -> tuple[datetime, datetime]:
    """Midnight of the most recent Sunday, and midnight of the first of the month."""
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    # weekday(): Monday is 0, so Sunday is 6
    week_start = midnight - timedelta(days=(midnight.weekday() + 1) % 7)
    month_start = midnight.replace(day=1)
    return week_start, month_start


@dataclass(frozen=True)
class ProgressRow:
    title: str
    value: int
    maximum: int
    unit: str
    description: str
    is_record: bool = False

    @property
    def percentage(self) -> float:
        if self.is_record:
            return 100.0
        if self.maximum <= 0:
            return 0.0
        return min(100.0, self.value / self.maximum * 100)


def progress_rows(streaks: UserStreaks, weekly_entries: int, monthly_entries: int) -> list[ProgressRow]:
    return [
        ProgressRow("Current Streak", streaks.current_streak, max(streaks.longest_streak, 7), "days", "Days in a row"),
        ProgressRow("Weekly Goal", weekly_entries, WEEKLY_GOAL, "entries", "This week"),
        ProgressRow("Monthly Challenge", monthly_entries, MONTHLY_GOAL, "entries", "This month"),
        ProgressRow("All Time Best", streaks.longest_streak, streaks.longest_streak or 1, "days", "Personal record", is_record=True),
    ]
