from __future__ import annotations

from datetime import datetime, timezone

import clearcache.display.glyphs as glyphs
from clearcache.backend.base import BackendError
from clearcache.backend.models import Badge, UserBadge, UserStreaks
from clearcache.display.window import ContentRenderer
from clearcache.model.windows import ContentKind
from clearcache.streaks import (ProgressRow, motivation, period_starts,
                                progress_rows, recent_badges)
from rich.markup import escape
from textual import work
from textual.app import ComposeResult
from textual.containers import Grid, Horizontal, Vertical, VerticalScroll
from textual.widgets import Label, ProgressBar, Static


class ProgressLine(Horizontal):
    DEFAULT_CSS = """
    ProgressLine {
        height: 2;
    }
    ProgressLine Label {
        width: 22;
    }
    ProgressLine ProgressBar {
        width: 1fr;
    }
    """

    def __init__(self, row: ProgressRow):
        super().__init__()
        self.row = row

    def compose(self) -> ComposeResult:
        icon = glyphs.badges["record"] if self.row.is_record else glyphs.badges["streak"]
        yield Label(f"{icon} {self.row.title}\n[dim]{self.row.description}[/dim]")
        bar = ProgressBar(total=100, show_eta=False, show_percentage=False)
        bar.progress = self.row.percentage
        yield bar
        yield Label(f" {self.row.value}/{self.row.maximum} {self.row.unit}")


class BadgeCard(Vertical):
    DEFAULT_CSS = """
    BadgeCard {
        height: 5;
        border: round $panel-lighten-2;
        padding: 0 1;
    }
    BadgeCard.earned {
        border: round $success;
    }
    BadgeCard.locked {
        opacity: 0.6;
    }
    """

    def __init__(self, badge: Badge, earned: UserBadge | None):
        super().__init__(classes="earned" if earned else "locked")
        self.badge = badge
        self.earned = earned

    def compose(self) -> ComposeResult:
        mark = glyphs.badges["earned"] if self.earned else glyphs.badges["locked"]
        yield Label(f"{mark} [b]{escape(self.badge.name)}[/b]")
        yield Label(f"[dim]{escape(self.badge.description)}[/dim]")
        if self.earned:
            yield Label(f"Earned {self.earned.earned_at.astimezone():%b %d, %Y}")
        else:
            yield Label(f"Requires {self.badge.requirement_text}")


class StreakBoard(ContentRenderer):
    """Streak counters, period goals and badges."""
    KIND = ContentKind.STREAKS

    DEFAULT_CSS = """
    StreakBoard #streak-summary {
        height: 3;
        text-style: bold;
    }
    StreakBoard #streak-motivation {
        color: $warning;
        margin: 0 0 1 0;
    }
    StreakBoard #badge-grid {
        grid-size: 2;
        grid-gutter: 0 1;
        height: auto;
    }
    """

    def __init__(self, record, **kwargs):
        super().__init__(record, **kwargs)
        self._announced: set[str] = set()

    def compose(self) -> ComposeResult:
        with VerticalScroll():
            yield Static("Loading streaks...", id="streak-summary")
            yield Label("", id="streak-motivation")
            yield Vertical(id="streak-progress")
            yield Label("[b]Badges[/b]")
            yield Grid(id="badge-grid")

    def on_mount(self) -> None:
        self.reload()

    def reload(self) -> None:
        self._fetch()

    @work(thread=True, exclusive=True)
    def _fetch(self) -> None:
        backend = self.backend
        week_start, month_start = period_starts(datetime.now().astimezone())
        try:
            streaks = backend.get_streaks()
            weekly = backend.count_entries_since(week_start.astimezone(timezone.utc))
            monthly = backend.count_entries_since(month_start.astimezone(timezone.utc))
            badges = backend.list_badges()
            owned = backend.list_user_badges()
        except BackendError as e:
            self.app.call_from_thread(self.report_error, e, "Could not load streaks")
            return
        self.app.call_from_thread(self._show, streaks, weekly, monthly, badges, owned)

    async def _show(self, streaks: UserStreaks, weekly: int, monthly: int, badges: list[Badge], owned: list[UserBadge]) -> None:
        self.query_one("#streak-summary", Static).update(
            f"{glyphs.badges['streak']} {streaks.current_streak} day streak    "
            f"{glyphs.badges['record']} best {streaks.longest_streak}    "
            f"{streaks.total_entries} entries"
        )
        self.query_one("#streak-motivation", Label).update(motivation(streaks.current_streak))

        progress = self.query_one("#streak-progress", Vertical)
        await progress.remove_children()
        await progress.mount_all(ProgressLine(row) for row in progress_rows(streaks, weekly, monthly))

        earned = {ub.badge_id: ub for ub in owned}
        grid = self.query_one("#badge-grid", Grid)
        await grid.remove_children()
        await grid.mount_all(BadgeCard(badge, earned.get(badge.id)) for badge in badges)

        names = {badge.id: badge.name for badge in badges}
        for ub in recent_badges(owned, datetime.now(timezone.utc)):
            if ub.badge_id in self._announced:
                continue
            self._announced.add(ub.badge_id)
            self.app.notify(f"New badge earned: {names.get(ub.badge_id, ub.badge_id)}", title="Badges")
