from __future__ import annotations

import calendar
from datetime import date

from clearcache.backend.base import BackendError
from clearcache.backend.models import Entry
from clearcache.core.events import OpenEntry
from clearcache.display.window import ContentRenderer, UIButton
from clearcache.journal import entries_by_day, entry_title, format_day
from clearcache.model.windows import ContentKind
from rich.markup import escape
from textual import on, work
from textual.app import ComposeResult
from textual.containers import Grid, Horizontal, Vertical
from textual.widgets import Button, Label, OptionList
from textual.widgets.option_list import Option

WEEKDAYS = ("Su", "Mo", "Tu", "We", "Th", "Fr", "Sa")


def month_weeks(year: int, month: int) -> list[list[int]]:
    """Weeks of the month starting on Sunday; 0 pads days outside the month."""
    return calendar.Calendar(firstweekday=6).monthdayscalendar(year, month)


def shift_month(year: int, month: int, step: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + step
    return index // 12, index % 12 + 1


class JournalCalendar(ContentRenderer):
    """Month view of when entries were written."""
    KIND = ContentKind.CALENDAR

    DEFAULT_CSS = """
    JournalCalendar #calendar-nav {
        height: 1;
    }
    JournalCalendar #calendar-month {
        width: 1fr;
        content-align: center middle;
        text-style: bold;
    }
    JournalCalendar #calendar-grid {
        grid-size: 7;
        grid-gutter: 0 1;
        height: auto;
        margin: 1 0;
    }
    JournalCalendar .weekday {
        width: 4;
        color: $text-muted;
        content-align: center middle;
    }
    JournalCalendar .day {
        width: 4;
        min-width: 4;
    }
    JournalCalendar .day.has-entries {
        text-style: bold underline;
        color: $accent;
    }
    JournalCalendar .day.selected {
        text-style: bold reverse;
    }
    JournalCalendar .day.today {
        border-left: outer $warning;
    }
    JournalCalendar #calendar-day {
        height: 1fr;
    }
    JournalCalendar #calendar-day OptionList {
        height: 1fr;
        border: none;
    }
    """

    def __init__(self, record, today: date | None = None, **kwargs):
        super().__init__(record, **kwargs)
        self.today = today or date.today()
        self.year, self.month = self.today.year, self.today.month
        self.selected: date | None = None
        self.entries: list[Entry] = []
        self.days: dict[date, list[Entry]] = {}

    def compose(self) -> ComposeResult:
        with Horizontal(id="calendar-nav"):
            yield UIButton("<", id="prev-month", compact=True)
            yield Label("", id="calendar-month")
            yield UIButton(">", id="next-month", compact=True)
        yield Grid(id="calendar-grid")
        with Vertical(id="calendar-day"):
            yield Label("Select a day to see its entries.", id="calendar-day-title")
            yield OptionList(id="calendar-entries")

    def on_mount(self) -> None:
        self.reload()

    def reload(self) -> None:
        self._fetch()

    @work(thread=True, exclusive=True)
    def _fetch(self) -> None:
        try:
            entries = self.backend.list_entries(newest_first=False)
        except BackendError as e:
            self.app.call_from_thread(self.report_error, e, "Could not load entries")
            return
        self.app.call_from_thread(self._show, entries)

    async def _show(self, entries: list[Entry]) -> None:
        self.entries = entries
        self.days = entries_by_day(entries)
        self.set_info(f"{len(entries)} entries on {len(self.days)} days")
        await self._render_month()
        self._render_day()

    async def _render_month(self) -> None:
        self.query_one("#calendar-month", Label).update(f"{calendar.month_name[self.month]} {self.year}")
        grid = self.query_one("#calendar-grid", Grid)
        await grid.remove_children()
        cells = [Label(name, classes="weekday") for name in WEEKDAYS]
        for week in month_weeks(self.year, self.month):
            for day in week:
                if day == 0:
                    cells.append(Label("", classes="weekday"))
                    continue
                current = date(self.year, self.month, day)
                button = UIButton(str(day), id=f"day-{current:%Y%m%d}", compact=True, classes="day")
                button.set_class(current in self.days, "has-entries")
                button.set_class(current == self.selected, "selected")
                button.set_class(current == self.today, "today")
                cells.append(button)
        await grid.mount_all(cells)

    def _render_day(self) -> None:
        title = self.query_one("#calendar-day-title", Label)
        option_list = self.query_one("#calendar-entries", OptionList)
        option_list.clear_options()
        if self.selected is None:
            title.update("Select a day to see its entries.")
            return
        entries = self.days.get(self.selected, [])
        title.update(f"{format_day(self.selected)}: {len(entries)} {'entry' if len(entries) == 1 else 'entries'}")
        for entry in entries:
            option_list.add_option(Option(f"{entry.created_at.astimezone():%I:%M %p}  {escape(entry_title(entry))}", id=entry.id))

    @on(Button.Pressed, "#prev-month, #next-month")
    async def on_change_month(self, event: Button.Pressed) -> None:
        event.stop()
        self.year, self.month = shift_month(self.year, self.month, -1 if event.button.id == "prev-month" else 1)
        await self._render_month()

    @on(Button.Pressed, ".day")
    async def on_select_day(self, event: Button.Pressed) -> None:
        event.stop()
        day = int(str(event.button.label))
        self.selected = date(self.year, self.month, day)
        await self._render_month()
        self._render_day()

    @on(OptionList.OptionSelected, "#calendar-entries")
    def on_open(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        entry = next((e for e in self.entries if e.id == event.option.id), None)
        if entry is not None:
            self.post_message(OpenEntry(entry.id, entry_title(entry)))
