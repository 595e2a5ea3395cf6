from __future__ import annotations

from clearcache.backend.base import BackendError
from clearcache.backend.models import Entry
from clearcache.core.events import Dispatch, OpenEntry
from clearcache.display.window import ContentRenderer, UIButton
from clearcache.journal import (entry_title, filter_entries, format_timestamp,
                                preview)
from clearcache.model.windows import ContentKind
from rich.markup import escape
from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import Button, Input, OptionList
from textual.widgets.option_list import Option


class JournalFolder(ContentRenderer):
    """Searchable list of the user's entries."""
    KIND = ContentKind.LISTING

    DEFAULT_CSS = """
    JournalFolder #folder-controls {
        height: 3;
    }
    JournalFolder #folder-search {
        width: 1fr;
    }
    JournalFolder #folder-controls UIButton {
        width: auto;
        margin: 1 0 0 1;
    }
    JournalFolder UIButton.selected {
        text-style: bold reverse;
    }
    JournalFolder OptionList {
        height: 1fr;
        border: none;
    }
    """

    def __init__(self, record, **kwargs):
        super().__init__(record, **kwargs)
        self.entries: list[Entry] = []
        self.newest_first = True

    def compose(self) -> ComposeResult:
        with Horizontal(id="folder-controls"):
            yield Input(placeholder="Search entries...", id="folder-search")
            yield UIButton("Newest", id="sort-newest", compact=True, classes="selected")
            yield UIButton("Oldest", id="sort-oldest", compact=True)
            yield UIButton("+ New", id="folder-new", compact=True)
        yield OptionList(id="folder-entries")

    def on_mount(self) -> None:
        self.reload()

    def reload(self) -> None:
        self.set_info("Loading entries...")
        self._fetch(self.newest_first)

    @work(thread=True, exclusive=True)
    def _fetch(self, newest_first: bool) -> None:
        try:
            entries = self.backend.list_entries(newest_first=newest_first)
        except BackendError as e:
            self.app.call_from_thread(self.report_error, e, "Could not load journal entries")
            self.app.call_from_thread(self.set_info, "Could not load entries")
            return
        self.app.call_from_thread(self._show, entries)

    def _show(self, entries: list[Entry]) -> None:
        self.entries = entries
        self._render_list()

    def _render_list(self) -> None:
        query = self.query_one("#folder-search", Input).value
        shown = filter_entries(self.entries, query, self.newest_first)
        option_list = self.query_one("#folder-entries", OptionList)
        option_list.clear_options()
        if not shown:
            message = "No entries match your search." if query else "No journal entries yet. Start writing!"
            option_list.add_option(Option(message, disabled=True))
        for entry in shown:
            label = (
                f"[b]{escape(entry_title(entry))}[/b]\n"
                f"[dim]{format_timestamp(entry.created_at)}[/dim]\n"
                f"{escape(preview(entry.content))}"
            )
            option_list.add_option(Option(label, id=entry.id))
            option_list.add_option(None)
        count = len(shown)
        self.set_info(f"{count} {'entry' if count == 1 else 'entries'}")

    @on(Input.Changed, "#folder-search")
    def on_search(self, event: Input.Changed) -> None:
        self._render_list()

    @on(Button.Pressed, "#sort-newest, #sort-oldest")
    def on_sort(self, event: Button.Pressed) -> None:
        event.stop()
        newest_first = event.button.id == "sort-newest"
        self.query_one("#sort-newest").set_class(newest_first, "selected")
        self.query_one("#sort-oldest").set_class(not newest_first, "selected")
        if newest_first != self.newest_first:
            self.newest_first = newest_first
            self.reload()

    @on(Button.Pressed, "#folder-new")
    def on_new(self, event: Button.Pressed) -> None:
        event.stop()
        self.post_message(Dispatch("new-entry"))

    @on(OptionList.OptionSelected, "#folder-entries")
    def on_open(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        entry = next((e for e in self.entries if e.id == event.option.id), None)
        if entry is not None:
            self.post_message(OpenEntry(entry.id, entry_title(entry)))
