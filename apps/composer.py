"""Journal editor: composes new entries and edits existing ones."""
from __future__ import annotations

from datetime import datetime

from clearcache.backend.base import BackendError
from clearcache.backend.models import Entry
from clearcache.core.events import EntryDeleted, EntrySaved
from clearcache.display.window import ContentRenderer, UIButton
from clearcache.journal import ensure_heading, extract_title
from clearcache.model.windows import ContentKind, WindowRecord
from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.timer import Timer
from textual.widgets import Button, Markdown, TextArea

AUTOSAVE_DELAY = 2.0


class JournalEditor(ContentRenderer):
    """
    Markdown editor bound to the shared editor window.

    The first line of the text is the entry title and is saved as an H1. With
    no entry id the editor is a composer: its first save creates the entry and
    the desktop promotes the window to a detail window in place.
    """
    KIND = ContentKind.COMPOSER

    DEFAULT_CSS = """
    JournalEditor #editor-toolbar {
        height: 1;
        background: $boost;
    }
    JournalEditor #editor-toolbar UIButton {
        width: auto;
        min-width: 6;
        margin: 0 1 0 0;
    }
    JournalEditor #editor-spacer {
        width: 1fr;
    }
    JournalEditor TextArea {
        height: 1fr;
        border: none;
    }
    JournalEditor Markdown {
        height: 1fr;
        display: none;
        overflow-y: auto;
    }
    JournalEditor.previewing TextArea {
        display: none;
    }
    JournalEditor.previewing Markdown {
        display: block;
    }
    """
    BINDINGS = [
        Binding("ctrl+s", "save", "Save", priority=True),
        Binding("ctrl+e", "toggle_preview", "Preview", priority=True),
    ]

    def __init__(self, record: WindowRecord, **kwargs):
        super().__init__(record, **kwargs)
        self._saved_text = ""
        self._text = ""
        self._saving = False
        self._save_again = False
        self._confirm_delete = False
        self._autosave: Timer | None = None
        self._loaded = self.entry_id is None

    def matches(self, record: WindowRecord) -> bool:
        return record.content_kind.is_editor and record.associated_entry_id == self.entry_id

    def focus_content(self) -> bool:
        self.query_one(TextArea).focus()
        return True

    def compose(self) -> ComposeResult:
        with Horizontal(id="editor-toolbar"):
            yield UIButton("Save", id="save", compact=True)
            yield UIButton("Preview", id="preview", compact=True)
            yield Horizontal(id="editor-spacer")
            yield UIButton("Delete", id="delete", compact=True, disabled=self.entry_id is None)
        yield TextArea(id="editor-text", soft_wrap=True, tab_behavior="indent")
        yield Markdown(id="editor-preview")

    def on_mount(self) -> None:
        if self.entry_id is not None:
            self.set_info("Loading...")
            self.query_one(TextArea).read_only = True
            self._load(self.entry_id)
        else:
            self.set_info("New entry: the first line becomes the title")

    def on_unmount(self) -> None:
        """Flushes unsaved text when the window closes or is retargeted."""
        if self._autosave is not None:
            self._autosave.stop()
        if self._saving and self.entry_id is None:
            return
        if self.dirty:
            self._flush(self.entry_id, *self._payload())

    # ─────────────────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def text(self) -> str:
        return self._text

    @property
    def dirty(self) -> bool:
        return self._loaded and self.text.strip() != "" and self.text != self._saved_text

    def _payload(self) -> tuple[str, str]:
        content = ensure_heading(self.text)
        return extract_title(content), content

    # ─────────────────────────────────────────────────────────────────────────
    # Load
    # ─────────────────────────────────────────────────────────────────────────

    @work(thread=True, exclusive=True, group="load")
    def _load(self, entry_id: str) -> None:
        try:
            entry = self.backend.get_entry(entry_id)
        except BackendError as e:
            self.app.call_from_thread(self.report_error, e, "Could not load entry")
            self.app.call_from_thread(self.set_info, "Could not load entry")
            return
        self.app.call_from_thread(self._show_entry, entry)

    def _show_entry(self, entry: Entry) -> None:
        text_area = self.query_one(TextArea)
        text = entry.content or ""
        self._saved_text = self._text = text
        text_area.load_text(text)
        text_area.read_only = False
        self._loaded = True
        self.set_info(f"Last saved {entry.updated_at.astimezone():%b %d, %I:%M %p}")

    # ─────────────────────────────────────────────────────────────────────────
    # Save
    # ─────────────────────────────────────────────────────────────────────────

    @on(TextArea.Changed)
    def on_text_changed(self, event: TextArea.Changed) -> None:
        self._text = event.text_area.text
        if not self.dirty:
            return
        self.set_info("Unsaved changes")
        if self._autosave is not None:
            self._autosave.stop()
        self._autosave = self.set_timer(AUTOSAVE_DELAY, self.action_save)
        self._confirm_delete = False

    def action_save(self) -> None:
        if not self.dirty:
            return
        if self._saving:
            self._save_again = True
            return
        self._saving = True
        self.set_info("Saving...")
        text = self.text
        title, content = self._payload()
        self._persist(self.entry_id, title, content, text)

    @work(thread=True, group="save")
    def _persist(self, entry_id: str | None, title: str, content: str, text: str) -> None:
        try:
            if entry_id is None:
                entry = self.backend.create_entry(title, content)
            else:
                entry = self.backend.update_entry(entry_id, title, content)
        except BackendError as e:
            self.app.call_from_thread(self._save_failed, e)
            return
        self.app.call_from_thread(self._saved, entry, text, entry_id is None)

    def _save_failed(self, error: BackendError) -> None:
        self._saving = False
        self._save_again = False
        self.set_info("Save failed")
        self.report_error(error, "Could not save entry")

    def _saved(self, entry: Entry, text: str, created: bool) -> None:
        self._saving = False
        self._saved_text = text
        self.entry_id = entry.id
        # a detached editor no longer owns its window
        promote = created and self.is_attached
        self.app.post_message(EntrySaved(self.window_id, entry.id, entry.title or extract_title(entry.content), promote))
        if not self.is_attached:
            return
        self.query_one("#delete", Button).disabled = False
        self.set_info(f"Saved {datetime.now():%I:%M:%S %p}")
        if self._save_again:
            self._save_again = False
            self.action_save()

    def _flush(self, entry_id: str | None, title: str, content: str) -> None:
        backend, app, window_id = self.backend, self.app, self.window_id

        def save() -> None:
            try:
                if entry_id is None:
                    entry = backend.create_entry(title, content)
                else:
                    entry = backend.update_entry(entry_id, title, content)
            except BackendError as e:
                app.call_from_thread(app.notify, str(e), title="Could not save entry", severity="error")
                return
            # flushes never promote the window
            app.post_message(EntrySaved(window_id, entry.id, title, created=False))

        app.run_worker(save, thread=True, group="flush")

    # ─────────────────────────────────────────────────────────────────────────
    # Toolbar
    # ─────────────────────────────────────────────────────────────────────────

    @on(Button.Pressed, "#save")
    def on_save_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.action_save()

    @on(Button.Pressed, "#preview")
    def on_preview_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.action_toggle_preview()

    def action_toggle_preview(self) -> None:
        previewing = not self.has_class("previewing")
        if previewing:
            self.query_one(Markdown).update(ensure_heading(self.text))
        self.set_class(previewing, "previewing")
        self.query_one("#preview", Button).label = "Edit" if previewing else "Preview"

    @on(Button.Pressed, "#delete")
    def on_delete_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if self.entry_id is None:
            return
        if not self._confirm_delete:
            self._confirm_delete = True
            self.query_one("#delete", Button).label = "Really?"
            return
        self._saved_text = self.text
        self._delete(self.entry_id)

    @work(thread=True, exclusive=True, group="delete")
    def _delete(self, entry_id: str) -> None:
        try:
            self.backend.delete_entry(entry_id)
        except BackendError as e:
            self.app.call_from_thread(self.report_error, e, "Could not delete entry")
            return
        self.app.call_from_thread(self.post_message, EntryDeleted(self.window_id, entry_id))
