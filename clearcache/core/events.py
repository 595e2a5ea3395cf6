from __future__ import annotations

from typing import Any

from clearcache.model.windows import WindowRecord
from textual import log
from textual.message import Message

# =============================================================================
# Custom Messages
# =============================================================================


class Dispatch(Message):
    """A request to open, focus or retarget a window by action string."""
    def __init__(self, action: str, params: dict[str, Any] | None = None):
        log(f"Posting request to dispatch {action!r}.")
        self.action = action
        self.params = params or {}
        super().__init__()


class OpenEntry(Dispatch):
    """Opens a journal entry in the editor window."""
    def __init__(self, entry_id: str, title: str | None = None):
        self.entry_id = entry_id
        super().__init__(f"open-entry:{entry_id}", {"title": title} if title else None)


class CloseWindow(Message):
    """Asks the desktop to close a window by id."""
    def __init__(self, window_id: str):
        log(f"Posting request to close window {window_id}.")
        self.window_id = window_id
        super().__init__()


class EntrySaved(Message):
    """Posted by an editor after a successful save."""
    def __init__(self, window_id: str, entry_id: str, title: str, created: bool):
        log(f"Entry {entry_id} saved ({'created' if created else 'updated'}).")
        self.window_id = window_id
        self.entry_id = entry_id
        self.title = title
        self.created = created
        super().__init__()


class EntryDeleted(Message):
    """Posted by an editor once its entry is gone."""
    def __init__(self, window_id: str, entry_id: str):
        log(f"Entry {entry_id} deleted.")
        self.window_id = window_id
        self.entry_id = entry_id
        super().__init__()


class WindowsChanged(Message):
    """Posted when the set of open windows or their stacking changes."""
    def __init__(self, records: list[WindowRecord]) -> None:
        self.records = records
        super().__init__()


class InfoChanged(Message):
    """A renderer has new text for its window's info bar."""
    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__()
