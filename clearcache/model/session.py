from __future__ import annotations

from typing import Any

from clearcache.model.windows import (ENTRY_DEPENDENT_KINDS, ContentKind,
                                      Geometry, Viewport, WindowRecord,
                                      ZOrderCounter, clamp_position)
from textual import log

ACTIONS: dict[str, ContentKind] = {
    "new-entry": ContentKind.COMPOSER,
    "journal-folder": ContentKind.LISTING,
    "journal-calendar": ContentKind.CALENDAR,
    "calendar": ContentKind.CALENDAR,
    "streaks": ContentKind.STREAKS,
    "settings": ContentKind.SETTINGS,
    "scanline-settings": ContentKind.SCANLINE_SETTINGS,
    "welcome": ContentKind.WELCOME,
}
OPEN_ENTRY_PREFIX = "open-entry:"

# Terminal-cell sizes used when a dispatch carries no geometry.
DEFAULT_SIZES: dict[ContentKind, tuple[int, int]] = {
    ContentKind.NONE: (40, 12),
    ContentKind.COMPOSER: (72, 22),
    ContentKind.DETAIL: (72, 22),
    ContentKind.LISTING: (64, 20),
    ContentKind.CALENDAR: (66, 22),
    ContentKind.STREAKS: (60, 22),
    ContentKind.SETTINGS: (70, 22),
    ContentKind.SCANLINE_SETTINGS: (58, 20),
    ContentKind.WELCOME: (44, 14),
}


def instance_slot(kind: ContentKind) -> str:
    """Composer and detail windows share one editor slot; every other kind owns its own."""
    return "editor" if kind.is_editor else kind.value


def resolve_action(action: str) -> tuple[ContentKind, str | None] | None:
    """Maps an action string to the content kind it opens and the entry it names."""
    if action.startswith(OPEN_ENTRY_PREFIX):
        entry_id = action[len(OPEN_ENTRY_PREFIX):].strip()
        return (ContentKind.DETAIL, entry_id) if entry_id else None
    kind = ACTIONS.get(action)
    return (kind, None) if kind is not None else None


class DesktopSession:
    """
    The desktop controller state for one app session.

    Owns every open WindowRecord and the z-order counter. The view layer
    (WindowManager) reads records from here and never mutates them directly.
    """
    def __init__(
        self,
        viewport: Viewport,
        cascade_step: int = 2,
        origin: tuple[int, int] = (16, 3),
        sizes: dict[ContentKind, tuple[int, int]] | None = None,
    ) -> None:
        self.viewport = viewport
        self.cascade_step = cascade_step
        self.origin = origin
        self.sizes = {**DEFAULT_SIZES, **(sizes or {})}
        self._records: dict[str, WindowRecord] = {}
        self._z = ZOrderCounter()

    # ─────────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def records(self) -> list[WindowRecord]:
        """Open windows, back to front."""
        return sorted(self._records.values(), key=lambda r: r.z_order)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, window_id: object) -> bool:
        return window_id in self._records

    def get(self, window_id: str) -> WindowRecord | None:
        return self._records.get(window_id)

    def top(self) -> WindowRecord | None:
        records = self.records
        return records[-1] if records else None

    def find_slot(self, kind: ContentKind) -> WindowRecord | None:
        slot = instance_slot(kind)
        for record in self._records.values():
            if instance_slot(record.content_kind) == slot:
                return record
        return None

    def set_viewport(self, viewport: Viewport) -> None:
        self.viewport = viewport

    # ─────────────────────────────────────────────────────────────────────────
    # Operations
    # ─────────────────────────────────────────────────────────────────────────

    def dispatch_action(self, action: str, params: dict[str, Any] | None = None) -> WindowRecord | None:
        """
        Focuses, retargets or creates the window an action asks for.

        params may carry `entry_id`, `title` and `geometry`. Returns the
        affected record, or None for an unknown action.
        """
        resolved = resolve_action(action)
        if resolved is None:
            log.warning(f"Ignoring unknown desktop action {action!r}.")
            return None
        kind, entry_id = resolved
        params = params or {}
        entry_id = params.get("entry_id", entry_id)
        title = params.get("title")

        existing = self.find_slot(kind)
        if existing is not None:
            existing.z_order = self._z.next()
            if kind is ContentKind.COMPOSER and existing.content_kind is ContentKind.DETAIL:
                existing.retarget(ContentKind.COMPOSER, None, title)
            elif entry_id and entry_id != existing.associated_entry_id:
                existing.retarget(kind, entry_id, title)
            log(f"Focused {existing.content_kind.value} window {existing.id} for {action!r}.")
            return existing

        geometry = params.get("geometry") or self._cascade(kind)
        record = WindowRecord.create(kind, self._z.next(), title, entry_id, geometry)
        self._records[record.id] = record
        log(f"Opened {kind.value} window {record.id} at {geometry}.")
        return record

    def focus(self, window_id: str) -> WindowRecord | None:
        record = self._records.get(window_id)
        if record is None:
            return None
        record.z_order = self._z.next()
        return record

    def close(self, window_id: str) -> WindowRecord | None:
        record = self._records.pop(window_id, None)
        if record is None:
            return None
        if record.associated_entry_id is not None:
            self._invalidate()
        log(f"Closed window {window_id}.")
        return record

    def update_title(self, window_id: str, title: str) -> WindowRecord | None:
        record = self._records.get(window_id)
        if record is None:
            return None
        record.title = title
        self._invalidate()
        return record

    def promote_composer_to_detail(self, window_id: str, entry_id: str, title: str | None = None) -> WindowRecord | None:
        """Binds a composer to its first-persisted entry without moving the window."""
        record = self._records.get(window_id)
        if record is None or record.content_kind is not ContentKind.COMPOSER:
            return None
        record.retarget(ContentKind.DETAIL, entry_id, title or record.title)
        self._invalidate()
        return record

    def entry_changed(self, entry_id: str | None = None) -> None:
        """An entry was created, renamed or deleted somewhere."""
        self._invalidate()

    def entry_deleted(self, window_id: str) -> WindowRecord | None:
        record = self.close(window_id)
        self._invalidate()
        return record

    def drain_refreshes(self) -> list[str]:
        """Returns the ids of windows whose content must re-fetch, clearing the flags."""
        pending = []
        for record in self._records.values():
            if record.needs_refresh:
                record.needs_refresh = False
                pending.append(record.id)
        return pending

    def cycle_focus(self, direction: int = 1) -> WindowRecord | None:
        """Forward raises the bottom window; backward swaps the two topmost."""
        records = self.records
        if len(records) < 2:
            return records[-1] if records else None
        target = records[0] if direction > 0 else records[-2]
        return self.focus(target.id)

    # ─────────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────────

    def _invalidate(self) -> None:
        for record in self._records.values():
            if record.content_kind in ENTRY_DEPENDENT_KINDS:
                record.needs_refresh = True

    def _cascade(self, kind: ContentKind) -> Geometry:
        width, height = self.sizes.get(kind, DEFAULT_SIZES[ContentKind.NONE])
        viewport = self.viewport
        if viewport.width > 0:
            width = min(width, viewport.width)
        if viewport.usable_height > 0:
            height = min(height, viewport.usable_height)

        offset = self.cascade_step * len(self._records)
        geometry = Geometry(self.origin[0] + offset, self.origin[1] + offset, width, height)
        x, y = clamp_position(geometry, geometry.x, geometry.y, viewport)
        return geometry.moved_to(x, y)
