"""
Window records and the geometry types shared by the session and the chassis.

Everything in here is plain data: no Textual imports, so the desktop rules can
be exercised without a running app.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from uuid import uuid4


class ContentKind(str, Enum):
    """What a window hosts."""
    NONE = "none"
    COMPOSER = "composer"
    LISTING = "listing"
    DETAIL = "detail"
    CALENDAR = "calendar"
    STREAKS = "streaks"
    SETTINGS = "settings"
    SCANLINE_SETTINGS = "scanline_settings"
    WELCOME = "welcome"

    @property
    def is_editor(self) -> bool:
        return self in (ContentKind.COMPOSER, ContentKind.DETAIL)


# Kinds whose content is derived from journal entries and must re-fetch
# whenever an entry is created, renamed or deleted.
ENTRY_DEPENDENT_KINDS = frozenset({
    ContentKind.LISTING,
    ContentKind.CALENDAR,
    ContentKind.STREAKS,
})


@dataclass(frozen=True)
class Geometry:
    x: int
    y: int
    width: int
    height: int

    def moved_to(self, x: int, y: int) -> Geometry:
        return replace(self, x=x, y=y)

    def resized_to(self, width: int, height: int) -> Geometry:
        return replace(self, width=width, height=height)

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class Viewport:
    """The visible desktop, including the fixed menu bar strip at the top."""
    width: int
    height: int
    menu_bar_height: int = 0

    @property
    def usable_height(self) -> int:
        return max(0, self.height - self.menu_bar_height)

    def maximized(self) -> Geometry:
        return Geometry(0, self.menu_bar_height, self.width, self.usable_height)


def clamp(value: int, low: int, high: int) -> int:
    """Clamps value into [low, high]; the lower bound wins when high < low."""
    return max(low, min(value, high))


def clamp_position(geometry: Geometry, x: int, y: int, viewport: Viewport) -> tuple[int, int]:
    """Keeps a window of the given size below the menu bar and inside the viewport."""
    return (
        clamp(x, 0, viewport.width - geometry.width),
        clamp(y, viewport.menu_bar_height, viewport.height - geometry.height),
    )


class ZOrderCounter:
    """Strictly increasing source of stacking values, shared by every window."""

    def __init__(self, start: int = 0) -> None:
        self._value = start

    @property
    def current(self) -> int:
        return self._value

    def next(self) -> int:
        self._value += 1
        return self._value


DEFAULT_TITLES: dict[ContentKind, str] = {
    ContentKind.NONE: "Untitled",
    ContentKind.COMPOSER: "New Entry",
    ContentKind.LISTING: "Journal Folder",
    ContentKind.DETAIL: "Edit Entry",
    ContentKind.CALENDAR: "Journal Calendar",
    ContentKind.STREAKS: "Streaks",
    ContentKind.SETTINGS: "Settings",
    ContentKind.SCANLINE_SETTINGS: "Scanlines",
    ContentKind.WELCOME: "Welcome",
}

# (padding_mode, show_info_bar)
PRESENTATION: dict[ContentKind, tuple[str, bool]] = {
    ContentKind.NONE: ("padded", False),
    ContentKind.COMPOSER: ("flush", True),
    ContentKind.LISTING: ("padded", True),
    ContentKind.DETAIL: ("flush", True),
    ContentKind.CALENDAR: ("padded", True),
    ContentKind.STREAKS: ("padded", False),
    ContentKind.SETTINGS: ("padded", False),
    ContentKind.SCANLINE_SETTINGS: ("padded", False),
    ContentKind.WELCOME: ("flush", False),
}


@dataclass
class WindowRecord:
    """In-memory descriptor of one open window."""
    content_kind: ContentKind
    title: str
    z_order: int
    id: str = field(default_factory=lambda: uuid4().hex)
    associated_entry_id: str | None = None
    geometry_hint: Geometry | None = None
    padding_mode: str = "padded"
    show_info_bar: bool = False
    needs_refresh: bool = False

    @classmethod
    def create(
        cls,
        kind: ContentKind,
        z_order: int,
        title: str | None = None,
        entry_id: str | None = None,
        geometry: Geometry | None = None,
    ) -> WindowRecord:
        padding_mode, show_info_bar = PRESENTATION[kind]
        return cls(
            content_kind=kind,
            title=title or DEFAULT_TITLES[kind],
            z_order=z_order,
            associated_entry_id=entry_id,
            geometry_hint=geometry,
            padding_mode=padding_mode,
            show_info_bar=show_info_bar,
        )

    def retarget(self, kind: ContentKind, entry_id: str | None, title: str | None) -> None:
        """Rebinds the record to another entity, keeping id, geometry and z."""
        self.content_kind = kind
        self.associated_entry_id = entry_id
        self.title = title or DEFAULT_TITLES[kind]
        self.padding_mode, self.show_info_bar = PRESENTATION[kind]
