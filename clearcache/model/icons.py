"""
Desktop icon layout: default placement, grid snapping, viewport clamping and
the versioned JSON file that remembers where the user dragged things.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path

from clearcache.core.storage import read_json, write_json
from clearcache.model.windows import Viewport, clamp
from textual import log

LAYOUT_VERSION = 1


@dataclass(frozen=True)
class IconPreset:
    id: str
    glyph: str
    label: str
    action: str


DEFAULT_ICONS: tuple[IconPreset, ...] = (
    IconPreset("journal-folder", "journal_folder", "Journal Folder", "journal-folder"),
    IconPreset("new-entry", "new_entry", "New Entry", "new-entry"),
    IconPreset("calendar", "calendar", "Calendar", "journal-calendar"),
    IconPreset("streaks", "streaks", "Streaks", "streaks"),
)


@dataclass
class DesktopIconRecord:
    id: str
    glyph: str
    label: str
    action: str
    x: int
    y: int


def snap(value: float, grid: int) -> int:
    """Rounds to the nearest grid multiple, halves rounding up."""
    return int(math.floor(value / grid + 0.5)) * grid


def snap_within(value: float, low: int, high: int, grid: int) -> int:
    """Snaps to the grid, then steps to the nearest multiple still inside [low, high]."""
    snapped = snap(value, grid)
    if snapped > high:
        snapped = math.floor(high / grid) * grid
    if snapped < low:
        snapped = math.ceil(low / grid) * grid
    return snapped


class LayoutStore:
    """Reads and writes the icon position map as a single JSON document."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def read(self) -> dict[str, tuple[int, int]]:
        try:
            data = read_json(self.path)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            log.warning(f"Unreadable icon layout at {self.path}: {e}. Using defaults.")
            return {}

        if isinstance(data, dict) and "version" in data:
            if data.get("version") != LAYOUT_VERSION:
                log.warning(f"Icon layout version {data.get('version')!r} is not supported. Using defaults.")
                return {}
            raw = data.get("positions")
        else:
            # unversioned map written before the version tag existed
            raw = data

        if not isinstance(raw, dict):
            log.warning(f"Malformed icon layout at {self.path}. Using defaults.")
            return {}

        positions: dict[str, tuple[int, int]] = {}
        for icon_id, pos in raw.items():
            try:
                positions[str(icon_id)] = (int(pos["x"]), int(pos["y"]))
            except (KeyError, TypeError, ValueError, OverflowError):
                log.warning(f"Skipping malformed position for icon {icon_id!r}.")
        return positions

    def write(self, positions: dict[str, tuple[int, int]]) -> None:
        write_json(self.path, {
            "version": LAYOUT_VERSION,
            "positions": {icon_id: {"x": x, "y": y} for icon_id, (x, y) in positions.items()},
        })


class DesktopLayout:
    """Owns icon positions for the desktop background."""

    def __init__(
        self,
        store: LayoutStore,
        viewport: Viewport,
        grid_unit: int = 20,
        icon_size: tuple[int, int] = (64, 80),
        origin: tuple[int, int] = (20, 60),
        spacing: int = 90,
        icons: tuple[IconPreset, ...] = DEFAULT_ICONS,
    ) -> None:
        self.store = store
        self.viewport = viewport
        self.grid_unit = grid_unit
        self.icon_width, self.icon_height = icon_size
        self.origin = origin
        self.spacing = spacing
        self.presets = icons
        self.icons: list[DesktopIconRecord] = [
            self._record(preset, *self.default_position(index)) for index, preset in enumerate(icons)
        ]

    def _record(self, preset: IconPreset, x: int, y: int) -> DesktopIconRecord:
        return DesktopIconRecord(preset.id, preset.glyph, preset.label, preset.action, x, y)

    def default_position(self, index: int) -> tuple[int, int]:
        return (self.origin[0], self.origin[1] + index * self.spacing)

    def load(self) -> list[DesktopIconRecord]:
        """Applies saved positions over the defaults. Called once at mount."""
        saved = self.store.read()
        self.icons = [
            self._record(preset, *saved.get(preset.id, self.default_position(index)))
            for index, preset in enumerate(self.presets)
        ]
        return self.icons

    def get(self, icon_id: str) -> DesktopIconRecord | None:
        return next((icon for icon in self.icons if icon.id == icon_id), None)

    def positions(self) -> dict[str, tuple[int, int]]:
        return {icon.id: (icon.x, icon.y) for icon in self.icons}

    def constrain(self, x: float, y: float) -> tuple[float, float]:
        vp = self.viewport
        return (
            clamp(x, 0, vp.width - self.icon_width),
            clamp(y, vp.menu_bar_height, vp.height - self.icon_height),
        )

    def place(self, x: float, y: float) -> tuple[int, int]:
        """Clamps a free position into the viewport and snaps it to the grid."""
        vp = self.viewport
        cx, cy = self.constrain(x, y)
        return (
            snap_within(cx, 0, vp.width - self.icon_width, self.grid_unit),
            snap_within(cy, vp.menu_bar_height, vp.height - self.icon_height, self.grid_unit),
        )

    def complete_drag(self, icon_id: str, dx: float, dy: float) -> DesktopIconRecord | None:
        icon = self.get(icon_id)
        if icon is None:
            return None
        icon.x, icon.y = self.place(icon.x + dx, icon.y + dy)
        try:
            self.store.write(self.positions())
        except OSError as e:
            log.error(f"Could not save icon layout to {self.store.path}: {e}")
        log(f"Icon {icon_id} dropped at ({icon.x}, {icon.y}).")
        return icon

    def set_viewport(self, viewport: Viewport) -> None:
        self.viewport = viewport
