"""Desktop wallpaper: a tiled pattern or a solid colour, with optional scanlines."""
from __future__ import annotations

from clearcache.backend.models import BackgroundPreference, ScanlinePreferences
from rich.style import Style
from rich.text import Text
from textual.color import Color, ColorParseError
from textual.reactive import reactive
from textual.widget import Widget

# (tile rows, foreground, background)
PATTERN_TILES: dict[str, tuple[tuple[str, ...], str, str]] = {
    "swatch": (("▚▞",), "#9a9a9a", "#c8c8c8"),
    "dots": (("·   ", "  · "), "#808080", "#e8e8e8"),
    "lines": (("────",), "#b0b0b0", "#e8e8e8"),
    "grid": (("┼───", "│   "), "#a0a0c8", "#f0f0ff"),
    "gray-grid": (("┼───", "│   "), "#9a9a9a", "#d8d8d8"),
    "bubbles": (("○    ", "   ◦ ", " °   "), "#7aa7d6", "#dcecfb"),
    "stars": (("✦       ", "    ·   ", "  ✧     "), "#f4e38a", "#1c1f3a"),
    "cats": (("ᓚᘏᗢ      ", "          "), "#7a5c3a", "#f6ead8"),
    "bear": (("ʕ•ᴥ•ʔ     ", "          "), "#6b4a2b", "#f3e3cf"),
}
DEFAULT_PATTERN = "swatch"


def scanline_rows(height: int, density: float) -> set[int]:
    """Rows that get dimmed: one every `5 - density` rows, so density 4 dims every row."""
    if height <= 0:
        return set()
    gap = max(1, round(5 - density))
    return set(range(0, height, gap))


def dimmed(color: Color, intensity: float) -> Color:
    # intensities are tuned for alpha overlays on a bitmap; a terminal row needs more
    return color.darken(min(1.0, intensity * 3))


class DesktopBackground(Widget):
    """Fills the desktop behind the icons and windows."""

    DEFAULT_CSS = """
    DesktopBackground {
        layer: background;
        width: 1fr;
        height: 1fr;
    }
    """
    preference: reactive[BackgroundPreference] = reactive(BackgroundPreference)
    preview: reactive[BackgroundPreference | None] = reactive(None)
    scanlines: reactive[ScanlinePreferences] = reactive(ScanlinePreferences)

    def on_mount(self) -> None:
        app = self.app
        app.background_changed.subscribe(self, self._on_background_change)
        app.background_previewed.subscribe(self, self._on_background_preview)
        app.scanlines_changed.subscribe(self, self._on_scanline_change)

    def _on_background_change(self, preference: BackgroundPreference) -> None:
        self.preview = None
        self.preference = preference

    def _on_background_preview(self, preference: BackgroundPreference | None) -> None:
        self.preview = preference

    def _on_scanline_change(self, scanlines: ScanlinePreferences) -> None:
        self.scanlines = scanlines

    @property
    def shown(self) -> BackgroundPreference:
        return self.preview or self.preference

    def _tile(self) -> tuple[tuple[str, ...], Color, Color]:
        shown = self.shown
        if shown.type == "color":
            try:
                background = Color.parse(shown.value)
            except ColorParseError:
                background = Color.parse("#e8e8e8")
            return ((" ",), background, background)
        rows, fg, bg = PATTERN_TILES.get(shown.value, PATTERN_TILES[DEFAULT_PATTERN])
        return rows, Color.parse(fg), Color.parse(bg)

    def render(self) -> Text:
        width, height = self.size
        rows, fg, bg = self._tile()
        intensity = self.scanlines.effective_intensity
        dim_rows = scanline_rows(height, self.scanlines.density) if intensity > 0 else set()

        text = Text(no_wrap=True, overflow="crop")
        for y in range(height):
            row = rows[y % len(rows)]
            line = (row * (width // len(row) + 1))[:width]
            row_fg, row_bg = fg, bg
            if y in dim_rows:
                row_fg, row_bg = dimmed(fg, intensity), dimmed(bg, intensity)
            style = Style(color=row_fg.rich_color, bgcolor=row_bg.rich_color)
            text.append(line, style)
            if y < height - 1:
                text.append("\n")
        return text
