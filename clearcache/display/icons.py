from __future__ import annotations

import clearcache.display.glyphs as glyphs
from clearcache.core.events import Dispatch
from clearcache.model.icons import DesktopIconRecord, DesktopLayout
from textual import log
from textual.events import MouseDown, MouseMove, MouseUp
from textual.widget import Widget


class DesktopIcon(Widget):
    """
    A launcher on the desktop background.

    Dragging moves it (snapped to the grid on release); a press that barely
    moves counts as a click and dispatches the icon's action.
    """
    DEFAULT_CSS = """
    DesktopIcon {
        position: absolute;
        layer: icons;
        content-align: center middle;
        text-align: center;
        color: $text;
    }
    DesktopIcon:hover {
        background: $accent 20%;
    }
    DesktopIcon.dragging {
        background: $accent 40%;
        text-style: bold;
    }
    """

    def __init__(self, icon: DesktopIconRecord, layout: DesktopLayout, drag_threshold: int = 1):
        super().__init__(id=f"icon-{icon.id}")
        self.icon = icon
        self.icon_layout = layout
        self.drag_threshold = drag_threshold
        self._press: tuple[int, int] | None = None
        self._moved = False

    def on_mount(self) -> None:
        self.styles.width = self.icon_layout.icon_width
        self.styles.height = self.icon_layout.icon_height
        self.styles.offset = (self.icon.x, self.icon.y)

    def render(self) -> str:
        glyph = glyphs.desktop.get(self.icon.glyph, "\\[?]")
        return f"{glyph}\n{self.icon.label}"

    def _delta(self, event: MouseMove | MouseUp) -> tuple[int, int]:
        return (int(event.screen_x) - self._press[0], int(event.screen_y) - self._press[1])

    def on_mouse_down(self, event: MouseDown) -> None:
        if event.button != 1:
            return
        self._press = (int(event.screen_x), int(event.screen_y))
        self._moved = False
        self.capture_mouse()
        event.stop()

    def on_mouse_move(self, event: MouseMove) -> None:
        if self._press is None:
            return
        dx, dy = self._delta(event)
        if not self._moved and max(abs(dx), abs(dy)) < self.drag_threshold:
            return
        self._moved = True
        self.add_class("dragging")
        x, y = self.icon_layout.constrain(self.icon.x + dx, self.icon.y + dy)
        self.styles.offset = (int(x), int(y))
        event.stop()

    def on_mouse_up(self, event: MouseUp) -> None:
        if self._press is None:
            return
        dx, dy = self._delta(event)
        self._press = None
        self.release_mouse()
        self.remove_class("dragging")
        event.stop()
        if self._moved:
            self.icon_layout.complete_drag(self.icon.id, dx, dy)
            self.styles.offset = (self.icon.x, self.icon.y)
        else:
            log(f"Desktop icon {self.icon.id} clicked.")
            self.post_message(Dispatch(self.icon.action))

    def on_unmount(self) -> None:
        self._press = None
        self.release_mouse()
