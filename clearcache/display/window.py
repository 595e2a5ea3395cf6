from __future__ import annotations

from typing import TYPE_CHECKING

import clearcache.display.glyphs as glyphs
from clearcache.backend.base import Backend, BackendError
from clearcache.core.events import InfoChanged
from clearcache.model.chassis import Chassis
from clearcache.model.windows import ContentKind, Geometry, WindowRecord
from textual import log, on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.events import MouseDown, MouseMove, MouseUp
from textual.widget import Widget
from textual.widgets import Button, Label, Static

if TYPE_CHECKING:
    from clearcache.display.wm import WindowManager


class UIButton(Button):
    ALLOW_MAXIMIZE = False


class PriorityButton(UIButton):
    """A button that stops MouseDown events from bubbling to its parent."""
    def on_mouse_down(self, event: MouseDown) -> None:
        event.stop()


class TitleBar(Horizontal):
    """The title bar for a Window, handles drag initiation and window controls."""

    def __init__(self, window: Window):
        self._window = window
        super().__init__(id="title-bar")

    def compose(self) -> ComposeResult:
        yield Static(self._window.record.title, id="window-title")
        yield PriorityButton(glyphs.title_bar["maximize"], id="maximize-btn", compact=True)
        yield PriorityButton(glyphs.title_bar["exit"], id="exit-btn", compact=True)

    def on_mouse_down(self, event: MouseDown) -> None:
        """Initiates a window drag operation when the title bar is clicked."""
        if event.button == 1:
            self._window.start_gesture("drag", event)

    def on_click(self, event) -> None:
        if event.chain == 2:
            self._window.toggle_maximize()


class ResizeHandle(Static):
    """Bottom-right grip."""

    def __init__(self, window: Window):
        self._window = window
        super().__init__(glyphs.title_bar["resize"], id="resize-handle")

    def on_mouse_down(self, event: MouseDown) -> None:
        if event.button == 1:
            self._window.start_gesture("resize", event)
            event.stop()


class ContentRenderer(Container):
    """
    Base class for everything a window can host.

    A renderer knows its window id and, for editors, its entry id. It never
    touches window chrome; it talks to the desktop through messages.
    """
    KIND: ContentKind = ContentKind.NONE

    DEFAULT_CSS = """
    ContentRenderer {
        height: 1fr;
        width: 1fr;
    }
    """

    def __init__(self, record: WindowRecord, **kwargs):
        super().__init__(**kwargs)
        self.window_id = record.id
        self.entry_id = record.associated_entry_id

    @property
    def backend(self) -> Backend:
        return self.app.backend

    def matches(self, record: WindowRecord) -> bool:
        """True when this renderer can keep serving the record as-is."""
        return record.content_kind is self.KIND and record.associated_entry_id == self.entry_id

    def reload(self) -> None:
        """Re-fetch content after the desktop invalidated it."""

    def set_info(self, text: str) -> None:
        self.post_message(InfoChanged(text))

    def report_error(self, error: BackendError, what: str = "Error") -> None:
        log.error(f"{type(self).__name__}: {error}")
        self.app.notify(str(error), title=what, severity="error")

    def focus_content(self) -> bool:
        """Focuses the first focusable descendant."""
        focusable = [w for w in self.query("*") if w.can_focus and not w.disabled]
        if focusable:
            focusable[0].focus()
            return True
        return False


class Window(Container):
    """
    A draggable, resizable frame around one ContentRenderer.

    Geometry lives in the Chassis; the widget only mirrors it into styles.
    """
    DEFAULT_CSS = """
    Window {
        position: absolute;
        layer: windows;
        background: $surface;
        border: round $panel-lighten-2;
        padding: 0;
    }
    Window.active {
        border: round $accent;
    }
    Window.maximized {
        border: none;
    }
    Window.dragging, Window.resizing {
        opacity: 0.85;
    }
    #title-bar {
        height: 1;
        background: $panel;
    }
    Window.active #title-bar {
        background: $accent 40%;
    }
    #window-title {
        width: 1fr;
        content-align: center middle;
        text-style: bold;
    }
    #title-bar PriorityButton {
        min-width: 3;
        width: auto;
        margin: 0 0 0 1;
    }
    #window-body {
        height: 1fr;
    }
    #window-body.padded {
        padding: 0 1;
    }
    #window-footer {
        height: 1;
        background: $panel;
    }
    #window-info {
        width: 1fr;
        color: $text-muted;
        padding: 0 1;
    }
    #resize-handle {
        width: 1;
        color: $text-muted;
    }
    """
    BINDINGS = [
        Binding("ctrl+left", "move(-1, 0)", "Move Left", show=False),
        Binding("ctrl+right", "move(1, 0)", "Move Right", show=False),
        Binding("ctrl+up", "move(0, -1)", "Move Up", show=False),
        Binding("ctrl+down", "move(0, 1)", "Move Down", show=False),
        Binding("ctrl+shift+left", "resize(-1, 0)", "Narrower", show=False),
        Binding("ctrl+shift+right", "resize(1, 0)", "Wider", show=False),
        Binding("ctrl+shift+up", "resize(0, -1)", "Shorter", show=False),
        Binding("ctrl+shift+down", "resize(0, 1)", "Taller", show=False),
        Binding("alt+m", "maximize", "Maximize", show=False),
    ]

    def __init__(self, record: WindowRecord, renderer: ContentRenderer, chassis: Chassis, wm: WindowManager, **kwargs):
        super().__init__(id=f"window-{record.id}", **kwargs)
        self.record = record
        self.renderer = renderer
        self.chassis = chassis
        self.wm = wm
        self._info = ""

    @property
    def window_id(self) -> str:
        return self.record.id

    # ┌───────────────────────────────────────────────────────────────────────┐
    # │ Lifecycle & Compose Methods                                           │
    # └───────────────────────────────────────────────────────────────────────┘

    def compose(self) -> ComposeResult:
        yield TitleBar(self)
        with Container(id="window-body", classes=self.record.padding_mode):
            yield self.renderer
        with Horizontal(id="window-footer"):
            yield Label("", id="window-info")
            yield ResizeHandle(self)

    def on_mount(self) -> None:
        self.apply_geometry(self.chassis.geometry)
        self.apply_presentation(self.record)

    def on_unmount(self) -> None:
        """A window closed mid-gesture must not keep the pointer."""
        if self.chassis.busy:
            self.chassis.cancel()
        self.release_mouse()

    # ┌───────────────────────────────────────────────────────────────────────┐
    # │ Presentation                                                          │
    # └───────────────────────────────────────────────────────────────────────┘

    def apply_geometry(self, geometry: Geometry) -> None:
        self.styles.offset = (geometry.x, geometry.y)
        self.styles.width = geometry.width
        self.styles.height = geometry.height

    def apply_presentation(self, record: WindowRecord) -> None:
        self.record = record
        self.query_one("#window-title", Static).update(record.title)
        body = self.query_one("#window-body", Container)
        body.set_class(record.padding_mode == "flush", "flush")
        body.set_class(record.padding_mode == "padded", "padded")
        self.set_class(not record.show_info_bar, "no-info")
        self._render_info()

    def _render_info(self) -> None:
        text = self._info if self.record.show_info_bar else ""
        self.query_one("#window-info", Label).update(text)

    @on(InfoChanged)
    def on_info_changed(self, message: InfoChanged) -> None:
        self._info = message.text
        self._render_info()
        message.stop()

    async def swap_renderer(self, renderer: ContentRenderer) -> None:
        """Replaces the hosted content, e.g. when the editor slot is retargeted."""
        body = self.query_one("#window-body", Container)
        await body.remove_children()
        self.renderer = renderer
        self._info = ""
        await body.mount(renderer)

    def set_viewport(self, viewport) -> None:
        self.apply_geometry(self.chassis.set_viewport(viewport))

    # ┌───────────────────────────────────────────────────────────────────────┐
    # │ Event Handlers                                                        │
    # └───────────────────────────────────────────────────────────────────────┘

    def on_mouse_down(self, event: MouseDown) -> None:
        """Click-to-focus: any press inside the frame raises it."""
        self.app.call_next(self.wm.focus, self.window_id)

    def start_gesture(self, kind: str, event: MouseDown) -> None:
        pointer = (int(event.screen_x), int(event.screen_y))
        started = self.chassis.begin_drag(*pointer) if kind == "drag" else self.chassis.begin_resize(*pointer)
        if started:
            self.capture_mouse()
            self.add_class("dragging" if kind == "drag" else "resizing")

    def on_mouse_move(self, event: MouseMove) -> None:
        if self.chassis.busy:
            self.apply_geometry(self.chassis.pointer_move(int(event.screen_x), int(event.screen_y)))
            event.stop()

    def on_mouse_up(self, event: MouseUp) -> None:
        """Releases the drag lock when the mouse button is released."""
        if self.chassis.busy:
            self.apply_geometry(self.chassis.pointer_up())
            self.release_mouse()
            self.remove_class("dragging", "resizing")
            event.stop()

    # ┌───────────────────────────────────────────────────────────────────────┐
    # │ Window Controls                                                       │
    # └───────────────────────────────────────────────────────────────────────┘

    @on(Button.Pressed, "#exit-btn")
    def close_window(self, event: Button.Pressed) -> None:
        log(f"Closing window {self.record.title!r}")
        self.app.call_next(self.wm.close, self.window_id)
        event.stop()

    @on(Button.Pressed, "#maximize-btn")
    def on_maximize_pressed(self, event: Button.Pressed) -> None:
        self.toggle_maximize()
        event.stop()

    def toggle_maximize(self) -> None:
        self.apply_geometry(self.chassis.toggle_maximize())
        self.set_class(self.chassis.maximized, "maximized")
        self.query_one("#maximize-btn", Button).label = (
            glyphs.title_bar["restore"] if self.chassis.maximized else glyphs.title_bar["maximize"]
        )

    def action_maximize(self) -> None:
        self.toggle_maximize()

    def action_move(self, dx: int, dy: int) -> None:
        self.apply_geometry(self.chassis.move_by(dx, dy))

    def action_resize(self, dw: int, dh: int) -> None:
        self.apply_geometry(self.chassis.resize_by(dw, dh))
