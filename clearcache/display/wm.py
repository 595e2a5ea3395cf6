from __future__ import annotations

from typing import Any, Callable

import clearcache.display.console as console
from clearcache.core.events import WindowsChanged
from clearcache.display.background import DesktopBackground
from clearcache.display.flyout import Flyout
from clearcache.display.icons import DesktopIcon
from clearcache.display.window import ContentRenderer, Window
from clearcache.model.chassis import Chassis
from clearcache.model.icons import DesktopLayout
from clearcache.model.session import DesktopSession
from clearcache.model.windows import Viewport, WindowRecord
from textual import log
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Resize

RendererFactory = Callable[[WindowRecord], ContentRenderer]


class Desktop(Container):
    """
    The main workspace container for the user.

    Holds the background, the desktop icons and every window as direct
    children, each on its own layer, with a WindowManager that keeps the
    windows in step with the session.
    """
    DEFAULT_CSS = """
    Desktop {
        layers: background icons windows;
        width: 1fr;
        height: 1fr;
        padding: 0;
    }
    """

    def __init__(
        self,
        session: DesktopSession,
        layout: DesktopLayout,
        renderer_factory: RendererFactory,
        min_size: tuple[int, int] = (30, 8),
        menu_bar_height: int = 1,
        drag_threshold: int = 1,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.icon_layout = layout
        self.menu_bar_height = menu_bar_height
        self.drag_threshold = drag_threshold
        self.wm = WindowManager(self, session, renderer_factory, min_size)

    def compose(self) -> ComposeResult:
        yield DesktopBackground(id="background")
        for icon in self.icon_layout.load():
            yield DesktopIcon(icon, self.icon_layout, self.drag_threshold)

    def on_resize(self, event: Resize) -> None:
        viewport = Viewport(event.size.width, event.size.height, self.menu_bar_height)
        self.icon_layout.set_viewport(viewport)
        self.wm.set_viewport(viewport)


class WindowManager:
    """
    Reconciles Window widgets with the session's records.

    Every mutation goes through the session first; `sync()` then mounts,
    removes, retargets, restacks and refreshes widgets to match.
    """
    def __init__(
        self,
        desktop: Desktop,
        session: DesktopSession,
        renderer_factory: RendererFactory,
        min_size: tuple[int, int] = (30, 8),
    ):
        self._desktop = desktop
        self.session = session
        self._renderer_factory = renderer_factory
        self.min_width, self.min_height = min_size
        self._windows: dict[str, Window] = {}
        self.active_window: Window | None = None
        self.active_flyout: Flyout | None = None

    # ─────────────────────────────────────────────────────────────────────────
    # Window Management
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def windows(self) -> list[Window]:
        """Managed windows, back to front."""
        return [self._windows[r.id] for r in self.session.records if r.id in self._windows]

    def get_window(self, window_id: str) -> Window | None:
        return self._windows.get(window_id)

    async def dispatch(self, action: str, params: dict[str, Any] | None = None) -> WindowRecord | None:
        record = self.session.dispatch_action(action, params)
        await self.sync()
        return record

    async def focus(self, window_id: str) -> None:
        top = self.session.top()
        if top is not None and top.id == window_id:
            return
        if self.session.focus(window_id) is not None:
            await self.sync()

    async def close(self, window_id: str) -> None:
        if self.session.close(window_id) is not None:
            await self.sync()

    async def update_title(self, window_id: str, title: str) -> None:
        if self.session.update_title(window_id, title) is not None:
            await self.sync()

    async def promote(self, window_id: str, entry_id: str, title: str | None = None) -> None:
        if self.session.promote_composer_to_detail(window_id, entry_id, title) is not None:
            await self.sync()

    async def entry_changed(self, entry_id: str | None = None) -> None:
        self.session.entry_changed(entry_id)
        await self.sync()

    async def entry_deleted(self, window_id: str) -> None:
        self.session.entry_deleted(window_id)
        await self.sync()

    async def cycle_focus(self, direction: int = 1) -> None:
        self.session.cycle_focus(direction)
        await self.sync()

    def set_viewport(self, viewport: Viewport) -> None:
        self.session.set_viewport(viewport)
        for window in self._windows.values():
            window.set_viewport(viewport)

    async def sync(self) -> None:
        """Brings the widget tree in line with the session."""
        records = self.session.records
        live = {record.id for record in records}

        for window_id in [wid for wid in self._windows if wid not in live]:
            window = self._windows.pop(window_id)
            console.window_event(window.record, "closed")
            if window is self.active_window:
                self.active_window = None
            await window.remove()

        previous: Window | None = None
        for record in records:
            window = self._windows.get(record.id)
            if window is None:
                window = self._spawn(record)
                await self._desktop.mount(window)
                console.window_event(record, "opened")
            else:
                window.apply_presentation(record)
                if not window.renderer.matches(record):
                    log(f"Retargeting window {record.id} to {record.content_kind.value}.")
                    await window.swap_renderer(self._renderer_factory(record))
                    console.window_event(record, "retargeted")
                    window.renderer.call_after_refresh(window.renderer.focus_content)
            if previous is not None:
                self._desktop.move_child(window, after=previous)
            previous = window

        for window_id in self.session.drain_refreshes():
            window = self._windows.get(window_id)
            if window is not None:
                window.renderer.reload()

        top = records[-1] if records else None
        self._set_active(self._windows[top.id] if top else None)
        self._desktop.post_message(WindowsChanged(records))

    def _spawn(self, record: WindowRecord) -> Window:
        geometry = record.geometry_hint or self.session.viewport.maximized()
        chassis = Chassis(geometry, self.session.viewport, self.min_width, self.min_height)
        window = Window(record, self._renderer_factory(record), chassis, self)
        self._windows[record.id] = window
        return window

    def _set_active(self, window: Window | None) -> None:
        if self.active_window is window:
            return
        if self.active_window is not None:
            self.active_window.remove_class("active")
        self.active_window = window
        if window is not None:
            window.add_class("active")
            window.renderer.call_after_refresh(window.renderer.focus_content)

    # ─────────────────────────────────────────────────────────────────────────
    # Flyout Management
    # ─────────────────────────────────────────────────────────────────────────

    async def request_flyout(self, new_flyout: Flyout) -> None:
        """
        Handles a request to show a flyout, ensures only one is active at a time.
        """
        if self.active_flyout is not None:
            is_toggling_same_flyout = (self.active_flyout.id == new_flyout.id)
            await self.close_active_flyout()

            if is_toggling_same_flyout:
                return

        self.active_flyout = new_flyout
        await self._desktop.screen.mount(self.active_flyout)
        self.active_flyout.focus()

    async def close_active_flyout(self) -> None:
        flyouts = self._desktop.screen.query(Flyout)
        if not flyouts:
            return
        self._desktop.screen.set_focus(None)
        await flyouts.remove()
        self.active_flyout = None
