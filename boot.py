"""
clear cache v0.1
A retro desktop journal on terminal
Built with Textual v6.5.0

The desktop hosts a handful of single-instance windows on top of a patterned
wallpaper:
- Journal folder, calendar and streaks, all refreshed when an entry changes
- One editor window shared by the composer and the entry detail view
- Settings for sound, wallpaper and the CRT scanline overlay
- Draggable desktop icons snapped to a grid and remembered between runs
- A menu bar with a clock and the focused window's title
- Mouse & keyboard window management (move, resize, maximize, cycle)

Entries, profiles, streaks and badges come from a backend: an in-memory one
for offline use, or a Supabase-style REST service.

Run:
    clearcache [--backend memory|rest] [--glyphs compatible|standard|nerdfont]
               [--data-dir PATH] [--console]

Debug console:
    python -m clearcache.display.console
"""
from __future__ import annotations

import argparse
from pathlib import Path

import clearcache.display.console as console
import clearcache.display.glyphs as glyphs
from apps.composer import JournalEditor
from apps.folder import JournalFolder
from apps.journal_calendar import JournalCalendar
from apps.scanlines import ScanlineSettings
from apps.settings import Settings as SettingsWindow
from apps.streaks import StreakBoard
from apps.welcome import Welcome
from clearcache.backend.base import Backend, BackendError
from clearcache.backend.memory import MemoryBackend
from clearcache.backend.models import Profile, User
from clearcache.backend.rest import RestBackend
from clearcache.core.config import (BACKENDS, GLYPH_STYLES, ConfigError,
                                    Settings, load_settings)
from clearcache.core.events import (CloseWindow, Dispatch, EntryDeleted,
                                    EntrySaved, WindowsChanged)
from clearcache.display.bar import MenuBar
from clearcache.display.flyout import Flyout
from clearcache.display.screens import AccountScreen, AdminScreen, LoginScreen
from clearcache.display.window import ContentRenderer
from clearcache.display.wm import Desktop, WindowManager
from clearcache.model.icons import DesktopLayout, LayoutStore
from clearcache.model.session import DesktopSession
from clearcache.model.windows import ContentKind, Viewport, WindowRecord
from textual import log, on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.events import MouseDown
from textual.signal import Signal


# ─────────────────────────────────────────────────────────────────────────────
#  Wiring
# ─────────────────────────────────────────────────────────────────────────────
def build_renderer(record: WindowRecord) -> ContentRenderer:
    """Picks the content for a window record."""
    match record.content_kind:
        case ContentKind.COMPOSER | ContentKind.DETAIL:
            return JournalEditor(record)
        case ContentKind.LISTING:
            return JournalFolder(record)
        case ContentKind.CALENDAR:
            return JournalCalendar(record)
        case ContentKind.STREAKS:
            return StreakBoard(record)
        case ContentKind.SETTINGS:
            return SettingsWindow(record)
        case ContentKind.SCANLINE_SETTINGS:
            return ScanlineSettings(record)
        case ContentKind.WELCOME:
            return Welcome(record)
        case ContentKind.NONE:
            return ContentRenderer(record)
    raise ValueError(f"No renderer for {record.content_kind!r}")


def create_backend(settings: Settings) -> Backend:
    if settings.backend == "rest":
        return RestBackend(settings.supabase_url, settings.supabase_key)
    return MemoryBackend()


# ─────────────────────────────────────────────────────────────────────────────
#  Main Application
# ─────────────────────────────────────────────────────────────────────────────
class ClearCache(App):
    """
    Owns the backend, the desktop session and the preference signals, and
    routes messages from windows, icons and menus into the WindowManager.
    """
    TITLE = "Clear Cache"
    CSS = """
    Screen {
        layers: base menu flyout;
    }
    #desktop {
        layer: base;
    }
    """
    BINDINGS = [
        Binding("ctrl+n", "dispatch('new-entry')", "New Entry", priority=True),
        Binding("ctrl+o", "dispatch('journal-folder')", "Journal Folder", priority=True),
        Binding("ctrl+w", "close_window", "Close Window", priority=True),
        ("alt+tab", "cycle_focus(1)", "Cycle Window Focus Up"),
        ("alt+shift+tab", "cycle_focus(-1)", "Cycle Window Focus Down"),
    ]

    def __init__(self, settings: Settings, backend: Backend, **kwargs):
        super().__init__(**kwargs)
        self.settings = settings
        self.backend = backend
        self.profile: Profile | None = None
        self.session = DesktopSession(
            Viewport(80, 24, settings.menu_bar_height),
            cascade_step=settings.cascade_step,
        )
        self.icon_layout = DesktopLayout(
            LayoutStore(settings.layout_file),
            self.session.viewport,
            grid_unit=settings.grid_unit,
            icon_size=(settings.icon_width, settings.icon_height),
            origin=(settings.icon_origin_x, settings.icon_origin_y + settings.menu_bar_height),
            spacing=settings.icon_spacing,
        )
        self.background_changed = Signal(self, "background-change")
        self.background_previewed = Signal(self, "background-preview")
        self.scanlines_changed = Signal(self, "scanline-change")
        self.sounds_changed = Signal(self, "sound-change")

    @property
    def is_admin(self) -> bool:
        return self.profile is not None and self.profile.is_admin

    def compose(self) -> ComposeResult:
        yield Desktop(
            self.session,
            self.icon_layout,
            build_renderer,
            min_size=(self.settings.min_window_width, self.settings.min_window_height),
            menu_bar_height=self.settings.menu_bar_height,
            drag_threshold=self.settings.drag_threshold,
            id="desktop",
        )
        yield MenuBar(id="menu-bar")

    def on_mount(self) -> None:
        self.wm: WindowManager = self.query_one(Desktop).wm
        if self.settings.debug_console:
            console.redirect_stdout()  # console log
        user = self.backend.current_user
        if user is None:
            self.push_screen(LoginScreen(), self._signed_in)
        else:
            self._signed_in(user)

    def _signed_in(self, user: User | None) -> None:
        if user is None:
            return
        print(f"Signed in as {user.email or user.id}.")
        self._load_profile()
        if self.settings.show_welcome:
            self.call_next(self.wm.dispatch, "welcome")

    @work(thread=True, exclusive=True, group="profile")
    def _load_profile(self) -> None:
        try:
            profile = self.backend.get_profile()
        except BackendError as e:
            self.call_from_thread(self.notify, str(e), title="Could not load profile", severity="error")
            return
        self.call_from_thread(self._apply_profile, profile)

    def _apply_profile(self, profile: Profile) -> None:
        self.profile = profile
        self.background_changed.publish(profile.background_preference)
        self.scanlines_changed.publish(profile.scanline_preferences)
        self.sounds_changed.publish(profile.sound_preferences)
        self.play_sound("login")

    def play_sound(self, sound: str) -> None:
        if self.profile is not None and self.profile.sound_preferences.enabled(sound):
            self.bell()

    def on_mouse_down(self, event: MouseDown) -> None:
        """Closes an open menu when the user clicks anywhere outside it."""
        for flyout in self.screen.query(Flyout):
            if not flyout.region.contains(event.screen_x, event.screen_y):
                self.call_next(self.wm.close_active_flyout)
                return

    # ─────────────────────────────────────────────────────────────────────────
    # Messages
    # ─────────────────────────────────────────────────────────────────────────

    @on(Dispatch)
    async def route_dispatch(self, message: Dispatch) -> None:
        if message.action == "new-entry":
            self.play_sound("newEntry")
        await self.wm.dispatch(message.action, message.params)

    @on(CloseWindow)
    async def route_close(self, message: CloseWindow) -> None:
        self.play_sound("windowClose")
        await self.wm.close(message.window_id)

    @on(EntrySaved)
    async def entry_saved(self, message: EntrySaved) -> None:
        if message.created:
            await self.wm.promote(message.window_id, message.entry_id, message.title)
        else:
            record = self.session.get(message.window_id)
            if record is not None and record.associated_entry_id == message.entry_id:
                await self.wm.update_title(message.window_id, message.title)
        await self.wm.entry_changed(message.entry_id)

    @on(EntryDeleted)
    async def entry_deleted(self, message: EntryDeleted) -> None:
        self.notify("Entry deleted.", title="Journal")
        await self.wm.entry_deleted(message.window_id)

    @on(WindowsChanged)
    def update_menu_bar(self, message: WindowsChanged) -> None:
        self.query_one(MenuBar).update_windows(message)

    # ─────────────────────────────────────────────────────────────────────────
    # Actions
    # ─────────────────────────────────────────────────────────────────────────

    async def action_dispatch(self, action: str) -> None:
        self.post_message(Dispatch(action))

    async def action_close_window(self) -> None:
        top = self.session.top()
        if top is None:
            print("close_window: no window to close.")
            return
        self.post_message(CloseWindow(top.id))

    async def action_cycle_focus(self, direction: int = 1) -> None:
        await self.wm.cycle_focus(int(direction))

    def action_account(self) -> None:
        user = self.backend.current_user
        if user is None:
            return

        def signed_out(result: bool | None) -> None:
            if result:
                self.call_next(self.action_sign_out)

        self.push_screen(AccountScreen(user, self.profile), signed_out)

    def action_admin(self) -> None:
        if not self.is_admin:
            self.notify("Admin access required.", title="Admin", severity="warning")
            return
        self.push_screen(AdminScreen())

    async def action_sign_out(self) -> None:
        for record in self.session.records:
            await self.wm.close(record.id)
        try:
            self.backend.sign_out()
        except BackendError as e:
            log.error(f"Sign out failed: {e}")
        self.profile = None
        self.push_screen(LoginScreen(), self._signed_in)


# ─────────────────────────────────────────────────────────────────────────────
#  Entry Point
# ─────────────────────────────────────────────────────────────────────────────
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="clearcache", description="A retro desktop journal for the terminal.")
    parser.add_argument("--backend", choices=BACKENDS, help="where entries are stored")
    parser.add_argument("--glyphs", choices=GLYPH_STYLES, dest="glyph_style", help="icon set")
    parser.add_argument("--data-dir", type=Path, help="directory for config.json and the icon layout")
    parser.add_argument("--console", action="store_true", default=None, dest="debug_console",
                        help="mirror print() output to the debug console server")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = load_settings(vars(args))
    except ConfigError as e:
        parser.exit(2, f"clearcache: {e}\n")
    glyphs.init(settings.glyph_style)
    console.configure(settings.console_host, settings.console_port, enabled=bool(settings.debug_console))
    backend = create_backend(settings)
    try:
        ClearCache(settings, backend).run()
    finally:
        backend.close()


if __name__ == "__main__":
    main()
