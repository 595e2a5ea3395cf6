from __future__ import annotations

from datetime import datetime

import clearcache.display.glyphs as glyphs
from clearcache.core.events import WindowsChanged
from clearcache.display.flyout import Flyout
from clearcache.display.window import UIButton
from textual import log, on
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.events import Click
from textual.reactive import reactive
from textual.widget import Widget
from textual.widgets import Button, Label, OptionList
from textual.widgets.option_list import Option

# (label, textual action run on the app); None draws a separator
MenuItem = tuple[str, str] | None

MENUS: dict[str, list[MenuItem]] = {
    "apple": [
        ("About Clear Cache", "dispatch('welcome')"),
        None,
        ("Settings...", "dispatch('settings')"),
    ],
    "File": [
        ("New Entry        ^N", "dispatch('new-entry')"),
        ("Journal Folder   ^O", "dispatch('journal-folder')"),
        None,
        ("Close Window     ^W", "close_window"),
        ("Quit             ^Q", "quit"),
    ],
    "View": [
        ("Calendar", "dispatch('journal-calendar')"),
        ("Streaks", "dispatch('streaks')"),
        ("Welcome", "dispatch('welcome')"),
        None,
        ("Next Window   M-Tab", "cycle_focus(1)"),
    ],
    "Special": [
        ("Settings", "dispatch('settings')"),
        ("Scanlines", "dispatch('scanline-settings')"),
        None,
        ("Account", "account"),
        ("Admin", "admin"),
        ("Sign Out", "sign_out"),
    ],
}
ADMIN_ONLY = {"admin"}


class MenuFlyout(Flyout):
    """Drop-down list for one menu title."""

    def __init__(self, items: list[MenuItem], is_admin: bool = False, **kwargs) -> None:
        super().__init__(**kwargs)
        self.items = [item for item in items if item is None or is_admin or item[1] not in ADMIN_ONLY]

    def compose(self) -> ComposeResult:
        options = [None if item is None else Option(item[0], id=item[1]) for item in self.items]
        yield OptionList(*options)

    def on_mount(self) -> None:
        option_list = self.query_one(OptionList)
        option_list.highlighted = 0
        option_list.focus()

    def on_click(self, event: Click) -> None:
        event.stop()

    @on(OptionList.OptionSelected)
    async def on_option_selected(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        action = event.option.id
        await self.app.wm.close_active_flyout()
        if action:
            log(f"Menu selected {action}.")
            await self.app.run_action(action)


class MenuTitle(UIButton):
    """A menu name in the bar; pressing it toggles its flyout."""

    def __init__(self, menu: str, label: str):
        super().__init__(label, id=f"menu-{menu.lower()}", compact=True)
        self.menu = menu

    def on_mouse_down(self, event) -> None:
        event.stop()


class Clock(Widget):
    """A live digital clock widget for the menu bar."""
    time = reactive("")

    def on_mount(self) -> None:
        """Updates the time every second."""
        self.update_time()
        self.set_interval(1.0, self.update_time)

    def update_time(self) -> None:
        """Sets the time reactive property to the current time."""
        self.time = datetime.now().strftime("%a %I:%M %p")

    def render(self) -> str:
        text = f" {glyphs.menu['clock']} {self.time} "
        self.styles.width = len(text)
        return text


class MenuBar(Horizontal):
    """The fixed strip along the top of the screen."""

    DEFAULT_CSS = """
    MenuBar {
        position: absolute;
        layer: menu;
        width: 100%;
        height: 1;
        background: $panel;
    }
    MenuBar MenuTitle {
        width: auto;
        min-width: 4;
        padding: 0 1;
    }
    #menu-spacer {
        width: 1fr;
    }
    #focused-title {
        width: auto;
        color: $text-muted;
        padding: 0 2;
    }
    """
    focused_title = reactive("", init=False)

    def compose(self) -> ComposeResult:
        for menu in MENUS:
            label = glyphs.menu["apple"] if menu == "apple" else menu
            yield MenuTitle(menu, label)
        yield Label("", id="menu-spacer")
        yield Label("", id="focused-title")
        yield Clock()

    def on_mouse_down(self, event) -> None:
        event.stop()

    def watch_focused_title(self, title: str) -> None:
        self.query_one("#focused-title", Label).update(title)

    def update_windows(self, message: WindowsChanged) -> None:
        self.focused_title = message.records[-1].title if message.records else ""

    @on(Button.Pressed, "MenuTitle")
    def open_menu(self, event: Button.Pressed) -> None:
        event.stop()
        title: MenuTitle = event.button
        flyout = MenuFlyout(MENUS[title.menu], is_admin=self.app.is_admin, id=f"flyout-{title.menu.lower()}")
        flyout.styles.offset = (title.region.x, 1)
        self.app.call_next(self.app.wm.request_flyout, flyout)
