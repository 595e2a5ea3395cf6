from __future__ import annotations

from clearcache.core.events import CloseWindow
from clearcache.display.window import ContentRenderer, UIButton
from clearcache.model.windows import ContentKind
from textual import on
from textual.app import ComposeResult
from textual.containers import Center
from textual.widgets import Button, Static

LOGO = r"""
  ___ _                 ___         _
 / __| |___ __ _ _ _   / __|__ _ __| |_  ___
| (__| / -_) _` | '_| | (__/ _` / _| ' \/ -_)
 \___|_\___\__,_|_|    \___\__,_\__|_||_\___|
"""


class Welcome(ContentRenderer):
    KIND = ContentKind.WELCOME

    DEFAULT_CSS = """
    Welcome {
        align: center middle;
    }
    Welcome #logo {
        width: auto;
        text-style: bold;
        margin: 0 0 1 0;
    }
    Welcome #enter {
        width: 12;
    }
    """

    def compose(self) -> ComposeResult:
        with Center():
            yield Static(LOGO.strip("\n"), id="logo")
        with Center():
            yield UIButton("Enter", id="enter", variant="default")

    @on(Button.Pressed, "#enter")
    def on_enter(self, event: Button.Pressed) -> None:
        event.stop()
        self.post_message(CloseWindow(self.window_id))
