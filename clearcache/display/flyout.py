from textual.containers import Container
from textual.events import Key


class Flyout(Container):
    """A temporary popup anchored under a menu title; escape dismisses it."""

    DEFAULT_CSS = """
    Flyout {
        position: absolute;
        layer: flyout;
        width: auto;
        height: auto;
        background: $panel;
        border: round $panel-lighten-2;
    }
    """

    def on_key(self, event: Key) -> None:
        if event.key == "escape":
            self.app.call_next(self.app.wm.close_active_flyout)
            event.stop()
