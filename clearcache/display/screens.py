"""Full-screen pages that sit outside the desktop: login, account and admin."""
from __future__ import annotations

from clearcache.backend.base import BackendError
from clearcache.backend.models import FeatureFlag, Profile, User
from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen, Screen
from textual.widgets import (Button, DataTable, Input, Label, Static, Switch)


class LoginScreen(Screen[User]):
    """Email one-time-code sign in. Dismisses with the signed-in user."""

    DEFAULT_CSS = """
    LoginScreen {
        align: center middle;
    }
    #login-box {
        width: 50;
        height: auto;
        border: round $accent;
        padding: 1 2;
    }
    #login-box Input, #login-box Button {
        margin: 1 0 0 0;
        width: 100%;
    }
    #code-step {
        height: auto;
        display: none;
    }
    LoginScreen.code-sent #code-step {
        display: block;
    }
    """

    def compose(self) -> ComposeResult:
        with Vertical(id="login-box"):
            yield Static("[b]Clear Cache[/b]\nSign in with your email to continue.")
            yield Input(placeholder="you@example.com", id="email")
            yield Button("Send code", id="send-code", variant="primary")
            with Vertical(id="code-step"):
                yield Label("Enter the code from your inbox:")
                yield Input(placeholder="123456", id="code")
                yield Button("Sign in", id="verify", variant="success")
            yield Label("", id="login-status")

    def _status(self, text: str) -> None:
        self.query_one("#login-status", Label).update(text)

    @on(Button.Pressed, "#send-code")
    @on(Input.Submitted, "#email")
    def send_code(self) -> None:
        email = self.query_one("#email", Input).value.strip()
        if not email:
            self._status("Please enter your email.")
            return
        self._status("Sending...")
        self._request_code(email)

    @work(thread=True, exclusive=True)
    def _request_code(self, email: str) -> None:
        try:
            self.app.backend.request_login(email)
        except BackendError as e:
            self.app.call_from_thread(self._status, f"Could not send code: {e}")
            return
        self.app.call_from_thread(self._code_sent)

    def _code_sent(self) -> None:
        self.add_class("code-sent")
        self._status("Check your email for the code.")
        self.query_one("#code", Input).focus()

    @on(Button.Pressed, "#verify")
    @on(Input.Submitted, "#code")
    def verify(self) -> None:
        email = self.query_one("#email", Input).value.strip()
        code = self.query_one("#code", Input).value.strip()
        if code:
            self._verify(email, code)

    @work(thread=True, exclusive=True)
    def _verify(self, email: str, code: str) -> None:
        try:
            user = self.app.backend.verify_login(email, code)
        except BackendError as e:
            self.app.call_from_thread(self._status, str(e))
            return
        self.app.call_from_thread(self.dismiss, user)


class AccountScreen(ModalScreen[bool]):
    """Shows who is signed in. Dismisses True when the user signs out."""

    DEFAULT_CSS = """
    AccountScreen {
        align: center middle;
    }
    #account-box {
        width: 60;
        height: auto;
        border: round $accent;
        padding: 1 2;
    }
    #account-buttons {
        height: auto;
        margin: 1 0 0 0;
    }
    """
    BINDINGS = [("escape", "dismiss(False)", "Close")]

    def __init__(self, user: User, profile: Profile | None) -> None:
        super().__init__()
        self.user = user
        self.profile = profile

    def compose(self) -> ComposeResult:
        role = self.profile.role if self.profile else "user"
        with Vertical(id="account-box"):
            yield Static("[b]Account[/b]")
            yield Label(f"Email: {self.user.email or '-'}")
            yield Label(f"Role:  {role}")
            yield Label(f"ID:    {self.user.id}")
            with Horizontal(id="account-buttons"):
                yield Button("Sign out", id="sign-out", variant="error")
                yield Button("Close", id="close")

    @on(Button.Pressed, "#sign-out")
    def sign_out(self) -> None:
        self.dismiss(True)

    @on(Button.Pressed, "#close")
    def close(self) -> None:
        self.dismiss(False)


class AdminScreen(ModalScreen[None]):
    """Feature flag switches and the user list; only reachable by admins."""

    DEFAULT_CSS = """
    AdminScreen {
        align: center middle;
    }
    #admin-box {
        width: 90%;
        height: 90%;
        border: round $accent;
        padding: 0 1;
    }
    .flag-row {
        height: 3;
    }
    .flag-row Label {
        width: 1fr;
        padding: 1 0 0 1;
    }
    #profiles {
        height: 1fr;
    }
    """
    BINDINGS = [("escape", "dismiss", "Close")]

    def __init__(self) -> None:
        super().__init__()
        self.profiles: list[Profile] = []

    def compose(self) -> ComposeResult:
        with Vertical(id="admin-box"):
            yield Static("[b]Admin Panel[/b]  (esc to close)")
            yield Static("Feature Flags", classes="section")
            yield VerticalScroll(id="flags")
            yield Static("Users", classes="section")
            yield Input(placeholder="Search by email or id...", id="profile-search")
            yield DataTable(id="profiles", cursor_type="row")

    def on_mount(self) -> None:
        self.query_one("#profiles", DataTable).add_columns("Email", "Role", "Joined", "User ID")
        self._load()

    @work(thread=True, exclusive=True)
    def _load(self) -> None:
        backend = self.app.backend
        try:
            flags = backend.list_feature_flags()
            profiles = backend.list_profiles()
        except BackendError as e:
            self.app.call_from_thread(self.app.notify, str(e), title="Admin", severity="error")
            return
        self.app.call_from_thread(self._show, flags, profiles)

    async def _show(self, flags: list[FeatureFlag], profiles: list[Profile]) -> None:
        container = self.query_one("#flags", VerticalScroll)
        await container.remove_children()
        for flag in flags:
            await container.mount(Horizontal(
                Label(f"{flag.key}  [dim]{flag.notes or ''}[/dim]"),
                Switch(flag.enabled, id=f"flag-{flag.key}", name=flag.key),
                classes="flag-row",
            ))
        self.profiles = profiles
        self._fill_profiles()

    def _fill_profiles(self, query: str = "") -> None:
        table = self.query_one("#profiles", DataTable)
        table.clear()
        query = query.strip().lower()
        for profile in self.profiles:
            if query and query not in (profile.email or "").lower() and query not in profile.user_id.lower():
                continue
            table.add_row(profile.email or "-", profile.role, f"{profile.created_at:%Y-%m-%d}", profile.user_id)

    @on(Input.Changed, "#profile-search")
    def search(self, event: Input.Changed) -> None:
        self._fill_profiles(event.value)

    @on(Switch.Changed)
    def toggle_flag(self, event: Switch.Changed) -> None:
        self._set_flag(event.switch.name, event.value)

    @work(thread=True)
    def _set_flag(self, key: str, enabled: bool) -> None:
        try:
            self.app.backend.set_feature_flag(key, enabled)
        except BackendError as e:
            self.app.call_from_thread(self.app.notify, str(e), title="Feature flag", severity="error")
            return
        self.app.call_from_thread(self.app.notify, f"{key} {'enabled' if enabled else 'disabled'}", title="Feature flag")
