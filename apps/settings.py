from __future__ import annotations

from dataclasses import replace

from clearcache.backend.base import BackendError
from clearcache.backend.models import (PATTERNS, SOLID_COLORS, SOUND_LABELS,
                                       BackgroundPreference, Profile,
                                       SoundPreferences)
from clearcache.display.window import ContentRenderer, UIButton
from clearcache.model.windows import ContentKind
from textual import log, on, work
from textual.app import ComposeResult
from textual.color import Color, ColorParseError
from textual.containers import Horizontal, VerticalScroll
from textual.widgets import Button, Input, Label, OptionList, Switch
from textual.widgets.option_list import Option

VOLUME_STEP = 0.1


def background_options() -> list[Option | None]:
    options: list[Option | None] = [
        Option(f"Pattern: {label}", id=f"pattern:{key}") for key, label in PATTERNS.items()
    ]
    options.append(None)
    options.extend(Option(f"Colour: {label} ({value})", id=f"color:{value}") for value, label in SOLID_COLORS.items())
    return options


def preference_for(option_id: str) -> BackgroundPreference:
    kind, _, value = option_id.partition(":")
    return BackgroundPreference(type=kind, value=value)


def volume_bar(volume: float, width: int = 10) -> str:
    filled = round(volume * width)
    return f"[{'█' * filled}{'░' * (width - filled)}] {round(volume * 100)}%"


class Settings(ContentRenderer):
    """Sound and desktop background preferences."""
    KIND = ContentKind.SETTINGS

    DEFAULT_CSS = """
    Settings .section {
        text-style: bold;
        margin: 1 0 0 0;
    }
    Settings .row {
        height: 1;
    }
    Settings .row Label {
        width: 1fr;
    }
    Settings .row Switch {
        height: 1;
        border: none;
        padding: 0;
    }
    Settings .row UIButton {
        width: auto;
        min-width: 6;
        margin: 0 0 0 1;
    }
    Settings #volume-row {
        height: 1;
    }
    Settings #background-list {
        height: 8;
        border: none;
    }
    Settings #custom-row {
        height: 3;
    }
    Settings #custom-color {
        width: 1fr;
    }
    Settings #custom-row UIButton {
        width: auto;
        margin: 1 0 0 1;
    }
    """

    def __init__(self, record, **kwargs):
        super().__init__(record, **kwargs)
        self.sounds = SoundPreferences()
        self.wallpaper = BackgroundPreference()

    def compose(self) -> ComposeResult:
        profile: Profile | None = self.app.profile
        if profile is not None:
            self.sounds = profile.sound_preferences
            self.wallpaper = profile.background_preference
        with VerticalScroll():
            yield Label("Sound", classes="section")
            with Horizontal(id="volume-row"):
                yield Label("Master volume ", id="volume-title")
                yield UIButton("-", id="volume-down", compact=True)
                yield Label(volume_bar(self.sounds.master_volume), id="volume-level")
                yield UIButton("+", id="volume-up", compact=True)
            for key, label in SOUND_LABELS.items():
                with Horizontal(classes="row"):
                    yield Label(label)
                    yield Switch(self.sounds.sounds.get(key, True), name=key, classes="sound-switch")
                    yield UIButton("Test", name=key, classes="sound-test", compact=True)
            yield Label("Desktop background", classes="section")
            yield OptionList(*background_options(), id="background-list")
            with Horizontal(id="custom-row"):
                yield Input(placeholder="Custom colour, e.g. #336699", id="custom-color")
                yield UIButton("Apply", id="apply-color", compact=True)
            yield Label("", id="background-current")

    def on_mount(self) -> None:
        self._refresh_background()

    def on_unmount(self) -> None:
        self.app.background_previewed.publish(None)

    # ─────────────────────────────────────────────────────────────────────────
    # Sound
    # ─────────────────────────────────────────────────────────────────────────

    def _refresh_sounds(self) -> None:
        self.query_one("#volume-level", Label).update(volume_bar(self.sounds.master_volume))
        for switch in self.query(".sound-switch").results(Switch):
            with switch.prevent(Switch.Changed):
                switch.value = self.sounds.sounds.get(switch.name, True)

    @on(Button.Pressed, "#volume-down, #volume-up")
    def on_volume(self, event: Button.Pressed) -> None:
        event.stop()
        step = VOLUME_STEP if event.button.id == "volume-up" else -VOLUME_STEP
        volume = round(min(1.0, max(0.0, self.sounds.master_volume + step)), 2)
        self._set_sounds(replace(self.sounds, master_volume=volume))

    @on(Switch.Changed, ".sound-switch")
    def on_sound_toggle(self, event: Switch.Changed) -> None:
        event.stop()
        self._set_sounds(replace(self.sounds, sounds={**self.sounds.sounds, event.switch.name: event.value}))

    @on(Button.Pressed, ".sound-test")
    def on_sound_test(self, event: Button.Pressed) -> None:
        event.stop()
        sound = event.button.name
        if self.sounds.enabled(sound):
            self.app.bell()
        self.set_info(f"{SOUND_LABELS[sound]}: {'on' if self.sounds.enabled(sound) else 'muted'}")

    def _set_sounds(self, sounds: SoundPreferences) -> None:
        self.sounds = sounds
        self._refresh_sounds()
        self._save(sound_preferences=sounds)

    # ─────────────────────────────────────────────────────────────────────────
    # Background
    # ─────────────────────────────────────────────────────────────────────────

    def _refresh_background(self) -> None:
        current = self.wallpaper
        name = PATTERNS.get(current.value, current.value) if current.type == "pattern" else current.value
        self.query_one("#background-current", Label).update(f"Current: {current.type} {name}")

    @on(OptionList.OptionHighlighted, "#background-list")
    def on_preview(self, event: OptionList.OptionHighlighted) -> None:
        event.stop()
        if event.option.id:
            self.app.background_previewed.publish(preference_for(event.option.id))

    @on(OptionList.OptionSelected, "#background-list")
    def on_choose(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        if event.option.id:
            self._set_background(preference_for(event.option.id))

    @on(Button.Pressed, "#apply-color")
    @on(Input.Submitted, "#custom-color")
    def on_custom(self, event: Button.Pressed | Input.Submitted) -> None:
        event.stop()
        value = self.query_one("#custom-color", Input).value.strip()
        try:
            color = Color.parse(value)
        except ColorParseError:
            self.app.notify(f"{value!r} is not a colour.", title="Background", severity="warning")
            return
        self._set_background(BackgroundPreference(type="color", value=color.hex))

    def _set_background(self, preference: BackgroundPreference) -> None:
        self.wallpaper = preference
        self._refresh_background()
        self._save(background_preference=preference)

    # ─────────────────────────────────────────────────────────────────────────
    # Persist
    # ─────────────────────────────────────────────────────────────────────────

    @work(thread=True, group="settings")
    def _save(self, **fields) -> None:
        try:
            profile = self.backend.update_profile(**fields)
        except BackendError as e:
            self.app.call_from_thread(self.report_error, e, "Could not save settings")
            return
        log(f"Saved settings: {', '.join(fields)}")
        self.app.call_from_thread(self._saved, profile, set(fields))

    def _saved(self, profile: Profile, fields: set[str]) -> None:
        self.app.profile = profile
        if "background_preference" in fields:
            self.app.background_changed.publish(profile.background_preference)
        if "sound_preferences" in fields:
            self.app.sounds_changed.publish(profile.sound_preferences)
        self.set_info("Settings saved")
