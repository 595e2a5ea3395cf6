from __future__ import annotations

from dataclasses import replace

from clearcache.backend.base import BackendError
from clearcache.backend.models import (DENSITY_STEP, INTENSITY_LABELS,
                                       INTENSITY_MAP, MAX_CUSTOM_INTENSITY,
                                       MAX_DENSITY, MIN_DENSITY, Profile,
                                       ScanlinePreferences)
from clearcache.display.window import ContentRenderer, UIButton
from clearcache.model.windows import ContentKind
from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, VerticalScroll
from textual.widgets import Button, Label, RadioButton, RadioSet, Switch

CUSTOM_STEP = 0.01


def step_custom(value: float, step: float) -> float:
    return round(min(MAX_CUSTOM_INTENSITY, max(0.0, value + step)), 2)


def step_density(value: float, step: float) -> float:
    return min(MAX_DENSITY, max(MIN_DENSITY, value + step))


class ScanlineSettings(ContentRenderer):
    """CRT scanline overlay: on/off, strength and line density."""
    KIND = ContentKind.SCANLINE_SETTINGS

    DEFAULT_CSS = """
    ScanlineSettings .row {
        height: 1;
        margin: 1 0 0 0;
    }
    ScanlineSettings .row Label {
        width: 1fr;
    }
    ScanlineSettings .row Switch {
        height: 1;
        border: none;
        padding: 0;
    }
    ScanlineSettings .row UIButton {
        width: 3;
        min-width: 3;
    }
    ScanlineSettings RadioSet {
        border: none;
        width: 1fr;
    }
    ScanlineSettings.disabled-lines .tuning {
        opacity: 0.5;
    }
    """

    def __init__(self, record, **kwargs):
        super().__init__(record, **kwargs)
        self.prefs = ScanlinePreferences()

    def compose(self) -> ComposeResult:
        profile: Profile | None = self.app.profile
        if profile is not None:
            self.prefs = profile.scanline_preferences
        with VerticalScroll():
            with Horizontal(classes="row"):
                yield Label("Scanlines")
                yield Switch(self.prefs.enabled, id="scanlines-enabled")
            yield Label("Intensity", classes="tuning")
            with RadioSet(id="intensity", classes="tuning"):
                for key, label in INTENSITY_LABELS.items():
                    percent = "" if key == "custom" else f" ({round(INTENSITY_MAP[key] * 100)}%)"
                    yield RadioButton(f"{label}{percent}", value=key == self.prefs.intensity, name=key)
            with Horizontal(classes="row tuning"):
                yield Label("", id="custom-level")
                yield UIButton("-", id="custom-down", compact=True)
                yield UIButton("+", id="custom-up", compact=True)
            with Horizontal(classes="row tuning"):
                yield Label("", id="density-level")
                yield UIButton("-", id="density-down", compact=True)
                yield UIButton("+", id="density-up", compact=True)

    def on_mount(self) -> None:
        self._refresh()

    def _refresh(self) -> None:
        prefs = self.prefs
        self.set_class(not prefs.enabled, "disabled-lines")
        self.query_one("#custom-level", Label).update(f"Custom intensity {round(prefs.custom_intensity * 100)}%")
        self.query_one("#density-level", Label).update(f"Density {prefs.density:g}")
        self.set_info(f"Effective intensity {round(prefs.effective_intensity * 100)}%")

    def _apply(self, prefs: ScanlinePreferences) -> None:
        self.prefs = prefs
        self._refresh()
        self._save(prefs)

    @on(Switch.Changed, "#scanlines-enabled")
    def on_toggle(self, event: Switch.Changed) -> None:
        event.stop()
        self._apply(replace(self.prefs, enabled=event.value))

    @on(RadioSet.Changed, "#intensity")
    def on_intensity(self, event: RadioSet.Changed) -> None:
        event.stop()
        self._apply(replace(self.prefs, intensity=event.pressed.name))

    @on(Button.Pressed, "#custom-down, #custom-up")
    def on_custom(self, event: Button.Pressed) -> None:
        event.stop()
        step = CUSTOM_STEP if event.button.id == "custom-up" else -CUSTOM_STEP
        self._apply(replace(self.prefs, intensity="custom", custom_intensity=step_custom(self.prefs.custom_intensity, step)))
        for radio in self.query(RadioButton):
            if radio.name == "custom":
                radio.value = True

    @on(Button.Pressed, "#density-down, #density-up")
    def on_density(self, event: Button.Pressed) -> None:
        event.stop()
        step = DENSITY_STEP if event.button.id == "density-up" else -DENSITY_STEP
        self._apply(replace(self.prefs, density=step_density(self.prefs.density, step)))

    @work(thread=True, group="settings")
    def _save(self, prefs: ScanlinePreferences) -> None:
        try:
            profile = self.backend.update_profile(scanline_preferences=prefs)
        except BackendError as e:
            self.app.call_from_thread(self.report_error, e, "Could not save scanline settings")
            return
        self.app.call_from_thread(self._saved, profile)

    def _saved(self, profile: Profile) -> None:
        self.app.profile = profile
        self.app.scanlines_changed.publish(profile.scanline_preferences)
