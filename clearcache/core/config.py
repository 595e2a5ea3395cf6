"""
Runtime settings.

Resolution order, later wins: built-in defaults, `<data_dir>/config.json`,
CLEARCACHE_* environment variables, command line flags.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from clearcache.core.storage import read_json
from textual import log

BACKENDS = ("memory", "rest")
GLYPH_STYLES = ("compatible", "standard", "nerdfont")
CONFIG_FILE = "config.json"
LAYOUT_FILE = "desktop-icons.json"


class ConfigError(ValueError):
    """Raised when settings cannot describe a runnable session."""


def default_data_dir() -> Path:
    return Path(os.environ.get("CLEARCACHE_HOME", "~/.clearcache")).expanduser()


@dataclass
class Settings:
    data_dir: Path
    backend: str = "memory"
    supabase_url: str | None = None
    supabase_key: str | None = None
    glyph_style: str = "compatible"
    grid_unit: int = 2
    menu_bar_height: int = 1
    cascade_step: int = 2
    min_window_width: int = 30
    min_window_height: int = 8
    icon_width: int = 14
    icon_height: int = 4
    icon_spacing: int = 5
    icon_origin_x: int = 2
    icon_origin_y: int = 2
    drag_threshold: int = 1
    show_welcome: bool = True
    debug_console: bool = False
    console_host: str = "127.0.0.1"
    console_port: int = 50505

    @property
    def layout_file(self) -> Path:
        return self.data_dir / LAYOUT_FILE

    @property
    def config_file(self) -> Path:
        return self.data_dir / CONFIG_FILE

    def validate(self) -> Settings:
        if self.backend not in BACKENDS:
            raise ConfigError(f"Unknown backend {self.backend!r}; expected one of {', '.join(BACKENDS)}.")
        if self.backend == "rest" and not (self.supabase_url and self.supabase_key):
            raise ConfigError("The rest backend needs supabase_url and supabase_key.")
        if self.glyph_style not in GLYPH_STYLES:
            raise ConfigError(f"Unknown glyph style {self.glyph_style!r}.")
        for name in ("grid_unit", "min_window_width", "min_window_height", "icon_width", "icon_height"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive.")
        return self


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _coerce(name: str, raw: Any) -> Any:
    kind = {f.name: f.type for f in fields(Settings)}[name]
    if raw is None:
        return None
    if kind == "Path":
        return Path(raw).expanduser()
    if kind == "bool":
        if isinstance(raw, str):
            return raw.strip().lower() in ("1", "true", "yes", "on")
        return bool(raw)
    if kind == "int":
        try:
            return int(raw)
        except (TypeError, ValueError, OverflowError):
            raise ConfigError(f"{name} must be an integer, got {raw!r}.") from None
    return str(raw)


def _from_file(path: Path) -> dict[str, Any]:
    try:
        data = read_json(path)
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as e:
        log.warning(f"Ignoring unreadable config {path}: {e}")
        return {}
    if not isinstance(data, dict):
        log.warning(f"Ignoring config {path}: top level must be an object.")
        return {}
    return data


def _from_env(environ: dict[str, str]) -> dict[str, Any]:
    values = {}
    for f in fields(Settings):
        key = f"CLEARCACHE_{f.name.upper()}"
        if key in environ:
            values[f.name] = environ[key]
    # the hosted project's own variable names
    for name, key in (("supabase_url", "SUPABASE_URL"), ("supabase_key", "SUPABASE_ANON_KEY")):
        if key in environ and name not in values:
            values[name] = environ[key]
    return values


def load_settings(
    overrides: dict[str, Any] | None = None,
    environ: dict[str, str] | None = None,
) -> Settings:
    """Builds validated Settings. `overrides` are CLI values; None entries are ignored."""
    environ = dict(os.environ) if environ is None else environ
    cli = {k: v for k, v in (overrides or {}).items() if v is not None}
    env = _from_env(environ)

    data_dir = Path(cli.get("data_dir") or env.get("data_dir") or default_data_dir()).expanduser()
    known = {f.name for f in fields(Settings)}

    merged: dict[str, Any] = {}
    for layer in (_from_file(data_dir / CONFIG_FILE), env, cli):
        unknown = set(layer) - known
        if unknown:
            log.warning(f"Ignoring unknown settings: {', '.join(sorted(unknown))}")
        merged = deep_merge(merged, {k: v for k, v in layer.items() if k in known})

    merged["data_dir"] = data_dir
    settings = Settings(**{name: _coerce(name, value) for name, value in merged.items()})
    return settings.validate()
