import json
from pathlib import Path

import pytest
from clearcache.core.config import ConfigError, deep_merge, load_settings


@pytest.fixture
def data_dir(tmp_path) -> Path:
    return tmp_path


def write_config(data_dir: Path, data) -> None:
    (data_dir / "config.json").write_text(json.dumps(data))


def test_defaults(data_dir):
    settings = load_settings({"data_dir": data_dir}, environ={})
    assert settings.backend == "memory"
    assert settings.glyph_style == "compatible"
    assert settings.layout_file == data_dir / "desktop-icons.json"


def test_file_then_env_then_cli(data_dir):
    write_config(data_dir, {"grid_unit": 4, "glyph_style": "standard", "cascade_step": 3})
    settings = load_settings(
        {"data_dir": data_dir, "glyph_style": "nerdfont", "backend": None},
        environ={"CLEARCACHE_GRID_UNIT": "6", "CLEARCACHE_GLYPH_STYLE": "compatible"},
    )
    assert settings.grid_unit == 6
    assert settings.glyph_style == "nerdfont"
    assert settings.cascade_step == 3
    assert settings.backend == "memory"


def test_env_booleans(data_dir):
    settings = load_settings({"data_dir": data_dir}, environ={"CLEARCACHE_SHOW_WELCOME": "no"})
    assert settings.show_welcome is False


def test_data_dir_from_env(tmp_path):
    settings = load_settings(environ={"CLEARCACHE_DATA_DIR": str(tmp_path)})
    assert settings.data_dir == tmp_path


def test_supabase_variables(data_dir):
    settings = load_settings(
        {"data_dir": data_dir, "backend": "rest"},
        environ={"SUPABASE_URL": "https://x.supabase.co", "SUPABASE_ANON_KEY": "anon"},
    )
    assert settings.supabase_url == "https://x.supabase.co"
    assert settings.supabase_key == "anon"


def test_corrupt_config_file_is_ignored(data_dir):
    (data_dir / "config.json").write_text("{oops")
    assert load_settings({"data_dir": data_dir}, environ={}).grid_unit == 2


def test_unknown_keys_are_ignored(data_dir):
    write_config(data_dir, {"wallpaper": "cats"})
    settings = load_settings({"data_dir": data_dir}, environ={})
    assert not hasattr(settings, "wallpaper")


@pytest.mark.parametrize("overrides, message", [
    ({"backend": "sqlite"}, "Unknown backend"),
    ({"backend": "rest"}, "supabase_url"),
    ({"glyph_style": "emoji"}, "glyph style"),
    ({"grid_unit": 0}, "grid_unit"),
    ({"grid_unit": "wide"}, "integer"),
    ({"grid_unit": float("inf")}, "integer"),
])
def test_invalid_settings(data_dir, overrides, message):
    with pytest.raises(ConfigError, match=message):
        load_settings({"data_dir": data_dir, **overrides}, environ={})


def test_deep_merge_merges_nested_objects():
    merged = deep_merge({"a": {"b": 1, "c": 2}, "d": 1}, {"a": {"c": 3}, "e": 4})
    assert merged == {"a": {"b": 1, "c": 3}, "d": 1, "e": 4}
