import json

import pytest
from clearcache.model.icons import (DEFAULT_ICONS, LAYOUT_VERSION,
                                    DesktopLayout, LayoutStore, snap,
                                    snap_within)
from clearcache.model.windows import Viewport


@pytest.fixture
def store(tmp_path) -> LayoutStore:
    return LayoutStore(tmp_path / "desktop-icons.json")


@pytest.fixture
def layout(store, viewport) -> DesktopLayout:
    layout = DesktopLayout(store, viewport)
    layout.load()
    return layout


@pytest.mark.parametrize("value, expected", [
    (57, 60), (51, 60), (49, 40), (50, 60), (-9, 0), (-11, -20), (0, 0),
])
def test_snap_rounds_to_the_nearest_multiple(value, expected):
    assert snap(value, 20) == expected


def test_snap_within_steps_back_inside_the_range():
    assert snap_within(1216, 0, 1216, 20) == 1200
    assert snap_within(24, 24, 720, 20) == 40


def test_defaults_without_a_saved_file(layout):
    assert [icon.id for icon in layout.icons] == [preset.id for preset in DEFAULT_ICONS]
    assert [(i.x, i.y) for i in layout.icons] == [(20, 60), (20, 150), (20, 240), (20, 330)]


def test_drag_snaps_to_the_grid(layout):
    icon = layout.complete_drag("journal-folder", 37, -9)
    assert (icon.x, icon.y) == (60, 60)


def test_drag_is_clamped_then_snapped(layout):
    icon = layout.complete_drag("journal-folder", 5000, 5000)
    assert icon.x == 1200
    assert icon.y == 720
    assert icon.x % 20 == 0 and icon.y % 20 == 0
    assert icon.x + layout.icon_width <= 1280
    assert icon.y + layout.icon_height <= 800


def test_drag_cannot_enter_the_menu_bar(layout):
    icon = layout.complete_drag("journal-folder", 0, -500)
    assert icon.y == 40


def test_drag_persists_every_position(layout, store):
    layout.complete_drag("streaks", 100, 0)
    data = json.loads(store.path.read_text())
    assert data["version"] == LAYOUT_VERSION
    assert data["positions"]["streaks"] == {"x": 120, "y": 340}
    assert set(data["positions"]) == {preset.id for preset in DEFAULT_ICONS}


def test_saved_positions_are_restored(store, viewport):
    store.write({"calendar": (400, 200)})
    layout = DesktopLayout(store, viewport)
    layout.load()
    assert (layout.get("calendar").x, layout.get("calendar").y) == (400, 200)
    assert (layout.get("streaks").x, layout.get("streaks").y) == (20, 330)


def test_legacy_unversioned_map_is_migrated(store, viewport):
    store.path.write_text(json.dumps({"new-entry": {"x": 300, "y": 100}}))
    layout = DesktopLayout(store, viewport)
    layout.load()
    assert (layout.get("new-entry").x, layout.get("new-entry").y) == (300, 100)


@pytest.mark.parametrize("content", [
    "not json",
    "[1, 2, 3]",
    json.dumps({"version": 99, "positions": {"streaks": {"x": 1, "y": 1}}}),
    json.dumps({"version": 1, "positions": "nope"}),
])
def test_bad_layout_files_fall_back_to_defaults(store, viewport, content):
    store.path.write_text(content)
    layout = DesktopLayout(store, viewport)
    layout.load()
    assert (layout.get("streaks").x, layout.get("streaks").y) == (20, 330)


@pytest.mark.parametrize("streaks", [
    '{"x": "a"}',
    '{"y": 5}',
    '[1, 2]',
    '{"x": 1e400, "y": 5}',
    '{"x": 5, "y": -1e400}',
])
def test_malformed_entries_are_skipped(store, streaks):
    store.path.write_text('{"version": 1, "positions": {"streaks": ' + streaks + ', "calendar": {"x": 40, "y": 80}}}')
    assert store.read() == {"calendar": (40, 80)}


def test_overflowing_coordinates_fall_back_to_defaults(store, viewport):
    store.path.write_text('{"version": 1, "positions": {"streaks": {"x": 1e400, "y": 5}}}')
    layout = DesktopLayout(store, viewport)
    icons = {icon.id: (icon.x, icon.y) for icon in layout.load()}
    assert icons["streaks"] == (20, 330)


def test_unknown_icon_drag_is_ignored(layout, store):
    assert layout.complete_drag("trash", 10, 10) is None
    assert not store.path.exists()


def test_write_failure_keeps_the_new_position(tmp_path, viewport):
    blocker = tmp_path / "file"
    blocker.write_text("")
    layout = DesktopLayout(LayoutStore(blocker / "desktop-icons.json"), viewport)
    layout.load()
    icon = layout.complete_drag("streaks", 40, 0)
    assert icon.x == 60


def test_terminal_cell_grid(store):
    layout = DesktopLayout(store, Viewport(120, 40, 1), grid_unit=2, icon_size=(14, 4), origin=(2, 3), spacing=5)
    layout.load()
    icon = layout.complete_drag("new-entry", 7, 3)
    assert (icon.x, icon.y) == (10, 12)
