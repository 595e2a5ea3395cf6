import pytest
from clearcache.model.chassis import Chassis, Gesture
from clearcache.model.windows import Geometry, Viewport, clamp


@pytest.fixture
def chassis(viewport) -> Chassis:
    return Chassis(Geometry(100, 100, 800, 600), viewport)


def test_clamp_prefers_the_lower_bound():
    assert clamp(5, 0, 10) == 5
    assert clamp(-3, 0, 10) == 0
    assert clamp(30, 0, 10) == 10
    assert clamp(5, 8, 2) == 8


def test_maximize_fills_the_area_below_the_menu_bar(chassis):
    assert chassis.toggle_maximize().as_tuple() == (0, 24, 1280, 776)
    assert chassis.maximized


def test_restore_returns_the_exact_geometry(chassis):
    chassis.toggle_maximize()
    assert chassis.toggle_maximize().as_tuple() == (100, 100, 800, 600)
    assert not chassis.maximized


def test_drag_moves_by_the_pointer_delta(chassis):
    assert chassis.begin_drag(150, 101)
    chassis.pointer_move(170, 131)
    assert chassis.pointer_up().as_tuple() == (120, 130, 800, 600)
    assert chassis.gesture is Gesture.IDLE


def test_drag_is_computed_from_the_gesture_start(chassis):
    chassis.begin_drag(150, 101)
    for x in range(150, 200, 7):
        chassis.pointer_move(x, 101)
    chassis.pointer_move(160, 111)
    assert chassis.geometry.as_tuple() == (110, 110, 800, 600)


@pytest.mark.parametrize("dx, dy, expected", [
    (-500, 0, (0, 100)),
    (0, -500, (100, 24)),
    (5000, 0, (480, 100)),
    (0, 5000, (100, 200)),
])
def test_drag_is_clamped_to_the_viewport(chassis, dx, dy, expected):
    chassis.begin_drag(0, 0)
    chassis.pointer_move(dx, dy)
    assert (chassis.geometry.x, chassis.geometry.y) == expected


def test_resize_respects_the_minimum(chassis):
    chassis.begin_resize(900, 700)
    chassis.pointer_move(0, 0)
    assert (chassis.geometry.width, chassis.geometry.height) == (300, 200)
    chassis.pointer_move(1000, 720)
    assert (chassis.geometry.width, chassis.geometry.height) == (900, 620)


def test_initial_geometry_is_grown_to_the_minimum(viewport):
    chassis = Chassis(Geometry(0, 30, 10, 10), viewport, min_width=30, min_height=8)
    assert (chassis.geometry.width, chassis.geometry.height) == (30, 10)


def test_no_gesture_while_maximized(chassis):
    chassis.toggle_maximize()
    assert not chassis.begin_drag(10, 10)
    assert not chassis.begin_resize(10, 10)
    assert chassis.move_by(5, 5).as_tuple() == (0, 24, 1280, 776)


def test_only_one_gesture_at_a_time(chassis):
    assert chassis.begin_drag(0, 0)
    assert not chassis.begin_resize(0, 0)
    assert chassis.busy


def test_cancel_ends_the_gesture(chassis):
    chassis.begin_drag(0, 0)
    chassis.pointer_move(10, 10)
    chassis.cancel()
    assert not chassis.busy
    assert chassis.geometry.as_tuple() == (110, 110, 800, 600)


def test_maximize_cancels_a_drag(chassis):
    chassis.begin_drag(0, 0)
    chassis.toggle_maximize()
    assert not chassis.busy


def test_keyboard_move_and_resize(chassis):
    assert chassis.move_by(-2, 3).as_tuple() == (98, 103, 800, 600)
    assert chassis.resize_by(10, -1000).as_tuple() == (98, 103, 810, 200)


def test_viewport_change_keeps_a_maximized_window_filling_it(chassis):
    chassis.toggle_maximize()
    chassis.set_viewport(Viewport(1024, 768, 24))
    assert chassis.geometry.as_tuple() == (0, 24, 1024, 744)
    assert chassis.toggle_maximize().as_tuple() == (100, 100, 800, 600)
