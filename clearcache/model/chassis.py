"""Geometry state machine behind a window frame: drag, resize, maximize."""
from __future__ import annotations

from enum import Enum

from clearcache.model.windows import Geometry, Viewport, clamp_position


class Gesture(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    RESIZING = "resizing"


class Chassis:
    """
    Owns the live geometry of one window.

    Pointer coordinates are absolute (screen) coordinates; every move is
    computed from the position where the gesture began, so a lost or
    coalesced move event never accumulates error.
    """
    def __init__(
        self,
        geometry: Geometry,
        viewport: Viewport,
        min_width: int = 300,
        min_height: int = 200,
    ) -> None:
        self.viewport = viewport
        self.min_width = min_width
        self.min_height = min_height
        self.geometry = geometry.resized_to(
            max(min_width, geometry.width), max(min_height, geometry.height)
        )
        self.gesture = Gesture.IDLE
        self.maximized = False
        self._restore: Geometry | None = None
        self._pointer_origin: tuple[int, int] = (0, 0)
        self._geometry_origin: Geometry = self.geometry

    @property
    def busy(self) -> bool:
        return self.gesture is not Gesture.IDLE

    # ┌───────────────────────────────────────────────────────────────────────┐
    # │ Pointer gestures                                                      │
    # └───────────────────────────────────────────────────────────────────────┘

    def begin_drag(self, pointer_x: int, pointer_y: int) -> bool:
        return self._begin(Gesture.DRAGGING, pointer_x, pointer_y)

    def begin_resize(self, pointer_x: int, pointer_y: int) -> bool:
        return self._begin(Gesture.RESIZING, pointer_x, pointer_y)

    def _begin(self, gesture: Gesture, pointer_x: int, pointer_y: int) -> bool:
        if self.maximized or self.busy:
            return False
        self.gesture = gesture
        self._pointer_origin = (pointer_x, pointer_y)
        self._geometry_origin = self.geometry
        return True

    def pointer_move(self, pointer_x: int, pointer_y: int) -> Geometry:
        dx = pointer_x - self._pointer_origin[0]
        dy = pointer_y - self._pointer_origin[1]
        origin = self._geometry_origin
        if self.gesture is Gesture.DRAGGING:
            x, y = clamp_position(origin, origin.x + dx, origin.y + dy, self.viewport)
            self.geometry = origin.moved_to(x, y)
        elif self.gesture is Gesture.RESIZING:
            self.geometry = origin.resized_to(
                max(self.min_width, origin.width + dx),
                max(self.min_height, origin.height + dy),
            )
        return self.geometry

    def pointer_up(self) -> Geometry:
        self.gesture = Gesture.IDLE
        return self.geometry

    def cancel(self) -> None:
        """Ends any gesture in progress, e.g. when the window closes mid-drag."""
        self.gesture = Gesture.IDLE

    # ┌───────────────────────────────────────────────────────────────────────┐
    # │ Keyboard moves                                                        │
    # └───────────────────────────────────────────────────────────────────────┘

    def move_by(self, dx: int, dy: int) -> Geometry:
        if self.maximized or self.busy:
            return self.geometry
        g = self.geometry
        x, y = clamp_position(g, g.x + dx, g.y + dy, self.viewport)
        self.geometry = g.moved_to(x, y)
        return self.geometry

    def resize_by(self, dw: int, dh: int) -> Geometry:
        if self.maximized or self.busy:
            return self.geometry
        g = self.geometry
        self.geometry = g.resized_to(
            max(self.min_width, g.width + dw), max(self.min_height, g.height + dh)
        )
        return self.geometry

    # ┌───────────────────────────────────────────────────────────────────────┐
    # │ Maximize / viewport                                                   │
    # └───────────────────────────────────────────────────────────────────────┘

    def toggle_maximize(self) -> Geometry:
        if self.maximized:
            self.geometry = self._restore or self.geometry
            self._restore = None
            self.maximized = False
        else:
            self.cancel()
            self._restore = self.geometry
            self.geometry = self.viewport.maximized()
            self.maximized = True
        return self.geometry

    def set_viewport(self, viewport: Viewport) -> Geometry:
        self.viewport = viewport
        if self.maximized:
            self.geometry = viewport.maximized()
        return self.geometry
