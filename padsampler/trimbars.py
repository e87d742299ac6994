"""
Trim bars - two draggable markers over a waveform, in pixel space.

The bars know nothing about pads. ``pixel_to_seconds`` and
``seconds_to_pixel`` are the only bridge to a pad's trim points, and both
must be given the width the bars were laid out against.
"""

from __future__ import annotations

import math
from typing import Optional

from . import settings


def pixel_to_seconds(x: float, duration: float, width: float) -> float:
    if width <= 0:
        return 0.0
    return (x / width) * duration


def seconds_to_pixel(t: float, duration: float, width: float) -> float:
    if duration <= 0:
        return 0.0
    return (t / duration) * width


class TrimBar:
    __slots__ = ("x", "selected", "dragged")

    def __init__(self, x: float):
        self.x = float(x)
        self.selected = False
        self.dragged = False

    def __repr__(self) -> str:
        return f"TrimBar(x={self.x:.1f}, selected={self.selected}, dragged={self.dragged})"


class TrimBars:
    """
    Left/right bar pair with hit-testing and drag rules.

    Usage (pointer events):
        bars = TrimBars(width=900, height=200)
        bars.hit_test(x, y)   # on press
        bars.start_drag()
        bars.move_to(x, y)    # on motion
        bars.stop_drag()      # on release
    """

    def __init__(self, width: float, height: float, left_x: float = 0.0,
                 right_x: Optional[float] = None, radius: float = settings.HIT_RADIUS,
                 handle_y: float = settings.HANDLE_Y):
        self.width = float(width)
        self.height = float(height)
        self.radius = radius
        self.handle_y = handle_y
        self.left = TrimBar(left_x)
        self.right = TrimBar(self.width if right_x is None else right_x)

    @property
    def dragging(self) -> bool:
        return self.left.dragged or self.right.dragged

    def selected_bar(self) -> Optional[str]:
        if self.left.selected:
            return "left"
        if self.right.selected:
            return "right"
        return None

    def _close(self, bar: TrimBar, x: float, y: float) -> bool:
        return math.hypot(x - bar.x, y - self.handle_y) < self.radius

    def hit_test(self, x: float, y: float) -> Optional[str]:
        """Select at most one bar near the pointer and return its side."""
        near_left = self._close(self.left, x, y)
        near_right = self._close(self.right, x, y)
        if near_left and near_right:
            # both in reach (bars close together): keep whichever was already selected
            pick_left = not self.right.selected
        else:
            pick_left = near_left
        self.left.selected = near_left and pick_left
        self.right.selected = near_right and not pick_left
        return self.selected_bar()

    def start_drag(self) -> None:
        if self.left.selected:
            self.left.dragged = True
        elif self.right.selected:
            self.right.dragged = True

    def move_to(self, x: float, y: float) -> None:
        self.hit_test(x, y)
        clamped = max(0.0, min(float(x), self.width))
        # a move that would cross the other bar is dropped, not clamped
        if self.left.dragged:
            if clamped < self.right.x:
                self.left.x = clamped
        if self.right.dragged:
            if clamped > self.left.x:
                self.right.x = clamped

    def stop_drag(self) -> None:
        if self.left.dragged:
            self.left.dragged = False
            self.left.selected = False
            if self.left.x > self.right.x:
                self.left.x = self.right.x
        if self.right.dragged:
            self.right.dragged = False
            self.right.selected = False
            if self.right.x < self.left.x:
                self.right.x = self.left.x

    def set_positions(self, left_x: float, right_x: float) -> None:
        left_x = max(0.0, min(float(left_x), self.width))
        right_x = max(left_x, min(float(right_x), self.width))
        self.left.x = left_x
        self.right.x = right_x

    def resize(self, width: float, height: float) -> None:
        self.width = float(width)
        self.height = float(height)
        self.set_positions(self.left.x, self.right.x)

    def to_seconds(self, duration: float) -> tuple:
        return (pixel_to_seconds(self.left.x, duration, self.width),
                pixel_to_seconds(self.right.x, duration, self.width))

    def from_seconds(self, start: float, end: float, duration: float) -> None:
        self.set_positions(seconds_to_pixel(start, duration, self.width),
                           seconds_to_pixel(end, duration, self.width))

    # -----------------------------
    # Drawing
    # -----------------------------
    def clear(self, canvas, tag: str = "trim") -> None:
        canvas.delete(tag)

    def draw(self, canvas, tag: str = "trim") -> None:
        w, h = self.width, self.height
        lx, rx = self.left.x, self.right.x
        hw, hh = settings.HANDLE_W, settings.HANDLE_H

        # shade the trimmed-away regions
        canvas.create_rectangle(0, 0, lx, h, fill="black", stipple=settings.COL_SHADE,
                                outline="", tags=tag)
        canvas.create_rectangle(rx, 0, w, h, fill="black", stipple=settings.COL_SHADE,
                                outline="", tags=tag)

        for bar, x, dx in ((self.left, lx, hw), (self.right, rx, -hw)):
            color = settings.COL_BAR_SELECTED if bar.selected else settings.COL_BAR
            canvas.create_line(x, 0, x, h, fill=color, width=3, tags=tag)
            canvas.create_polygon(x, 0, x + dx, hh / 2, x, hh, fill=color, outline="", tags=tag)
