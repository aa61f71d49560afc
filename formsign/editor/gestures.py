"""Drag and resize gestures over a placed field.

A gesture is opened by the builder at pointer-down, receives every
pointer-move as an absolute on-screen position, and must be ended on
pointer-up or when the surface goes away. Gestures are context managers so
scoped use releases them on every exit path.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable

from formsign import config
from formsign.model.field import FormField
from formsign.model.geometry import (
    Point,
    Rect,
    canonical_pixel_size,
    clamp_rect_to_page,
    from_display_delta,
)
from formsign.model.page import Page


class Corner(str, Enum):
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"


class FieldGesture:
    def __init__(
        self,
        page: Page,
        field: FormField,
        start: Point,
        scale: float,
        on_release: Callable[[FieldGesture], None] | None = None,
    ) -> None:
        self.page = page
        self.field = field
        self._start = start
        self._scale = scale
        # Fields set off the page through update_field start from their clamped position.
        self._origin = clamp_rect_to_page(field.rect, page.format)
        self._on_release = on_release
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def move(self, pointer: Point) -> Rect | None:
        if not self._active:
            return None
        delta = from_display_delta(
            Point(pointer.x - self._start.x, pointer.y - self._start.y), self._scale
        )
        rect = self._apply(delta)
        self.field.set_rect(rect)
        return rect

    def end(self) -> None:
        if not self._active:
            return
        self._active = False
        if self._on_release is not None:
            self._on_release(self)

    def __enter__(self) -> FieldGesture:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.end()

    def _apply(self, delta: Point) -> Rect:
        raise NotImplementedError


class MoveGesture(FieldGesture):
    def _apply(self, delta: Point) -> Rect:
        origin = self._origin
        moved = Rect(origin.x + delta.x, origin.y + delta.y, origin.width, origin.height)
        return clamp_rect_to_page(moved, self.page.format)


class ResizeGesture(FieldGesture):
    def __init__(
        self,
        page: Page,
        field: FormField,
        corner: Corner,
        start: Point,
        scale: float,
        on_release: Callable[[FieldGesture], None] | None = None,
    ) -> None:
        super().__init__(page, field, start, scale, on_release)
        self.corner = corner
        page_w, page_h = canonical_pixel_size(page.format)
        origin = self._origin
        floored = Rect(
            origin.x,
            origin.y,
            min(page_w, max(origin.width, config.MIN_FIELD_WIDTH)),
            min(page_h, max(origin.height, config.MIN_FIELD_HEIGHT)),
        )
        self._origin = clamp_rect_to_page(floored, page.format)

    def _apply(self, delta: Point) -> Rect:
        origin = self._origin
        page_w, page_h = canonical_pixel_size(self.page.format)
        min_w = config.MIN_FIELD_WIDTH
        min_h = config.MIN_FIELD_HEIGHT
        left, top, right, bottom = origin.x, origin.y, origin.right, origin.bottom

        # The corner opposite the dragged handle stays anchored.
        if self.corner in (Corner.TOP_LEFT, Corner.BOTTOM_LEFT):
            left = max(0.0, min(origin.x + delta.x, right - min_w))
        else:
            right = min(page_w, max(origin.right + delta.x, left + min_w))

        if self.corner in (Corner.TOP_LEFT, Corner.TOP_RIGHT):
            top = max(0.0, min(origin.y + delta.y, bottom - min_h))
        else:
            bottom = min(page_h, max(origin.bottom + delta.y, top + min_h))

        return Rect(left, top, right - left, bottom - top)
