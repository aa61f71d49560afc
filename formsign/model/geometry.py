"""Coordinate conversion between canonical page pixels, display pixels and PDF points.

Field rectangles are stored in canonical page pixels: pixels at 96 DPI,
top-left origin, independent of any zoom. Every drawing surface derives its
own view with a scale factor, and export projects into bottom-up PDF points.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from formsign.config import CANONICAL_DPI, POINTS_PER_INCH

PT_PER_PX = POINTS_PER_INCH / CANONICAL_DPI
PX_PER_PT = CANONICAL_DPI / POINTS_PER_INCH


class PageFormat(str, Enum):
    A4 = "A4"
    A5 = "A5"
    LETTER = "Letter"


_CANONICAL_SIZES_PT: dict[PageFormat, tuple[float, float]] = {
    PageFormat.A4: (595, 842),
    PageFormat.A5: (420, 595),
    PageFormat.LETTER: (612, 792),
}


@dataclass(frozen=True, slots=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, point: Point) -> bool:
        return self.x <= point.x <= self.right and self.y <= point.y <= self.bottom


def canonical_size_of(page_format: PageFormat | str) -> tuple[float, float]:
    """Page size in PDF points."""
    return _CANONICAL_SIZES_PT[PageFormat(page_format)]


def canonical_pixel_size(page_format: PageFormat | str) -> tuple[float, float]:
    width_pt, height_pt = canonical_size_of(page_format)
    return width_pt * PX_PER_PT, height_pt * PX_PER_PT


def display_scale(page_format: PageFormat | str, target_width_px: float) -> float:
    if target_width_px <= 0:
        raise ValueError(f"Target width must be positive: {target_width_px}")
    canonical_width_px, _ = canonical_pixel_size(page_format)
    return target_width_px / canonical_width_px


def to_display_rect(rect: Rect, scale: float) -> Rect:
    return Rect(rect.x * scale, rect.y * scale, rect.width * scale, rect.height * scale)


def from_display_rect(rect: Rect, scale: float) -> Rect:
    return Rect(rect.x / scale, rect.y / scale, rect.width / scale, rect.height / scale)


def from_display_delta(delta: Point, scale: float) -> Point:
    """Convert an on-screen pointer offset into canonical page pixels."""
    return Point(delta.x / scale, delta.y / scale)


def clamp_rect_to_page(rect: Rect, page_format: PageFormat | str) -> Rect:
    """Translate ``rect`` so it lies inside the page, keeping its size."""
    page_w, page_h = canonical_pixel_size(page_format)
    x = max(0.0, min(rect.x, page_w - rect.width))
    y = max(0.0, min(rect.y, page_h - rect.height))
    return Rect(x, y, rect.width, rect.height)


def to_pdf_rect(
    rect: Rect,
    page_format: PageFormat | str,
    page_size: tuple[float, float] | None = None,
    origin: tuple[float, float] = (0.0, 0.0),
) -> Rect:
    """Project a canonical pixel rectangle into bottom-up PDF points.

    ``page_size`` is the actual size of the target page when it differs from
    the format's canonical size (a background PDF of another size); the
    rectangle is then stretched per axis. ``origin`` is the lower-left corner
    of the target page's media box.
    """
    canonical_w, canonical_h = canonical_size_of(page_format)
    actual_w, actual_h = page_size or (canonical_w, canonical_h)
    sx = actual_w / canonical_w
    sy = actual_h / canonical_h

    width = rect.width * PT_PER_PX * sx
    height = rect.height * PT_PER_PX * sy
    x = origin[0] + rect.x * PT_PER_PX * sx
    y = origin[1] + actual_h - (rect.y + rect.height) * PT_PER_PX * sy
    return Rect(x, y, width, height)
