from __future__ import annotations

import pytest

from formsign.model.geometry import (
    PageFormat,
    Point,
    Rect,
    canonical_pixel_size,
    canonical_size_of,
    clamp_rect_to_page,
    display_scale,
    from_display_delta,
    from_display_rect,
    to_display_rect,
    to_pdf_rect,
)


def test_format_table_is_exact() -> None:
    assert canonical_size_of("A4") == (595, 842)
    assert canonical_size_of("A5") == (420, 595)
    assert canonical_size_of("Letter") == (612, 792)
    assert canonical_size_of(PageFormat.LETTER) == (612, 792)


def test_canonical_pixels_are_points_at_96_dpi() -> None:
    width, height = canonical_pixel_size(PageFormat.A4)
    assert width == pytest.approx(595 * 96 / 72)
    assert height == pytest.approx(842 * 96 / 72)


def test_display_scale_is_target_over_canonical_width() -> None:
    canonical_width, _ = canonical_pixel_size(PageFormat.A5)
    assert display_scale(PageFormat.A5, canonical_width) == pytest.approx(1.0)
    assert display_scale(PageFormat.A5, canonical_width / 2) == pytest.approx(0.5)


def test_display_scale_rejects_non_positive_width() -> None:
    with pytest.raises(ValueError):
        display_scale(PageFormat.A4, 0)


@pytest.mark.parametrize("scale", [0.25, 0.75, 1.0, 1.5, 3.3])
@pytest.mark.parametrize(
    "rect",
    [Rect(0, 0, 20, 15), Rect(100, 100, 150, 40), Rect(613.7, 1001.1, 33.3, 12.9)],
)
def test_display_rect_round_trips(rect: Rect, scale: float) -> None:
    back = from_display_rect(to_display_rect(rect, scale), scale)
    assert back.x == pytest.approx(rect.x)
    assert back.y == pytest.approx(rect.y)
    assert back.width == pytest.approx(rect.width)
    assert back.height == pytest.approx(rect.height)


def test_display_delta_divides_by_scale() -> None:
    assert from_display_delta(Point(50, 30), 2.0) == Point(25, 15)


def test_pdf_rect_flips_y_and_converts_to_points() -> None:
    rect = to_pdf_rect(Rect(0, 0, 100, 40), PageFormat.A4)
    assert rect.x == pytest.approx(0)
    assert rect.width == pytest.approx(75)
    assert rect.height == pytest.approx(30)
    assert rect.y == pytest.approx(842 - 30)


def test_pdf_rect_bottom_of_page_lands_at_zero() -> None:
    _, page_h = canonical_pixel_size(PageFormat.LETTER)
    rect = to_pdf_rect(Rect(10, page_h - 40, 100, 40), PageFormat.LETTER)
    assert rect.y == pytest.approx(0)
    assert rect.x == pytest.approx(7.5)


def test_pdf_rect_stretches_to_actual_page_size() -> None:
    rect = to_pdf_rect(Rect(100, 100, 100, 40), PageFormat.A4, page_size=(1190, 1684), origin=(10, 20))
    assert rect.x == pytest.approx(10 + 150)
    assert rect.width == pytest.approx(150)
    assert rect.height == pytest.approx(60)
    assert rect.y == pytest.approx(20 + 1684 - 140 * 0.75 * 2)


def test_clamp_keeps_size_and_stays_on_page() -> None:
    page_w, page_h = canonical_pixel_size(PageFormat.A5)
    clamped = clamp_rect_to_page(Rect(-40, page_h, 150, 40), PageFormat.A5)
    assert clamped == Rect(0.0, page_h - 40, 150, 40)
    clamped = clamp_rect_to_page(Rect(page_w, -5, 150, 40), PageFormat.A5)
    assert clamped.right == pytest.approx(page_w)
    assert clamped.y == 0.0
