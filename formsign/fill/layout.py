"""Fill view geometry: per-viewport page scale, stacked page offsets, scroll targets."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from formsign import config
from formsign.model.field import FormField
from formsign.model.geometry import Rect, canonical_pixel_size, display_scale, to_display_rect
from formsign.model.page import Page
from formsign.model.template import Template


class ViewMode(str, Enum):
    DESKTOP = "desktop"
    MOBILE = "mobile"


def view_mode_for(viewport_width: float) -> ViewMode:
    return ViewMode.MOBILE if viewport_width < config.MOBILE_BREAKPOINT_PX else ViewMode.DESKTOP


@dataclass(slots=True)
class FillLayout:
    """Where a template's pages and fields land in a viewport of a given width.

    Desktop draws pages at their canonical pixel width; mobile fits each page
    to the viewport minus a gutter on both sides. Pages stack vertically
    separated by ``page_gap``.
    """

    template: Template
    viewport_width: float
    page_gap: float = config.PAGE_GAP_PX

    @property
    def mode(self) -> ViewMode:
        return view_mode_for(self.viewport_width)

    def target_width(self, page: Page) -> float:
        if self.mode is ViewMode.MOBILE:
            return max(1.0, self.viewport_width - 2 * config.MOBILE_GUTTER_PX)
        return canonical_pixel_size(page.format)[0]

    def scale_for(self, page: Page) -> float:
        return display_scale(page.format, self.target_width(page))

    def display_rect(self, page: Page, placed: FormField) -> Rect:
        return to_display_rect(placed.rect, self.scale_for(page))

    def page_tops(self) -> list[float]:
        tops: list[float] = []
        offset = 0.0
        for page in self.template.pages:
            tops.append(offset)
            offset += canonical_pixel_size(page.format)[1] * self.scale_for(page) + self.page_gap
        return tops

    def scroll_offset(
        self,
        field_id: str,
        page_tops: Sequence[float] | None = None,
        chrome_height: float = config.NAV_CHROME_HEIGHT_PX,
    ) -> float | None:
        """Scroll position that shows the field's top just below the fixed chrome.

        ``page_tops`` overrides the computed page container offsets when the
        caller's layout adds content between pages.
        """
        tops = list(page_tops) if page_tops is not None else self.page_tops()
        for page_index, page in enumerate(self.template.pages):
            placed = page.find_field(field_id)
            if placed is None:
                continue
            field_top = tops[page_index] + placed.y * self.scale_for(page)
            return max(0.0, field_top - chrome_height)
        return None
