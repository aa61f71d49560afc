"""Opened background document for a template page."""

from __future__ import annotations

from dataclasses import dataclass

import fitz


@dataclass(slots=True)
class BackgroundDocument:
    handle_ref: str
    data: bytes
    # None for raster backgrounds (PNG/JPEG), which are drawn full-page.
    handle: fitz.Document | None = None

    @property
    def is_pdf(self) -> bool:
        return self.handle is not None

    @property
    def page_count(self) -> int:
        return self.handle.page_count if self.handle is not None else 1

    def page_size(self, page_index: int) -> tuple[float, float]:
        if self.handle is None:
            raise ValueError("Raster backgrounds have no page geometry")
        rect = self.handle.load_page(page_index).rect
        return float(rect.width), float(rect.height)

    def close(self) -> None:
        if self.handle is not None and not self.handle.is_closed:
            self.handle.close()
