"""Background page rendering helpers using PyMuPDF."""

from __future__ import annotations

from io import BytesIO

import fitz
from PIL import Image

from formsign.model.document import BackgroundDocument


class PdfRenderError(RuntimeError):
    """Raised when a page cannot be rendered."""


def render_page_png(document: BackgroundDocument, page_index: int, target_width_px: float) -> bytes:
    """Rasterize one background page so it spans ``target_width_px`` pixels."""
    if target_width_px <= 0:
        raise PdfRenderError(f"Target width must be positive: {target_width_px}")
    if page_index < 0 or page_index >= document.page_count:
        raise PdfRenderError(f"Page index out of range: {page_index}")

    if document.handle is None:
        return _resize_raster(document.data, target_width_px)

    try:
        page = document.handle.load_page(page_index)
        zoom = target_width_px / float(page.rect.width)
        pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False, annots=False)
        return pix.tobytes("png")
    except Exception as exc:  # pragma: no cover
        raise PdfRenderError(f"Failed to render page {page_index + 1}") from exc


def _resize_raster(data: bytes, target_width_px: float) -> bytes:
    try:
        with Image.open(BytesIO(data)) as image:
            width = max(1, round(target_width_px))
            height = max(1, round(image.height * width / image.width))
            resized = image.convert("RGB").resize((width, height))
    except OSError as exc:
        raise PdfRenderError("Failed to render raster background") from exc
    output = BytesIO()
    resized.save(output, format="PNG")
    return output.getvalue()
