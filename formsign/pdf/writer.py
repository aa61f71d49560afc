"""Flatten filled templates into PDF using reportlab overlays + pypdf."""

from __future__ import annotations

import asyncio
from io import BytesIO
from typing import Mapping, Union

from pypdf import PageObject, PdfReader, PdfWriter
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from formsign import config
from formsign.model.document import BackgroundDocument
from formsign.model.field import FormField
from formsign.model.geometry import Rect, canonical_size_of, to_pdf_rect
from formsign.model.page import Page
from formsign.model.template import Template
from formsign.model.values import (
    CheckboxValue,
    FieldValue,
    ImageValue,
    coerce_value,
    is_filled,
)
from formsign.pdf.images import ImageDecodeError, decode_data_url
from formsign.pdf.loader import BackgroundSource, SourceDocumentError, load_background
from formsign.utils.logger import setup_logger

logger = setup_logger(__name__)

RawValues = Mapping[str, Union[FieldValue, str, bool, None]]


class PdfWriteError(RuntimeError):
    """Raised when output generation fails."""


def export_pdf(
    template: Template,
    values: RawValues,
    source: BackgroundSource | None = None,
) -> bytes:
    """Render ``template`` with ``values`` burned in and return the PDF bytes.

    Pages with a background reuse the background's page (PDF) or draw it
    full-page (raster); other pages are blank at their format's size. A field
    whose image cannot be decoded is drawn as a placeholder string. A missing
    or unreadable background raises ``SourceDocumentError``.
    """
    backgrounds: dict[str, BackgroundDocument] = {}
    readers: dict[str, PdfReader] = {}
    drawn = 0

    try:
        writer = PdfWriter()
        for page_index, page in enumerate(template.pages):
            background = _background_for(page, source, backgrounds)
            if background is not None and background.is_pdf:
                drawn += _write_background_page(writer, page, page_index, background, values, readers)
            else:
                drawn += _write_blank_page(writer, page, background, values)

        output = BytesIO()
        writer.write(output)
    except SourceDocumentError as exc:
        logger.error("Failed to generate PDF: %s", exc)
        raise
    except Exception as exc:
        raise PdfWriteError("Failed to generate PDF") from exc
    finally:
        for background in backgrounds.values():
            background.close()

    logger.info("Exported %d page(s) with %d drawn field value(s)", len(template.pages), drawn)
    return output.getvalue()


async def export_pdf_async(
    template: Template,
    values: RawValues,
    source: BackgroundSource | None = None,
) -> bytes:
    return await asyncio.to_thread(export_pdf, template, values, source)


def _background_for(
    page: Page,
    source: BackgroundSource | None,
    cache: dict[str, BackgroundDocument],
) -> BackgroundDocument | None:
    if not page.has_background:
        return None
    handle = str(page.background_image)
    if handle not in cache:
        if source is None:
            raise SourceDocumentError(f"No background source for page {page.id}: {handle}")
        cache[handle] = load_background(handle, source)
    return cache[handle]


def _write_background_page(
    writer: PdfWriter,
    page: Page,
    page_index: int,
    background: BackgroundDocument,
    values: RawValues,
    readers: dict[str, PdfReader],
) -> int:
    reader = readers.get(background.handle_ref)
    if reader is None:
        try:
            reader = PdfReader(BytesIO(background.data))
            page_count = len(reader.pages)
        except Exception as exc:
            raise SourceDocumentError(f"Failed to read PDF: {background.handle_ref}") from exc
        if page_count == 0:
            raise SourceDocumentError(f"PDF has no pages: {background.handle_ref}")
        readers[background.handle_ref] = reader

    source_index = (page.page_number or page_index + 1) - 1
    if source_index < 0 or source_index >= len(reader.pages):
        raise SourceDocumentError(
            f"Background {background.handle_ref} has no page {source_index + 1} for page {page.id}"
        )

    target = writer.add_page(reader.pages[source_index])
    box = target.mediabox
    page_size = (float(box.width), float(box.height))
    origin = (float(box.left), float(box.bottom))

    overlay, drawn = _build_overlay(page, values, page_size, origin)
    if drawn:
        target.merge_page(overlay)
    return drawn


def _write_blank_page(
    writer: PdfWriter,
    page: Page,
    background: BackgroundDocument | None,
    values: RawValues,
) -> int:
    page_size = canonical_size_of(page.format)
    overlay, drawn = _build_overlay(page, values, page_size, (0.0, 0.0), raster=background)
    writer.add_page(overlay)
    return drawn


def _build_overlay(
    page: Page,
    values: RawValues,
    page_size: tuple[float, float],
    origin: tuple[float, float],
    raster: BackgroundDocument | None = None,
) -> tuple[PageObject, int]:
    buffer = BytesIO()
    width, height = page_size
    # Cover the whole media box; pypdf clips merged content to the overlay's box.
    report = canvas.Canvas(buffer, pagesize=(origin[0] + width, origin[1] + height))

    if raster is not None:
        report.drawImage(ImageReader(BytesIO(raster.data)), 0, 0, width=width, height=height)

    drawn = 0
    for placed in page.fields:
        # Pre-filled values come from the lookup and are never checked against options.
        value = coerce_value(placed, values.get(placed.id), validate_options=not placed.is_pre_filled)
        if not is_filled(value):
            continue
        rect = to_pdf_rect(placed.rect, page.format, page_size=page_size, origin=origin)
        _draw_field(report, placed, value, rect)
        drawn += 1

    report.showPage()
    report.save()
    buffer.seek(0)
    return PdfReader(buffer).pages[0], drawn


def _draw_field(report: canvas.Canvas, placed: FormField, value: FieldValue, rect: Rect) -> None:
    if isinstance(value, CheckboxValue):
        if value.checked:
            report.setFont(config.CHECK_GLYPH_FONT, min(config.CHECK_GLYPH_SIZE, rect.height))
            report.drawString(rect.x, rect.y, config.CHECK_GLYPH)
    elif isinstance(value, ImageValue):
        _draw_image(report, placed, value, rect)
    else:
        report.setFont(config.EXPORT_FONT, config.EXPORT_FONT_SIZE)
        text = _clip_text(value.text, config.EXPORT_FONT, config.EXPORT_FONT_SIZE, rect.width)
        report.drawString(rect.x, rect.y, text)


def _draw_image(report: canvas.Canvas, placed: FormField, value: ImageValue, rect: Rect) -> None:
    try:
        image = decode_data_url(value.data_url)
        if image.mode not in ("RGB", "RGBA", "L"):
            image = image.convert("RGBA")
        reader = ImageReader(image)
    except ImageDecodeError as exc:
        logger.warning("Drawing placeholder for %s field %s: %s", placed.field_type.value, placed.id, exc)
        report.setFont(config.EXPORT_FONT, config.EXPORT_FONT_SIZE)
        report.drawString(rect.x, rect.y, config.SIGNATURE_PLACEHOLDER)
        return
    report.drawImage(reader, rect.x, rect.y, width=rect.width, height=rect.height, mask="auto")


def _clip_text(text: str, font_name: str, font_size: float, max_width: float) -> str:
    line = " ".join(text.split())
    while line and stringWidth(line, font_name, font_size) > max_width:
        line = line[:-1]
    return line
