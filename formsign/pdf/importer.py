"""Build a template from an uploaded PDF, importing existing AcroForm fields."""

from __future__ import annotations

from io import BytesIO
from typing import Callable
import uuid

from pypdf import PdfReader

from formsign.model.field import FieldType, FormField
from formsign.model.geometry import PX_PER_PT, PageFormat, canonical_size_of
from formsign.model.page import Page
from formsign.model.template import Template
from formsign.utils.logger import setup_logger

logger = setup_logger(__name__)

_FLAG_REQUIRED = 1 << 1
_FLAG_RADIO = 1 << 15
_FLAG_PUSHBUTTON = 1 << 16


class PdfImportError(RuntimeError):
    """Raised when a PDF cannot be turned into a template."""


def nearest_format(width_pt: float, height_pt: float) -> PageFormat:
    def distance(page_format: PageFormat) -> float:
        canonical_w, canonical_h = canonical_size_of(page_format)
        return abs(canonical_w - width_pt) + abs(canonical_h - height_pt)

    return min(PageFormat, key=distance)


def import_template_from_pdf(
    data: bytes,
    background_handle: str,
    id_factory: Callable[[str], str] | None = None,
) -> Template:
    """One page per PDF page, each backed by ``background_handle``."""
    make_id = id_factory or _default_id
    pages: list[Page] = []

    try:
        reader = PdfReader(BytesIO(data))
        for page_index, pdf_page in enumerate(reader.pages):
            box = pdf_page.mediabox
            width_pt = float(box.width)
            height_pt = float(box.height)
            page_format = nearest_format(width_pt, height_pt)
            page = Page(
                id=make_id("page"),
                format=page_format,
                background_image=background_handle,
                page_number=page_index + 1,
            )

            annots = pdf_page.get("/Annots") or []
            for annot_ref in annots:
                annot = annot_ref.get_object()
                if annot.get("/Subtype") != "/Widget":
                    continue
                imported = _import_widget(annot, box, page_format, make_id)
                if imported is not None:
                    page.fields.append(imported)
            pages.append(page)
    except Exception as exc:
        raise PdfImportError("Failed to import PDF into a template") from exc

    if not pages:
        raise PdfImportError("PDF has no pages")

    logger.info(
        "Imported %d page(s) and %d field(s) from %s",
        len(pages),
        sum(len(page.fields) for page in pages),
        background_handle,
    )
    return Template(pages=pages, format=pages[0].format)


def _import_widget(annot, box, page_format: PageFormat, make_id: Callable[[str], str]) -> FormField | None:
    parent = annot.get("/Parent")
    parent_obj = parent.get_object() if parent is not None else None

    def inherited(key: str):
        value = annot.get(key)
        if value is None and parent_obj is not None:
            value = parent_obj.get(key)
        return value

    pdf_type = inherited("/FT")
    rect = annot.get("/Rect")
    if pdf_type is None or rect is None:
        return None

    flags = int(inherited("/Ff") or 0)
    options: list[str] | None = None
    if pdf_type == "/Tx":
        field_type = FieldType.TEXT
    elif pdf_type == "/Sig":
        field_type = FieldType.SIGNATURE
    elif pdf_type == "/Btn":
        if flags & (_FLAG_RADIO | _FLAG_PUSHBUTTON):
            return None
        field_type = FieldType.CHECKBOX
    elif pdf_type == "/Ch":
        field_type = FieldType.SELECT
        options = [_option_label(item) for item in inherited("/Opt") or []]
    else:
        return None

    llx, lly, urx, ury = (float(value) for value in rect)
    x, y, width, height = _to_canonical(min(llx, urx), min(lly, ury), abs(urx - llx), abs(ury - lly), box, page_format)
    if width <= 0 or height <= 0:
        return None

    return FormField(
        id=make_id("element"),
        field_type=field_type,
        x=x,
        y=y,
        width=width,
        height=height,
        required=bool(flags & _FLAG_REQUIRED),
        placeholder=str(inherited("/T") or ""),
        options=options,
    )


def _to_canonical(left: float, bottom: float, width: float, height: float, box, page_format: PageFormat):
    canonical_w, canonical_h = canonical_size_of(page_format)
    sx = canonical_w / float(box.width)
    sy = canonical_h / float(box.height)
    top_pt = float(box.top) - (bottom + height)
    return (
        (left - float(box.left)) * sx * PX_PER_PT,
        top_pt * sy * PX_PER_PT,
        width * sx * PX_PER_PT,
        height * sy * PX_PER_PT,
    )


def _option_label(item) -> str:
    # Choice options are either plain strings or [export value, display text] pairs.
    if isinstance(item, (list, tuple)) and item:
        return str(item[-1])
    return str(item)


def _default_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"
