from __future__ import annotations

import asyncio

import fitz
import pytest

from conftest import make_pdf, make_png, single_page, text_field
from formsign.fill.session import FillSession
from formsign.model.field import FieldType, FormField
from formsign.model.geometry import PageFormat
from formsign.model.values import CheckboxValue, TextValue
from formsign.pdf.loader import MappingBackgroundSource, SourceDocumentError
from formsign.pdf.writer import PdfWriteError, export_pdf, export_pdf_async


def signature_field(field_id: str = "sig") -> FormField:
    return FormField(id=field_id, field_type=FieldType.SIGNATURE, x=100, y=100, width=150, height=40)


def checkbox_field(field_id: str = "ok") -> FormField:
    return FormField(id=field_id, field_type=FieldType.CHECKBOX, x=200, y=200, width=20, height=20)


def open_pdf(data: bytes) -> fitz.Document:
    assert data.startswith(b"%PDF-")
    return fitz.open(stream=data, filetype="pdf")


def font_names(page: fitz.Page) -> list[str]:
    return [font[3] for font in page.get_fonts()]


def test_signature_image_is_drawn_inside_field_rect(png_data_url: str) -> None:
    output = export_pdf(single_page(signature_field()), {"sig": png_data_url})

    with open_pdf(output) as document:
        images = document[0].get_image_info()

    assert len(images) == 1
    assert tuple(images[0]["bbox"]) == pytest.approx((75, 75, 187.5, 105), abs=0.01)


@pytest.mark.parametrize("bad", ["data:image/png;base64,!!!!", "data:image/png;base64,AAAA", "not a data url"])
def test_undecodable_signature_draws_placeholder(bad: str) -> None:
    output = export_pdf(single_page(signature_field()), {"sig": bad})

    with open_pdf(output) as document:
        page = document[0]
        assert "[Signature]" in page.get_text()
        assert page.get_image_info() == []


def test_text_is_drawn_and_clipped_to_field_width() -> None:
    template = single_page(text_field("name"), text_field("long", y=300))

    output = export_pdf(template, {"name": "Jane Doe", "long": "W" * 60})

    with open_pdf(output) as document:
        text = document[0].get_text()

    assert "Jane Doe" in text
    clipped = [line for line in text.splitlines() if line.startswith("W")]
    assert len(clipped) == 1
    assert 0 < len(clipped[0]) < 60


def test_empty_values_are_not_drawn() -> None:
    template = single_page(text_field("blank"), signature_field(), checkbox_field())

    output = export_pdf(template, {"blank": "   ", "ok": False})

    with open_pdf(output) as document:
        page = document[0]
        assert page.get_text().strip() == ""
        assert page.get_image_info() == []


def test_checked_checkbox_draws_check_glyph() -> None:
    checked = export_pdf(single_page(checkbox_field()), {"ok": CheckboxValue(True)})
    unchecked = export_pdf(single_page(checkbox_field()), {"ok": CheckboxValue(False)})

    with open_pdf(checked) as document:
        assert "ZapfDingbats" in font_names(document[0])
    with open_pdf(unchecked) as document:
        assert "ZapfDingbats" not in font_names(document[0])


def test_blank_pages_use_the_format_size() -> None:
    output = export_pdf(single_page(text_field("a"), page_format=PageFormat.A5), {"a": TextValue("x")})

    with open_pdf(output) as document:
        assert document.page_count == 1
        assert (document[0].rect.width, document[0].rect.height) == pytest.approx((420, 595))


def test_pdf_background_page_is_reused_and_overlaid() -> None:
    source = MappingBackgroundSource({"bg.pdf": make_pdf(["first page", "second page"])})
    template = single_page(text_field("name"), background_image="bg.pdf", page_number=2)

    output = export_pdf(template, {"name": "Jane Doe"}, source)

    with open_pdf(output) as document:
        assert document.page_count == 1
        text = document[0].get_text()
    assert "second page" in text
    assert "Jane Doe" in text
    assert "first page" not in text


def test_background_pages_default_to_page_position() -> None:
    source = MappingBackgroundSource({"bg.pdf": make_pdf(["one", "two"])})
    template = single_page(background_image="bg.pdf")

    output = export_pdf(template, {}, source)

    with open_pdf(output) as document:
        assert "one" in document[0].get_text()


def test_raster_background_fills_the_page() -> None:
    source = MappingBackgroundSource({"scan.png": make_png(40, 56)})
    template = single_page(text_field("a"), background_image="scan.png")

    output = export_pdf(template, {"a": "on top"}, source)

    with open_pdf(output) as document:
        page = document[0]
        images = page.get_image_info()
        assert "on top" in page.get_text()
    assert len(images) == 1
    assert tuple(images[0]["bbox"]) == pytest.approx((0, 0, 595, 842), abs=0.01)


@pytest.mark.parametrize(
    ("documents", "page_kwargs"),
    [
        ({}, {"background_image": "missing.pdf"}),
        ({"bad.pdf": b"not a document at all"}, {"background_image": "bad.pdf"}),
        ({"bg.pdf": make_pdf(["only"])}, {"background_image": "bg.pdf", "page_number": 3}),
    ],
)
def test_unusable_backgrounds_are_fatal(documents: dict[str, bytes], page_kwargs: dict) -> None:
    template = single_page(text_field("a"), **page_kwargs)

    with pytest.raises(SourceDocumentError):
        export_pdf(template, {"a": "x"}, MappingBackgroundSource(documents))


def test_background_without_source_is_fatal() -> None:
    with pytest.raises(SourceDocumentError):
        export_pdf(single_page(background_image="bg.pdf"), {})


def test_mismatched_value_kind_fails_export() -> None:
    with pytest.raises(PdfWriteError):
        export_pdf(single_page(checkbox_field()), {"ok": "yes"})


def test_async_export_produces_the_same_document(png_data_url: str) -> None:
    template = single_page(signature_field(), text_field("a", y=300))
    values = {"sig": png_data_url, "a": "Jane"}

    output = asyncio.run(export_pdf_async(template, values))

    with open_pdf(output) as document:
        assert "Jane" in document[0].get_text()
        assert len(document[0].get_image_info()) == 1


def bound_select() -> FormField:
    return FormField(
        id="s",
        field_type=FieldType.SELECT,
        x=100,
        y=100,
        width=300,
        height=40,
        options=["Yes", "No"],
        pre_defined_value_id="answer",
        pre_defined_label="Answer",
    )


def test_pre_filled_select_exports_outside_its_options() -> None:
    template = single_page(bound_select())

    fallback = export_pdf(template, FillSession(template, {}).snapshot())
    looked_up = export_pdf(template, FillSession(template, {"answer": "Maybe"}).raw_values())

    with open_pdf(fallback) as document:
        assert "Auto-filled: Answer" in document[0].get_text()
    with open_pdf(looked_up) as document:
        assert "Maybe" in document[0].get_text()


def test_signer_select_values_are_still_checked() -> None:
    select = bound_select()
    select.pre_defined_value_id = None

    with pytest.raises(PdfWriteError):
        export_pdf(single_page(select), {"s": "Maybe"})
