from __future__ import annotations

import base64
from io import BytesIO

import pytest
from PIL import Image
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from formsign.model.field import FieldType, FormField
from formsign.model.geometry import PageFormat
from formsign.model.page import Page
from formsign.model.template import Template


def make_png(width: int = 10, height: int = 10, color=(200, 30, 30)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def make_pdf(page_texts: list[str], pagesize=A4) -> bytes:
    buffer = BytesIO()
    report = canvas.Canvas(buffer, pagesize=pagesize)
    for text in page_texts:
        report.drawString(72, 72, text)
        report.showPage()
    report.save()
    return buffer.getvalue()


def text_field(field_id: str, x: float = 100, y: float = 100, **kwargs) -> FormField:
    return FormField(id=field_id, field_type=FieldType.TEXT, x=x, y=y, width=150, height=40, **kwargs)


def single_page(*fields: FormField, page_format: PageFormat = PageFormat.A4, **page_kwargs) -> Template:
    page = Page(id="page-1", format=page_format, fields=list(fields), **page_kwargs)
    return Template(pages=[page], format=page_format)


@pytest.fixture
def png_data_url() -> str:
    return "data:image/png;base64," + base64.b64encode(make_png()).decode("ascii")
