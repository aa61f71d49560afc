from __future__ import annotations

import json

import pytest

from formsign.editor.builder import TemplateBuilder
from formsign.model.field import FieldRole, FieldType
from formsign.model.geometry import PageFormat
from formsign.model.template import Template, TemplateFormatError


def test_untouched_template_reserializes_byte_for_byte() -> None:
    builder = TemplateBuilder()
    page = builder.template.pages[0]
    builder.add_field(FieldType.TEXT, page.id)
    checkbox = builder.add_field(FieldType.CHECKBOX, page.id)
    builder.update_field(page.id, checkbox.id, role=FieldRole.SOURCE, required=True)
    text = builder.template.to_json()

    assert Template.from_json(text).to_json() == text


def test_foreign_key_order_and_unknown_keys_survive() -> None:
    data = {
        "pages": [
            {
                "elements": [
                    {
                        "type": "select",
                        "id": "element-1",
                        "height": 40,
                        "width": 150,
                        "y": 12.5,
                        "x": 10,
                        "content": "kept as is",
                        "options": ["Yes", "No"],
                        "placeholder": "Pick one",
                        "required": True,
                        "preDefinedValueId": None,
                    }
                ],
                "format": "Letter",
                "id": "page-1",
                "pageNumber": 2,
                "backgroundImage": "uploads/source.pdf",
            }
        ],
        "name": "Intake",
    }
    text = json.dumps(data)

    template = Template.from_json(text)

    assert template.to_json() == text
    placed = template.pages[0].fields[0]
    assert placed.field_type is FieldType.SELECT
    assert placed.options == ["Yes", "No"]
    assert template.format is PageFormat.LETTER
    assert template.pages[0].page_number == 2


def test_edited_values_are_written_in_place() -> None:
    text = json.dumps(
        {"pages": [{"id": "p", "format": "A4", "elements": [{"id": "e", "type": "text", "x": 1, "y": 2, "width": 30, "height": 20}]}]}
    )
    template = Template.from_json(text)
    placed = template.pages[0].fields[0]
    placed.x = 40
    placed.role = FieldRole.SOURCE

    element = template.to_dict()["pages"][0]["elements"][0]

    assert list(element) == ["id", "type", "x", "y", "width", "height", "role"]
    assert element["x"] == 40
    assert element["role"] == "source"


def test_new_fields_emit_required_keys_and_skip_default_optionals() -> None:
    builder = TemplateBuilder()
    placed = builder.add_field(FieldType.DATE)

    element = builder.template.to_dict()["pages"][0]["elements"][0]

    assert element == {
        "id": placed.id,
        "type": "date",
        "x": 100.0,
        "y": 100.0,
        "width": 150.0,
        "height": 40.0,
        "required": False,
        "placeholder": "Enter date...",
    }


def test_missing_format_falls_back_to_first_page() -> None:
    template = Template.from_json('{"pages": [{"id": "p", "format": "A5", "elements": []}]}')
    assert template.format is PageFormat.A5
    assert "format" not in template.to_dict()


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        '{"elements": []}',
        '{"pages": [{"id": "p", "format": "Tabloid", "elements": []}]}',
        '{"pages": [{"id": "p", "format": "A4", "elements": [{"id": "e", "type": "radio", "x": 0, "y": 0, "width": 1, "height": 1}]}]}',
        '{"pages": [{"id": "p", "format": "A4", "elements": [{"id": "e", "type": "text"}]}]}',
    ],
)
def test_invalid_template_data_is_rejected(text: str) -> None:
    with pytest.raises(TemplateFormatError):
        Template.from_json(text)


def test_iter_fields_follows_page_then_z_order() -> None:
    builder = TemplateBuilder()
    first = builder.template.pages[0]
    second = builder.add_page()
    a = builder.add_field(FieldType.TEXT, second.id)
    b = builder.add_field(FieldType.TEXT, first.id)
    c = builder.add_field(FieldType.SIGNATURE, first.id)

    order = [(index, placed.id) for index, _, placed in builder.template.iter_fields()]

    assert order == [(0, b.id), (0, c.id), (1, a.id)]
    assert builder.template.locate(a.id) == (second, a)
    assert builder.template.locate("missing") is None


def test_explicit_nulls_are_written_back_as_null() -> None:
    text = json.dumps(
        {
            "pages": [
                {
                    "id": "p",
                    "format": "A4",
                    "elements": [
                        {
                            "id": "e",
                            "type": "text",
                            "x": 1,
                            "y": 2,
                            "width": 30,
                            "height": 20,
                            "required": None,
                            "placeholder": None,
                            "role": None,
                        }
                    ],
                }
            ]
        }
    )

    template = Template.from_json(text)
    placed = template.pages[0].fields[0]

    assert template.to_json() == text
    assert not placed.required
    assert not placed.is_pre_filled
    assert placed.display_label == "text field"
