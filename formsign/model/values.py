"""Typed field values collected during a fill session.

A field's value shape follows its type: free text for text, date and select
fields, a boolean for checkboxes, and a base64 data-URL for signatures and
images.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from formsign.model.field import FieldType, FormField


class FieldValueError(TypeError):
    """Raised when a value does not fit the field it is committed to."""


@dataclass(frozen=True, slots=True)
class TextValue:
    text: str = ""


@dataclass(frozen=True, slots=True)
class CheckboxValue:
    checked: bool = False


@dataclass(frozen=True, slots=True)
class ImageValue:
    data_url: str = ""


FieldValue = Union[TextValue, CheckboxValue, ImageValue]

VALUE_KINDS: dict[FieldType, type] = {
    FieldType.TEXT: TextValue,
    FieldType.DATE: TextValue,
    FieldType.SELECT: TextValue,
    FieldType.CHECKBOX: CheckboxValue,
    FieldType.SIGNATURE: ImageValue,
    FieldType.IMAGE: ImageValue,
}


def empty_value(field_type: FieldType) -> FieldValue:
    return VALUE_KINDS[field_type]()


def is_filled(value: FieldValue | None) -> bool:
    if isinstance(value, TextValue):
        return bool(value.text.strip())
    if isinstance(value, CheckboxValue):
        return value.checked
    if isinstance(value, ImageValue):
        return bool(value.data_url)
    return False


def to_raw(value: FieldValue) -> str | bool:
    if isinstance(value, CheckboxValue):
        return value.checked
    if isinstance(value, ImageValue):
        return value.data_url
    return value.text


def coerce_value(
    field: FormField,
    raw: FieldValue | str | bool | None,
    validate_options: bool = True,
) -> FieldValue:
    """Turn a raw JSON-ish value (or an already typed one) into the field's value kind.

    With ``validate_options`` a select value must be one of the field's options.
    """
    kind = VALUE_KINDS[field.field_type]
    if raw is None:
        return kind()
    if isinstance(raw, (TextValue, CheckboxValue, ImageValue)):
        if not isinstance(raw, kind):
            raise FieldValueError(
                f"{type(raw).__name__} does not fit {field.field_type.value} field {field.id}"
            )
        value = raw
    elif kind is CheckboxValue:
        if not isinstance(raw, bool):
            raise FieldValueError(f"Checkbox field {field.id} expects a boolean, got {raw!r}")
        value = CheckboxValue(raw)
    elif isinstance(raw, str):
        value = ImageValue(raw) if kind is ImageValue else TextValue(raw)
    else:
        raise FieldValueError(f"{field.field_type.value} field {field.id} expects a string, got {raw!r}")

    if (
        validate_options
        and field.field_type is FieldType.SELECT
        and field.options
        and isinstance(value, TextValue)
        and value.text
        and value.text not in field.options
    ):
        raise FieldValueError(f"{value.text!r} is not an option of select field {field.id}")
    return value
