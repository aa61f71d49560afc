"""Form field model definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from formsign.model.geometry import Rect
from formsign.model.serialization import build_payload, require_keys


class FieldType(str, Enum):
    TEXT = "text"
    SIGNATURE = "signature"
    DATE = "date"
    CHECKBOX = "checkbox"
    SELECT = "select"
    IMAGE = "image"


class FieldRole(str, Enum):
    SOURCE = "source"
    TARGET = "target"


_FIELD_KEYS = (
    "id",
    "type",
    "x",
    "y",
    "width",
    "height",
    "required",
    "placeholder",
    "options",
    "preDefinedValueId",
    "preDefinedLabel",
    "role",
)
_FIELD_REQUIRED = frozenset(_FIELD_KEYS[:8])
_FIELD_DEFAULTS: dict[str, Any] = {
    "required": False,
    "placeholder": "",
    "options": None,
    "preDefinedValueId": None,
    "preDefinedLabel": None,
    "role": FieldRole.TARGET.value,
}


@dataclass(slots=True)
class FormField:
    id: str
    field_type: FieldType
    x: float
    y: float
    width: float
    height: float
    # required, placeholder and role are None only when loaded JSON held null.
    required: bool | None = False
    placeholder: str | None = ""
    options: list[str] | None = None
    pre_defined_value_id: str | int | None = None
    pre_defined_label: str | None = None
    role: FieldRole | None = FieldRole.TARGET
    source_keys: tuple[str, ...] | None = field(default=None, compare=False, repr=False)
    extra: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    def set_rect(self, rect: Rect) -> None:
        self.x = rect.x
        self.y = rect.y
        self.width = rect.width
        self.height = rect.height

    @property
    def is_pre_filled(self) -> bool:
        return self.role is FieldRole.SOURCE or self.pre_defined_value_id is not None

    @property
    def display_label(self) -> str:
        return self.pre_defined_label or self.placeholder or f"{self.field_type.value} field"

    def to_dict(self) -> dict[str, Any]:
        values = {
            "id": self.id,
            "type": self.field_type.value,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "required": self.required,
            "placeholder": self.placeholder,
            "options": list(self.options) if self.options is not None else None,
            "preDefinedValueId": self.pre_defined_value_id,
            "preDefinedLabel": self.pre_defined_label,
            "role": self.role.value if self.role is not None else None,
        }
        return build_payload(values, _FIELD_REQUIRED, _FIELD_DEFAULTS, self.source_keys, self.extra)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FormField:
        require_keys(data, ("id", "type", "x", "y", "width", "height"), "element")
        return cls(
            id=str(data["id"]),
            field_type=FieldType(data["type"]),
            x=data["x"],
            y=data["y"],
            width=data["width"],
            height=data["height"],
            required=_bool_or_none(data.get("required", False)),
            placeholder=data.get("placeholder", ""),
            options=list(data["options"]) if data.get("options") is not None else None,
            pre_defined_value_id=data.get("preDefinedValueId"),
            pre_defined_label=data.get("preDefinedLabel"),
            role=_role_or_none(data.get("role", FieldRole.TARGET.value)),
            source_keys=tuple(data),
            extra={key: value for key, value in data.items() if key not in _FIELD_KEYS},
        )


def _bool_or_none(value: Any) -> bool | None:
    return None if value is None else bool(value)


def _role_or_none(value: Any) -> FieldRole | None:
    return None if value is None else FieldRole(value)
