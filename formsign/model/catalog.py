"""Catalog of pre-defined data keys a field can be bound to."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from formsign.model.field import FieldType


@dataclass(frozen=True, slots=True)
class PreDefinedOption:
    value: str | int
    label: str


@dataclass(slots=True)
class PreDefinedCatalog:
    options_by_type: dict[FieldType, list[PreDefinedOption]] = field(default_factory=dict)

    def options_for(self, field_type: FieldType) -> list[PreDefinedOption]:
        return list(self.options_by_type.get(field_type, []))

    def find(self, field_type: FieldType, value: str | int) -> PreDefinedOption | None:
        for option in self.options_by_type.get(field_type, []):
            if str(option.value) == str(value):
                return option
        return None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PreDefinedCatalog:
        """Parse ``{"text_field_options": [{"value": ..., "label": ...}], ...}``."""
        options_by_type: dict[FieldType, list[PreDefinedOption]] = {}
        for key, items in data.items():
            if not key.endswith("_field_options"):
                continue
            try:
                field_type = FieldType(key[: -len("_field_options")])
            except ValueError:
                continue
            options_by_type[field_type] = [
                PreDefinedOption(value=item["value"], label=str(item.get("label", item["value"])))
                for item in items or []
            ]
        return cls(options_by_type=options_by_type)
