"""Page model: format, placed fields and an optional background handle."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from formsign.model.field import FormField
from formsign.model.geometry import PageFormat
from formsign.model.serialization import build_payload, require_keys


_PAGE_KEYS = ("id", "format", "elements", "backgroundImage", "pageNumber")
_PAGE_REQUIRED = frozenset({"id", "format", "elements"})
_PAGE_DEFAULTS: dict[str, Any] = {"backgroundImage": None, "pageNumber": None}


@dataclass(slots=True)
class Page:
    id: str
    format: PageFormat
    fields: list[FormField] = field(default_factory=list)
    # Opaque handle owned by the upload collaborator (path, URL or key).
    background_image: str | None = None
    # 1-based page of the background document; defaults to this page's position.
    page_number: int | None = None
    source_keys: tuple[str, ...] | None = field(default=None, compare=False, repr=False)
    extra: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def has_background(self) -> bool:
        return bool(self.background_image)

    def find_field(self, field_id: str) -> FormField | None:
        for candidate in self.fields:
            if candidate.id == field_id:
                return candidate
        return None

    def index_of(self, field_id: str) -> int | None:
        for index, candidate in enumerate(self.fields):
            if candidate.id == field_id:
                return index
        return None

    def to_dict(self) -> dict[str, Any]:
        values = {
            "id": self.id,
            "format": self.format.value,
            "elements": [placed.to_dict() for placed in self.fields],
            "backgroundImage": self.background_image,
            "pageNumber": self.page_number,
        }
        return build_payload(values, _PAGE_REQUIRED, _PAGE_DEFAULTS, self.source_keys, self.extra)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Page:
        require_keys(data, ("id", "format"), "page")
        return cls(
            id=str(data["id"]),
            format=PageFormat(data["format"]),
            fields=[FormField.from_dict(item) for item in data.get("elements") or []],
            background_image=data.get("backgroundImage"),
            page_number=data.get("pageNumber"),
            source_keys=tuple(data),
            extra={key: value for key, value in data.items() if key not in _PAGE_KEYS},
        )
