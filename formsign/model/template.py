"""Template model: the persisted description of a multi-page form."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from typing import Any, Iterator

from formsign.model.field import FormField
from formsign.model.geometry import PageFormat
from formsign.model.page import Page
from formsign.model.serialization import build_payload


class TemplateFormatError(ValueError):
    """Raised when template JSON cannot be parsed into a Template."""


_TEMPLATE_KEYS = ("format", "pages")


@dataclass(slots=True)
class Template:
    pages: list[Page] = field(default_factory=list)
    format: PageFormat = PageFormat.A4
    source_keys: tuple[str, ...] | None = field(default=None, compare=False, repr=False)
    extra: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def find_page(self, page_id: str) -> Page | None:
        for page in self.pages:
            if page.id == page_id:
                return page
        return None

    def locate(self, field_id: str) -> tuple[Page, FormField] | None:
        for page in self.pages:
            placed = page.find_field(field_id)
            if placed is not None:
                return page, placed
        return None

    def iter_fields(self) -> Iterator[tuple[int, Page, FormField]]:
        """Yield fields in document order: page order, then z-order within a page."""
        for page_index, page in enumerate(self.pages):
            for placed in page.fields:
                yield page_index, page, placed

    def all_fields(self) -> list[FormField]:
        return [placed for _, _, placed in self.iter_fields()]

    def to_dict(self) -> dict[str, Any]:
        values = {
            "format": self.format.value,
            "pages": [page.to_dict() for page in self.pages],
        }
        return build_payload(
            values, frozenset(_TEMPLATE_KEYS), {}, self.source_keys, self.extra
        )

    def to_json(self, indent: int | None = None) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Template:
        if not isinstance(data, dict) or not isinstance(data.get("pages"), list):
            raise TemplateFormatError("Template data must be an object with a 'pages' list")
        try:
            pages = [Page.from_dict(item) for item in data["pages"]]
            if "format" in data:
                default_format = PageFormat(data["format"])
            else:
                default_format = pages[0].format if pages else PageFormat.A4
        except (KeyError, TypeError, ValueError) as exc:
            raise TemplateFormatError(f"Invalid template data: {exc}") from exc

        return cls(
            pages=pages,
            format=default_format,
            source_keys=tuple(data),
            extra={key: value for key, value in data.items() if key not in _TEMPLATE_KEYS},
        )

    @classmethod
    def from_json(cls, text: str | bytes) -> Template:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise TemplateFormatError("Template data is not valid JSON") from exc
        return cls.from_dict(data)
