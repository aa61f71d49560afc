"""Template storage handed to the builder and fill engines."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from formsign.model.template import Template


class TemplateRepository(Protocol):
    def load(self) -> Template | None:
        ...

    def save(self, template: Template) -> None:
        ...


class InMemoryTemplateRepository:
    """Keeps the serialized template so loads never alias the saved object."""

    def __init__(self, template: Template | None = None) -> None:
        self._payload: str | None = template.to_json() if template is not None else None

    def load(self) -> Template | None:
        if self._payload is None:
            return None
        return Template.from_json(self._payload)

    def save(self, template: Template) -> None:
        self._payload = template.to_json()


class JsonFileTemplateRepository:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> Template | None:
        if not self.path.exists():
            return None
        return Template.from_json(self.path.read_text(encoding="utf-8"))

    def save(self, template: Template) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(template.to_json(), encoding="utf-8")
