from __future__ import annotations

from conftest import single_page, text_field
from formsign.state.repository import InMemoryTemplateRepository, JsonFileTemplateRepository


def test_in_memory_repository_never_aliases_templates() -> None:
    template = single_page(text_field("a"))
    repository = InMemoryTemplateRepository(template)

    loaded = repository.load()
    template.pages[0].fields[0].x = 400

    assert loaded is not template
    assert loaded.pages[0].fields[0].x == 100


def test_json_file_repository_round_trips(tmp_path) -> None:
    repository = JsonFileTemplateRepository(tmp_path / "nested" / "template.json")
    assert repository.load() is None

    template = single_page(text_field("a", required=True))
    repository.save(template)

    assert repository.path.read_text(encoding="utf-8") == template.to_json()
    assert repository.load().to_json() == template.to_json()
