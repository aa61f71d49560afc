"""Template builder: page and field placement at a chosen zoom."""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Callable
import uuid

from formsign import config
from formsign.editor.gestures import Corner, FieldGesture, MoveGesture, ResizeGesture
from formsign.model.catalog import PreDefinedCatalog, PreDefinedOption
from formsign.model.field import FieldRole, FieldType, FormField
from formsign.model.geometry import (
    PageFormat,
    Point,
    Rect,
    clamp_rect_to_page,
    from_display_delta,
    to_display_rect,
)
from formsign.model.page import Page
from formsign.model.template import Template
from formsign.state.repository import TemplateRepository
from formsign.utils.logger import setup_logger

logger = setup_logger(__name__)

_UPDATABLE = frozenset(
    {
        "x",
        "y",
        "width",
        "height",
        "required",
        "placeholder",
        "options",
        "pre_defined_value_id",
        "pre_defined_label",
        "role",
    }
)


def default_field_size(field_type: FieldType) -> tuple[float, float]:
    if field_type is FieldType.CHECKBOX:
        return config.CHECKBOX_FIELD_SIZE, config.CHECKBOX_FIELD_SIZE
    return config.DEFAULT_FIELD_WIDTH, config.DEFAULT_FIELD_HEIGHT


def _default_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class TemplateBuilder:
    """Owns and mutates a Template while it is being edited.

    Lookups of unknown page or field ids are no-ops: the editing surface only
    issues ids it got from this builder.
    """

    def __init__(
        self,
        template: Template | None = None,
        repository: TemplateRepository | None = None,
        catalog: PreDefinedCatalog | None = None,
        zoom: float = 1.0,
        id_factory: Callable[[str], str] | None = None,
    ) -> None:
        self._make_id = id_factory or _default_id
        self._repository = repository
        self.catalog = catalog or PreDefinedCatalog()
        self._zoom = 1.0
        self.set_zoom(zoom)
        self._gesture: FieldGesture | None = None

        if template is None:
            template = Template(format=PageFormat.A4)
            template.pages.append(Page(id=self._make_id("page"), format=template.format))
        self.template = template

    @classmethod
    def from_repository(cls, repository: TemplateRepository, **kwargs: Any) -> TemplateBuilder:
        return cls(repository.load(), repository=repository, **kwargs)

    def save(self) -> None:
        if self._repository is None:
            raise RuntimeError("Builder has no template repository")
        self._repository.save(self.template)
        logger.info("Saved template with %d page(s)", len(self.template.pages))

    @property
    def zoom(self) -> float:
        return self._zoom

    def set_zoom(self, zoom: float) -> None:
        if zoom <= 0:
            raise ValueError(f"Zoom must be positive: {zoom}")
        self._zoom = float(zoom)

    def set_default_format(self, page_format: PageFormat | str) -> None:
        self.template.format = PageFormat(page_format)

    def add_page(self, page_format: PageFormat | str | None = None) -> Page:
        page = Page(
            id=self._make_id("page"),
            format=PageFormat(page_format) if page_format is not None else self.template.format,
        )
        self.template.pages.append(page)
        logger.info("Added %s page %s", page.format.value, page.id)
        return page

    def add_field(
        self,
        field_type: FieldType | str,
        page_id: str | None = None,
        position: Point | None = None,
    ) -> FormField | None:
        """Add a field at ``position`` (canonical pixels) or the default origin.

        Without ``page_id`` the field goes on the first page.
        """
        page = self._page(page_id) if page_id is not None else next(iter(self.template.pages), None)
        if page is None:
            return None
        field_type = FieldType(field_type)
        width, height = default_field_size(field_type)
        origin = position or Point(*config.DEFAULT_FIELD_ORIGIN)
        rect = clamp_rect_to_page(Rect(origin.x, origin.y, width, height), page.format)
        return self._insert(page, field_type, rect)

    def drop_field(self, field_type: FieldType | str, page_id: str, drop_point: Point) -> FormField | None:
        """Add a field centred on a drop point given in on-screen page pixels."""
        page = self._page(page_id)
        if page is None:
            return None
        field_type = FieldType(field_type)
        width, height = default_field_size(field_type)
        center = from_display_delta(drop_point, self._zoom)
        rect = Rect(center.x - width / 2, center.y - height / 2, width, height)
        return self._insert(page, field_type, clamp_rect_to_page(rect, page.format))

    def duplicate_field(self, page_id: str, field_id: str) -> FormField | None:
        found = self._field(page_id, field_id)
        if found is None:
            return None
        page, source = found
        duplicate = deepcopy(source)
        duplicate.id = self._make_id("element")
        duplicate.source_keys = None
        offset = config.DUPLICATE_OFFSET
        duplicate.set_rect(
            clamp_rect_to_page(
                Rect(source.x + offset, source.y + offset, source.width, source.height),
                page.format,
            )
        )
        page.fields.append(duplicate)
        logger.info("Duplicated field %s as %s", source.id, duplicate.id)
        return duplicate

    def delete_field(self, page_id: str, field_id: str) -> bool:
        found = self._field(page_id, field_id)
        if found is None:
            return False
        page, placed = found
        if self._gesture is not None and self._gesture.field is placed:
            self._gesture.end()
        page.fields.remove(placed)
        logger.info("Deleted field %s from page %s", field_id, page_id)
        return True

    def update_field(self, page_id: str, field_id: str, **changes: Any) -> FormField | None:
        """Set field attributes directly; rectangles are not clamped to the page."""
        unknown = set(changes) - _UPDATABLE
        if unknown:
            raise TypeError(f"Cannot update field attribute(s): {', '.join(sorted(unknown))}")
        for key in ("width", "height"):
            if key in changes and changes[key] <= 0:
                raise ValueError(f"Field {key} must be positive: {changes[key]}")
        for key in ("x", "y"):
            if key in changes and changes[key] < 0:
                raise ValueError(f"Field {key} must not be negative: {changes[key]}")

        found = self._field(page_id, field_id)
        if found is None:
            return None
        _, placed = found
        if "role" in changes:
            changes["role"] = FieldRole(changes["role"])
        for key, value in changes.items():
            setattr(placed, key, value)
        return placed

    def configure_field(
        self,
        page_id: str,
        field_id: str,
        *,
        placeholder: str | None = None,
        required: bool | None = None,
        role: FieldRole | str | None = None,
        options: list[str] | None = None,
    ) -> FormField | None:
        changes: dict[str, Any] = {}
        if placeholder is not None:
            changes["placeholder"] = placeholder
        if required is not None:
            changes["required"] = required
        if role is not None:
            changes["role"] = role
        if options is not None:
            changes["options"] = list(options)
        return self.update_field(page_id, field_id, **changes)

    def pre_defined_options(self, field_type: FieldType | str) -> list[PreDefinedOption]:
        return self.catalog.options_for(FieldType(field_type))

    def bind_pre_defined(self, page_id: str, field_id: str, value: str | int) -> bool:
        found = self._field(page_id, field_id)
        if found is None:
            return False
        _, placed = found
        option = self.catalog.find(placed.field_type, value)
        if option is None:
            logger.warning(
                "No pre-defined %s option %r for field %s", placed.field_type.value, value, field_id
            )
            return False
        placed.pre_defined_value_id = option.value
        placed.pre_defined_label = option.label
        return True

    def clear_pre_defined(self, page_id: str, field_id: str) -> bool:
        found = self._field(page_id, field_id)
        if found is None:
            return False
        _, placed = found
        placed.pre_defined_value_id = None
        placed.pre_defined_label = None
        return True

    @property
    def active_gesture(self) -> FieldGesture | None:
        return self._gesture

    def begin_drag(self, page_id: str, field_id: str, pointer: Point) -> MoveGesture | None:
        found = self._field(page_id, field_id)
        if found is None:
            return None
        page, placed = found
        self.release_gesture()
        gesture = MoveGesture(page, placed, pointer, self._zoom, on_release=self._on_release)
        self._gesture = gesture
        return gesture

    def begin_resize(
        self, page_id: str, field_id: str, corner: Corner | str, pointer: Point
    ) -> ResizeGesture | None:
        found = self._field(page_id, field_id)
        if found is None:
            return None
        page, placed = found
        self.release_gesture()
        gesture = ResizeGesture(
            page, placed, Corner(corner), pointer, self._zoom, on_release=self._on_release
        )
        self._gesture = gesture
        return gesture

    def release_gesture(self) -> None:
        if self._gesture is not None:
            self._gesture.end()

    def close(self) -> None:
        self.release_gesture()

    def display_rect(self, placed: FormField) -> Rect:
        return to_display_rect(placed.rect, self._zoom)

    def field_at(self, page_id: str, pointer: Point) -> FormField | None:
        """Top-most field under an on-screen point of the page canvas."""
        page = self._page(page_id)
        if page is None:
            return None
        for placed in reversed(page.fields):
            if self.display_rect(placed).contains(pointer):
                return placed
        return None

    def _on_release(self, gesture: FieldGesture) -> None:
        if self._gesture is gesture:
            self._gesture = None

    def _insert(self, page: Page, field_type: FieldType, rect: Rect) -> FormField:
        placed = FormField(
            id=self._make_id("element"),
            field_type=field_type,
            x=rect.x,
            y=rect.y,
            width=rect.width,
            height=rect.height,
            placeholder=f"Enter {field_type.value}...",
        )
        page.fields.append(placed)
        logger.info("Added %s field %s to page %s", field_type.value, placed.id, page.id)
        return placed

    def _page(self, page_id: str) -> Page | None:
        page = self.template.find_page(page_id)
        if page is None:
            logger.debug("Ignoring unknown page id %s", page_id)
        return page

    def _field(self, page_id: str, field_id: str) -> tuple[Page, FormField] | None:
        page = self._page(page_id)
        if page is None:
            return None
        placed = page.find_field(field_id)
        if placed is None:
            logger.debug("Ignoring unknown field id %s on page %s", field_id, page_id)
            return None
        return page, placed
