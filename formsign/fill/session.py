"""Fill session: per-field values and states, guided navigation, progress and submit gating."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
import math
from typing import Any, Mapping

from formsign import config
from formsign.fill.layout import FillLayout
from formsign.model.field import FieldType, FormField
from formsign.model.template import Template
from formsign.model.values import (
    VALUE_KINDS,
    CheckboxValue,
    FieldValue,
    ImageValue,
    TextValue,
    coerce_value,
    empty_value,
    is_filled,
    to_raw,
)
from formsign.state.repository import TemplateRepository
from formsign.utils.logger import setup_logger

logger = setup_logger(__name__)


class FieldState(str, Enum):
    EMPTY = "empty"
    ACTIVE = "active"
    FILLED = "filled"


@dataclass(frozen=True, slots=True)
class Progress:
    completed: int
    total: int

    @property
    def percent(self) -> int:
        if self.total == 0:
            return 0
        return math.floor(self.completed * 100 / self.total + 0.5)


@dataclass(frozen=True, slots=True)
class MissingField:
    field_id: str
    page_index: int
    label: str


@dataclass(frozen=True, slots=True)
class SubmitResult:
    missing: tuple[MissingField, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.missing

    @property
    def message(self) -> str:
        if self.ok:
            return "All required fields are complete."
        labels = ", ".join(item.label for item in self.missing)
        return f"Please complete the required fields: {labels}"


class FillSession:
    """Collects one signer's values for a template.

    The template is read-only here. Fields bound to a pre-defined key, and
    source-role fields, are filled from ``prefill`` at start, stay read-only
    and are left out of guided navigation. With ``default_date`` the other
    date fields start out holding that date.
    """

    def __init__(
        self,
        template: Template,
        prefill: Mapping[str, Any] | None = None,
        default_date: date | None = None,
    ) -> None:
        self.template = template
        self._values: dict[str, FieldValue] = {}
        self._states: dict[str, FieldState] = {}
        self._fields: dict[str, FormField] = {}
        self._pre_filled: set[str] = set()
        self.guided_fields: list[FormField] = []
        self.submitted = False

        lookup = prefill or {}
        for _, _, placed in template.iter_fields():
            self._fields[placed.id] = placed
            if placed.is_pre_filled:
                self._values[placed.id] = _pre_filled_value(placed, lookup)
                self._states[placed.id] = FieldState.FILLED
                self._pre_filled.add(placed.id)
            else:
                value = empty_value(placed.field_type)
                if default_date is not None and placed.field_type is FieldType.DATE:
                    value = TextValue(default_date.strftime(config.DATE_FORMAT))
                self._values[placed.id] = value
                self._states[placed.id] = FieldState.FILLED if is_filled(value) else FieldState.EMPTY
                self.guided_fields.append(placed)

        self._cursor = 0
        self._active_id: str | None = None
        if self.guided_fields:
            self.activate(self.guided_fields[0].id)

    @classmethod
    def from_repository(
        cls,
        repository: TemplateRepository,
        prefill: Mapping[str, Any] | None = None,
        default_date: date | None = None,
    ) -> FillSession:
        template = repository.load()
        if template is None:
            raise LookupError("No template stored to fill")
        return cls(template, prefill, default_date)

    @property
    def active_field_id(self) -> str | None:
        return self._active_id

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def current_field(self) -> FormField | None:
        if 0 <= self._cursor < len(self.guided_fields):
            return self.guided_fields[self._cursor]
        return None

    def is_pre_filled(self, field_id: str) -> bool:
        return field_id in self._pre_filled

    def state_of(self, field_id: str) -> FieldState | None:
        return self._states.get(field_id)

    def value_of(self, field_id: str) -> FieldValue | None:
        return self._values.get(field_id)

    def activate(self, field_id: str) -> bool:
        if field_id not in self._fields:
            logger.debug("Ignoring activation of unknown field %s", field_id)
            return False
        if field_id in self._pre_filled:
            return False

        previous = self._active_id
        if previous is not None and previous != field_id:
            self._states[previous] = self._resting_state(previous)
        self._states[field_id] = FieldState.ACTIVE
        self._active_id = field_id
        for index, placed in enumerate(self.guided_fields):
            if placed.id == field_id:
                self._cursor = index
                break
        return True

    def commit(self, field_id: str, value: FieldValue | str | bool | None) -> FieldValue | None:
        placed = self._fields.get(field_id)
        if placed is None:
            logger.debug("Ignoring value for unknown field %s", field_id)
            return None
        if field_id in self._pre_filled:
            logger.warning("Ignoring value for read-only pre-filled field %s", field_id)
            return None

        typed = coerce_value(placed, value)
        self._values[field_id] = typed
        self._states[field_id] = self._resting_state(field_id)
        if self._active_id == field_id:
            self._active_id = None
        return typed

    def clear(self, field_id: str) -> FieldValue | None:
        return self.commit(field_id, None)

    def go_to(self, index: int) -> FormField | None:
        if index < 0 or index >= len(self.guided_fields):
            return None
        placed = self.guided_fields[index]
        self.activate(placed.id)
        return placed

    @property
    def can_go_next(self) -> bool:
        return self._cursor < len(self.guided_fields) - 1

    @property
    def can_go_previous(self) -> bool:
        return self._cursor > 0

    def next_field(self) -> FormField | None:
        return self.go_to(self._cursor + 1)

    def previous_field(self) -> FormField | None:
        return self.go_to(self._cursor - 1)

    def progress(self) -> Progress:
        completed = sum(
            1
            for field_id, value in self._values.items()
            if field_id in self._pre_filled or is_filled(value)
        )
        return Progress(completed=completed, total=len(self._values))

    def guided_progress(self) -> Progress:
        completed = sum(1 for placed in self.guided_fields if is_filled(self._values[placed.id]))
        return Progress(completed=completed, total=len(self.guided_fields))

    def missing_required(self) -> tuple[MissingField, ...]:
        return tuple(
            MissingField(field_id=placed.id, page_index=page_index, label=placed.display_label)
            for page_index, _, placed in self.template.iter_fields()
            if placed.required
            and placed.id not in self._pre_filled
            and not is_filled(self._values[placed.id])
        )

    def submit(self) -> SubmitResult:
        """Finish the session, or point the cursor at the first missing required field."""
        missing = self.missing_required()
        if missing:
            self.activate(missing[0].field_id)
            logger.info("Submit blocked by %d missing required field(s)", len(missing))
            return SubmitResult(missing=missing)
        self.submitted = True
        logger.info("Fill session submitted with %s", self.progress())
        return SubmitResult()

    def snapshot(self) -> dict[str, FieldValue]:
        return dict(self._values)

    def raw_values(self) -> dict[str, str | bool]:
        return {field_id: to_raw(value) for field_id, value in self._values.items()}

    def layout(self, viewport_width: float) -> FillLayout:
        return FillLayout(self.template, viewport_width)

    def scroll_offset(self, viewport_width: float, field_id: str | None = None) -> float | None:
        target = field_id or self._active_id
        if target is None:
            return None
        return self.layout(viewport_width).scroll_offset(target)

    def _resting_state(self, field_id: str) -> FieldState:
        return FieldState.FILLED if is_filled(self._values[field_id]) else FieldState.EMPTY


def _pre_filled_value(placed: FormField, lookup: Mapping[str, Any]) -> FieldValue:
    if placed.pre_defined_value_id is not None:
        raw = lookup.get(str(placed.pre_defined_value_id), lookup.get(placed.pre_defined_value_id))
    else:
        raw = lookup.get(placed.id)

    kind = VALUE_KINDS[placed.field_type]
    if kind is CheckboxValue:
        return CheckboxValue(True if raw is None else bool(raw))
    if raw is None or raw == "":
        if kind is ImageValue:
            return ImageValue()
        return TextValue(f"Auto-filled: {placed.pre_defined_label or placed.placeholder or ''}")
    if kind is ImageValue:
        return ImageValue(str(raw))
    return TextValue(str(raw))
