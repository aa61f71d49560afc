"""Key-order preserving payload assembly for template JSON objects."""

from __future__ import annotations

from typing import Any


def build_payload(
    values: dict[str, Any],
    required: frozenset[str],
    defaults: dict[str, Any],
    source_keys: tuple[str, ...] | None,
    extra: dict[str, Any],
) -> dict[str, Any]:
    """Assemble a JSON object for one model instance.

    Objects loaded from JSON re-emit exactly the keys they were read with, in
    the order they were read, unknown keys included, plus any key whose value
    has since moved away from its default. Objects created in code emit the
    required keys and every optional key holding a non-default value.
    """

    def wanted(key: str) -> bool:
        value = values[key]
        if source_keys is not None:
            return key in source_keys or (key in defaults and value != defaults[key])
        return key in required or (key in defaults and value != defaults[key])

    payload: dict[str, Any] = {}
    for key in source_keys or ():
        if key in values:
            if wanted(key):
                payload[key] = values[key]
        elif key in extra:
            payload[key] = extra[key]

    for key in values:
        if key not in payload and wanted(key):
            payload[key] = values[key]
    for key, value in extra.items():
        payload.setdefault(key, value)
    return payload


def require_keys(data: dict[str, Any], keys: tuple[str, ...], context: str) -> None:
    missing = [key for key in keys if key not in data]
    if missing:
        raise KeyError(f"{context} is missing {', '.join(missing)}")
