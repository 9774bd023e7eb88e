"""JSON codec helpers for persisted state documents."""

from __future__ import annotations

from typing import Any

import orjson

from timeloop.api.errors import SerializationError, ValidationError


def dumps_bytes(payload: Any, *, pretty: bool = False, sort_keys: bool = False) -> bytes:
    """Serialize payload to UTF-8 JSON bytes."""
    options = 0
    if pretty:
        options |= orjson.OPT_INDENT_2
    if sort_keys:
        options |= orjson.OPT_SORT_KEYS
    try:
        return orjson.dumps(payload, option=options)
    except orjson.JSONEncodeError as exc:
        raise SerializationError(f"state serialization failed: {exc}") from exc


def dumps_text(payload: Any, *, pretty: bool = False, sort_keys: bool = False) -> str:
    return dumps_bytes(payload, pretty=pretty, sort_keys=sort_keys).decode("utf-8")


def loads(data: str | bytes) -> Any:
    """Parse JSON text into a generic structured value."""
    try:
        return orjson.loads(data)
    except orjson.JSONDecodeError as exc:
        raise ValidationError([f"State is not valid JSON: {exc}"]) from exc


__all__ = ["dumps_bytes", "dumps_text", "loads"]
