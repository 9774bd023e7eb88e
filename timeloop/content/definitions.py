"""Declarative loop-event definitions and payload validation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from timeloop.api.errors import ValidationError
from timeloop.state.schema import is_number

_ALLOWED_KEYS = frozenset(
    {"id", "triggerTime", "type", "position", "repeat", "repeatInterval", "metadata"}
)


class EventType(StrEnum):
    """Loop event category."""

    CRIME = "crime"
    PATROL = "patrol"
    INTERACTION = "interaction"
    CUSTOM = "custom"


@dataclass(frozen=True, slots=True)
class Position:
    """World position of a spatial event."""

    x: float
    y: float
    z: float


@dataclass(frozen=True, slots=True)
class LoopEventDefinition:
    """Event content bound to a behavior at schedule time."""

    id: str
    trigger_time: float
    type: EventType
    position: Position | None = None
    repeat: bool = False
    repeat_interval: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


def definition_to_payload(definition: LoopEventDefinition) -> dict[str, object]:
    """Convert definition to its JSON content shape."""
    payload: dict[str, object] = {
        "id": definition.id,
        "triggerTime": definition.trigger_time,
        "type": definition.type.value,
        "repeat": definition.repeat,
    }
    if definition.position is not None:
        payload["position"] = {
            "x": definition.position.x,
            "y": definition.position.y,
            "z": definition.position.z,
        }
    if definition.repeat_interval is not None:
        payload["repeatInterval"] = definition.repeat_interval
    if definition.metadata:
        payload["metadata"] = dict(definition.metadata)
    return payload


def payload_to_definition(payload: object) -> LoopEventDefinition:
    """Validate a content payload and construct a definition.

    Every violated rule is collected before raising, so one
    ``ValidationError`` reports the whole payload.
    """
    if not isinstance(payload, Mapping):
        raise ValidationError(["Event definition must be an object"])
    errors: list[str] = []
    unknown = sorted(str(key) for key in payload if key not in _ALLOWED_KEYS)
    if unknown:
        errors.append(f"Unknown event definition keys: {', '.join(unknown)}")

    event_id = payload.get("id")
    if not isinstance(event_id, str) or not event_id.strip():
        errors.append("Event id must be a non-empty string")

    trigger_time = payload.get("triggerTime")
    if not is_number(trigger_time) or trigger_time < 0:
        errors.append("Event triggerTime must be a number >= 0")

    event_type: EventType | None = None
    try:
        event_type = EventType(str(payload.get("type")))
    except ValueError:
        allowed = ", ".join(item.value for item in EventType)
        errors.append(f"Event type must be one of: {allowed}")

    position = _parse_position(payload.get("position"), errors)

    repeat = payload.get("repeat", False)
    if not isinstance(repeat, bool):
        errors.append("Event repeat must be a boolean")

    interval = payload.get("repeatInterval")
    if interval is not None and (not is_number(interval) or interval <= 0):
        errors.append("Event repeatInterval must be a positive number")
    elif repeat is True and interval is None:
        errors.append("Event repeatInterval is required when repeat is true")

    metadata = payload.get("metadata")
    if metadata is not None and not isinstance(metadata, Mapping):
        errors.append("Event metadata must be an object")

    if errors:
        raise ValidationError(errors)
    return LoopEventDefinition(
        id=event_id.strip(),
        trigger_time=float(trigger_time),
        type=event_type,
        position=position,
        repeat=repeat,
        repeat_interval=None if interval is None else float(interval),
        metadata=dict(metadata or {}),
    )


def payloads_to_definitions(payloads: object) -> list[LoopEventDefinition]:
    """Validate a list of definition payloads, reporting errors by index."""
    if not isinstance(payloads, list):
        raise ValidationError(["Event definitions must be an array"])
    definitions: list[LoopEventDefinition] = []
    errors: list[str] = []
    for index, item in enumerate(payloads):
        try:
            definitions.append(payload_to_definition(item))
        except ValidationError as exc:
            errors.extend(f"events[{index}]: {message}" for message in exc.errors)
    if errors:
        raise ValidationError(errors)
    return definitions


def _parse_position(raw: object, errors: list[str]) -> Position | None:
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        errors.append("Event position must be an object")
        return None
    coords = [raw.get(axis) for axis in ("x", "y", "z")]
    if not all(is_number(value) for value in coords):
        errors.append("Event position must have numeric x, y and z")
        return None
    x, y, z = (float(value) for value in coords)
    return Position(x=x, y=y, z=z)
