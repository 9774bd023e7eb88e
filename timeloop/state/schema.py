"""Timing-only loop state snapshot and payload conversion."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field

from timeloop.api.errors import ValidationError


@dataclass(frozen=True, slots=True)
class ScheduledEventState:
    """Serialized form of one active event (no behavior)."""

    id: str
    trigger_time: float
    is_repeating: bool = False
    repeat_interval: float | None = None


@dataclass(frozen=True, slots=True)
class LoopState:
    """Serializable loop engine state."""

    elapsed_seconds: float
    loop_duration_seconds: float
    time_scale: float
    events: tuple[ScheduledEventState, ...] = field(default_factory=tuple)
    is_running: bool = False


def is_number(value: object) -> bool:
    """Return True for int/float values, excluding booleans, NaN and infinities."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not isinstance(value, float) or math.isfinite(value)


def loop_state_to_payload(state: LoopState) -> dict[str, object]:
    """Convert loop state to the persisted ``loopManager`` JSON shape."""
    events: list[dict[str, object]] = []
    for event in state.events:
        item: dict[str, object] = {
            "id": event.id,
            "triggerTime": event.trigger_time,
            "isRepeating": event.is_repeating,
        }
        if event.repeat_interval is not None:
            item["repeatInterval"] = event.repeat_interval
        events.append(item)
    return {
        "elapsedSeconds": state.elapsed_seconds,
        "loopDurationSeconds": state.loop_duration_seconds,
        "timeScale": state.time_scale,
        "events": events,
        "isRunning": state.is_running,
    }


def payload_to_loop_state(payload: object) -> LoopState:
    """Validate a ``loopManager`` payload and construct a loop state."""
    if not isinstance(payload, Mapping):
        raise ValidationError(["loopManager must be an object"])
    errors: list[str] = []
    elapsed = payload.get("elapsedSeconds")
    if not is_number(elapsed):
        errors.append("loopManager.elapsedSeconds must be a number")
    elif elapsed < 0:
        errors.append("loopManager.elapsedSeconds must be >= 0")
    duration = payload.get("loopDurationSeconds")
    if not is_number(duration) or duration <= 0:
        errors.append("loopManager.loopDurationSeconds must be a positive number")
    time_scale = payload.get("timeScale")
    if not is_number(time_scale):
        errors.append("loopManager.timeScale must be a number")
    elif time_scale < 0:
        errors.append("loopManager.timeScale must be >= 0")
    is_running = payload.get("isRunning")
    if not isinstance(is_running, bool):
        errors.append("loopManager.isRunning must be a boolean")
    raw_events = payload.get("events")
    events: list[ScheduledEventState] = []
    if not isinstance(raw_events, list):
        errors.append("loopManager.events must be an array")
    else:
        for index, item in enumerate(raw_events):
            parsed = _parse_event(item, index, errors)
            if parsed is not None:
                events.append(parsed)
    if errors:
        raise ValidationError(errors)
    return LoopState(
        elapsed_seconds=float(elapsed),
        loop_duration_seconds=float(duration),
        time_scale=float(time_scale),
        events=tuple(events),
        is_running=is_running,
    )


def _parse_event(item: object, index: int, errors: list[str]) -> ScheduledEventState | None:
    prefix = f"loopManager.events[{index}]"
    if not isinstance(item, Mapping):
        errors.append(f"{prefix} must be an object")
        return None
    before = len(errors)
    event_id = item.get("id")
    if not isinstance(event_id, str) or not event_id:
        errors.append(f"{prefix}.id must be a non-empty string")
    trigger_time = item.get("triggerTime")
    if not is_number(trigger_time):
        errors.append(f"{prefix}.triggerTime must be a number")
    is_repeating = item.get("isRepeating", False)
    if not isinstance(is_repeating, bool):
        errors.append(f"{prefix}.isRepeating must be a boolean")
    interval = item.get("repeatInterval")
    if interval is not None and (not is_number(interval) or interval <= 0):
        errors.append(f"{prefix}.repeatInterval must be a positive number")
    elif is_repeating is True and interval is None:
        errors.append(f"{prefix}.repeatInterval is required for repeating events")
    if len(errors) != before:
        return None
    return ScheduledEventState(
        id=event_id,
        trigger_time=float(trigger_time),
        is_repeating=is_repeating,
        repeat_interval=None if interval is None else float(interval),
    )
