"""Full game-state document: validation, defaults and loop capture."""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from copy import deepcopy
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from timeloop.state.schema import is_number, loop_state_to_payload

if TYPE_CHECKING:
    from timeloop.api.loop import LoopEngine

STATE_VERSION = "1.0.0"
DEFAULT_LOOP_DURATION_SECONDS = 120
REQUIRED_SYSTEMS: tuple[str, ...] = (
    "loopManager",
    "npcSystem",
    "doorSystem",
    "dayNightCycle",
    "hourlyCycle",
)

GameState = dict[str, Any]


@dataclass(frozen=True, slots=True)
class ValidationResult:
    valid: bool
    errors: tuple[str, ...] = field(default_factory=tuple)


def now_millis() -> int:
    return int(time.time() * 1000)


def validate_game_state(state: object) -> ValidationResult:
    """Check the structural shape of an untrusted game-state value.

    Never raises; callers decide whether an invalid result aborts their
    operation.
    """
    errors: list[str] = []
    if not isinstance(state, Mapping):
        return ValidationResult(valid=False, errors=("State must be an object",))

    if not isinstance(state.get("version"), str) or not state.get("version"):
        errors.append("State must have a version string")
    if not is_number(state.get("timestamp")):
        errors.append("State must have a timestamp")

    for system in REQUIRED_SYSTEMS:
        if state.get(system) is None:
            errors.append(f"State must have {system}")

    loop = state.get("loopManager")
    if isinstance(loop, Mapping):
        if not is_number(loop.get("elapsedSeconds")):
            errors.append("loopManager.elapsedSeconds must be a number")
        if not isinstance(loop.get("events"), list):
            errors.append("loopManager.events must be an array")
        duration = loop.get("loopDurationSeconds")
        if duration is not None and (not is_number(duration) or duration <= 0):
            errors.append("loopManager.loopDurationSeconds must be a positive number")
        time_scale = loop.get("timeScale")
        if time_scale is not None and (not is_number(time_scale) or time_scale < 0):
            errors.append("loopManager.timeScale must be a number >= 0")
    elif loop is not None:
        errors.append("loopManager must be an object")

    _check_list_field(state, "npcSystem", "npcs", errors)
    _check_list_field(state, "doorSystem", "doors", errors)
    _check_list_field(state, "photoSystem", "photos", errors)

    return ValidationResult(valid=not errors, errors=tuple(errors))


def create_empty_game_state(*, clock: Callable[[], int] = now_millis) -> GameState:
    """Return a fresh default game state used to seed a new session."""
    return {
        "version": STATE_VERSION,
        "timestamp": clock(),
        "loopManager": {
            "elapsedSeconds": 0,
            "loopDurationSeconds": DEFAULT_LOOP_DURATION_SECONDS,
            "timeScale": 1,
            "events": [],
            "isRunning": False,
        },
        "npcSystem": {"npcs": []},
        "doorSystem": {"doors": []},
        "photoSystem": {"photos": [], "currentPhotoIndex": 0},
        "dayNightCycle": {
            "elapsedMs": 0,
            "isDay": True,
            "currentSunIntensity": 1.0,
            "currentMoonIntensity": 0.3,
        },
        "hourlyCycle": {"currentHour": 0, "elapsedMs": 0},
    }


def capture_game_state(
    engine: LoopEngine,
    base: Mapping[str, Any] | None = None,
    *,
    clock: Callable[[], int] = now_millis,
) -> GameState:
    """Place the engine's loop snapshot into a game-state document."""
    state = deepcopy(dict(base)) if base is not None else create_empty_game_state(clock=clock)
    state["version"] = STATE_VERSION
    state["timestamp"] = clock()
    state["loopManager"] = loop_state_to_payload(engine.serialize())
    return state


def _check_list_field(
    state: Mapping[str, Any],
    system: str,
    field_name: str,
    errors: list[str],
) -> None:
    block = state.get(system)
    if block is None:
        return
    if not isinstance(block, Mapping) or not isinstance(block.get(field_name), list):
        errors.append(f"{system}.{field_name} must be an array")
