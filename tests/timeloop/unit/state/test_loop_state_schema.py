from __future__ import annotations

import pytest

from timeloop.api.errors import ValidationError
from timeloop.state.schema import (
    LoopState,
    ScheduledEventState,
    loop_state_to_payload,
    payload_to_loop_state,
)


def test_loop_state_payload_uses_persisted_field_names() -> None:
    state = LoopState(
        elapsed_seconds=12.5,
        loop_duration_seconds=120,
        time_scale=1,
        events=(
            ScheduledEventState(id="crime", trigger_time=30),
            ScheduledEventState(
                id="patrol", trigger_time=15, is_repeating=True, repeat_interval=10
            ),
        ),
        is_running=True,
    )

    payload = loop_state_to_payload(state)

    assert payload == {
        "elapsedSeconds": 12.5,
        "loopDurationSeconds": 120,
        "timeScale": 1,
        "events": [
            {"id": "crime", "triggerTime": 30, "isRepeating": False},
            {"id": "patrol", "triggerTime": 15, "isRepeating": True, "repeatInterval": 10},
        ],
        "isRunning": True,
    }


def test_payload_to_loop_state_constructs_typed_state() -> None:
    state = payload_to_loop_state(
        {
            "elapsedSeconds": 3,
            "loopDurationSeconds": 120,
            "timeScale": 0,
            "events": [
                {"id": "patrol", "triggerTime": 5, "isRepeating": True, "repeatInterval": 2}
            ],
            "isRunning": False,
        }
    )

    assert state.elapsed_seconds == 3.0
    assert state.time_scale == 0.0
    assert state.events[0].repeat_interval == 2.0


def test_payload_to_loop_state_collects_errors() -> None:
    with pytest.raises(ValidationError) as excinfo:
        payload_to_loop_state(
            {
                "elapsedSeconds": "soon",
                "loopDurationSeconds": 0,
                "timeScale": -1,
                "events": [{"id": "", "triggerTime": "x"}, {"id": "r", "triggerTime": 1,
                                                             "isRepeating": True}],
                "isRunning": "yes",
            }
        )

    errors = excinfo.value.errors
    assert "loopManager.elapsedSeconds must be a number" in errors
    assert "loopManager.loopDurationSeconds must be a positive number" in errors
    assert "loopManager.timeScale must be >= 0" in errors
    assert "loopManager.isRunning must be a boolean" in errors
    assert "loopManager.events[0].id must be a non-empty string" in errors
    assert "loopManager.events[0].triggerTime must be a number" in errors
    assert "loopManager.events[1].repeatInterval is required for repeating events" in errors


def test_payload_to_loop_state_rejects_non_object_and_non_list_events() -> None:
    with pytest.raises(ValidationError):
        payload_to_loop_state(None)
    with pytest.raises(ValidationError) as excinfo:
        payload_to_loop_state(
            {
                "elapsedSeconds": 0,
                "loopDurationSeconds": 10,
                "timeScale": 1,
                "events": "none",
                "isRunning": False,
            }
        )
    assert excinfo.value.errors == ("loopManager.events must be an array",)


def test_payload_to_loop_state_rejects_non_finite_numbers() -> None:
    with pytest.raises(ValidationError) as excinfo:
        payload_to_loop_state(
            {
                "elapsedSeconds": float("nan"),
                "loopDurationSeconds": float("inf"),
                "timeScale": float("inf"),
                "events": [{"id": "crime", "triggerTime": float("nan")}],
                "isRunning": False,
            }
        )

    assert excinfo.value.errors == (
        "loopManager.elapsedSeconds must be a number",
        "loopManager.loopDurationSeconds must be a positive number",
        "loopManager.timeScale must be a number",
        "loopManager.events[0].triggerTime must be a number",
    )
