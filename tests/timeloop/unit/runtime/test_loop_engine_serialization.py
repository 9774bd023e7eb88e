from __future__ import annotations

import logging

import pytest

from timeloop.api.errors import ValidationError
from timeloop.runtime.loop_engine import RuntimeLoopEngine
from timeloop.state.schema import LoopState, ScheduledEventState


def _engine_with_history(make_recorder) -> RuntimeLoopEngine:
    engine = RuntimeLoopEngine(loop_duration_seconds=20, time_scale=1.5)
    engine.schedule_event("crime", 5, make_recorder())
    engine.schedule_event("patrol", 2, make_recorder(), repeat=True, repeat_interval=4)
    engine.schedule_event("late", 15, make_recorder())
    engine.start()
    engine.update(4)  # elapsed 6: crime fires once, patrol fires once
    return engine


def test_serialize_without_events_round_trips_timing_fields() -> None:
    source = RuntimeLoopEngine(loop_duration_seconds=30, time_scale=0.5)
    source.start()
    source.update(7)

    restored = RuntimeLoopEngine(loop_duration_seconds=10)
    restored.deserialize(source.serialize())

    assert restored.elapsed_seconds == source.elapsed_seconds
    assert restored.loop_duration_seconds == 30.0
    assert restored.time_scale == 0.5
    assert restored.is_running is True
    assert restored.serialize() == source.serialize()


def test_serialize_emits_only_active_events_with_current_trigger_time(make_recorder) -> None:
    engine = _engine_with_history(make_recorder)

    state = engine.serialize()

    assert state.elapsed_seconds == pytest.approx(6.0)
    assert state.is_running is True
    assert state.events == (
        ScheduledEventState(id="patrol", trigger_time=6.0, is_repeating=True, repeat_interval=4.0),
        ScheduledEventState(id="late", trigger_time=15.0, is_repeating=False, repeat_interval=None),
    )
    assert engine.get_serialized_event_ids() == ["patrol", "late"]


def test_deserialize_drops_behavior_and_lists_pending_ids(make_recorder, caplog) -> None:
    source = _engine_with_history(make_recorder)
    restored = RuntimeLoopEngine(loop_duration_seconds=20)
    restored.schedule_event("stale", 1, make_recorder())
    caplog.set_level(logging.WARNING, logger="timeloop.loop")

    restored.deserialize(source.serialize())

    assert restored.events == ()
    assert restored.get_serialized_event_ids() == []
    assert restored.pending_event_ids() == source.get_serialized_event_ids()
    assert any("events_deserialized_without_behavior" in r.getMessage() for r in caplog.records)


def test_reattach_restores_pending_event_with_behavior(make_recorder) -> None:
    source = _engine_with_history(make_recorder)
    restored = RuntimeLoopEngine(loop_duration_seconds=20)
    restored.deserialize(source.serialize())
    patrol = make_recorder()
    late = make_recorder()

    restored.reattach("patrol", patrol)
    restored.reattach("late", late)

    assert restored.pending_event_ids() == []
    assert restored.get_serialized_event_ids() == ["patrol", "late"]
    assert restored.events[0].repeat_interval == 4.0

    restored.update(0)  # elapsed 6 >= patrol trigger 6
    assert patrol.call_count == 1
    assert late.call_count == 0


def test_reattach_unknown_id_raises_key_error() -> None:
    engine = RuntimeLoopEngine(loop_duration_seconds=10)
    engine.deserialize(LoopState(elapsed_seconds=0, loop_duration_seconds=10, time_scale=1))

    with pytest.raises(KeyError):
        engine.reattach("missing", lambda _ctx: None)


def test_deserialize_rejects_invalid_timing() -> None:
    engine = RuntimeLoopEngine(loop_duration_seconds=10)
    engine.start()
    engine.update(3)

    with pytest.raises(ValidationError) as excinfo:
        engine.deserialize(
            LoopState(elapsed_seconds=0, loop_duration_seconds=0, time_scale=-1)
        )

    assert len(excinfo.value.errors) == 2
    assert engine.elapsed_seconds == 3.0
    assert engine.loop_duration_seconds == 10.0


def test_deserialize_rejects_negative_elapsed() -> None:
    engine = RuntimeLoopEngine(loop_duration_seconds=10)

    with pytest.raises(ValidationError) as excinfo:
        engine.deserialize(LoopState(elapsed_seconds=-5, loop_duration_seconds=10, time_scale=1))

    assert excinfo.value.errors == ("elapsedSeconds must be a finite number >= 0",)
    assert engine.elapsed_seconds == 0.0


def test_deserialize_rejects_non_finite_timing() -> None:
    engine = RuntimeLoopEngine(loop_duration_seconds=10)
    nan = float("nan")

    with pytest.raises(ValidationError) as excinfo:
        engine.deserialize(
            LoopState(elapsed_seconds=nan, loop_duration_seconds=float("inf"), time_scale=nan)
        )

    assert len(excinfo.value.errors) == 3
    assert engine.loop_duration_seconds == 10.0
    assert engine.time_scale == 1.0


def test_deserialize_keeps_registry_of_source_untouched(make_recorder) -> None:
    source = _engine_with_history(make_recorder)
    before = source.serialize()

    RuntimeLoopEngine(loop_duration_seconds=5).deserialize(before)

    assert source.serialize() == before
    assert len(source.events) == 3
