"""Repeating time-loop engine implementation."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from timeloop.api.errors import BehaviorError, ValidationError
from timeloop.api.logging import LoggerPort
from timeloop.api.loop import DefinitionBehavior, EventBehavior
from timeloop.content.definitions import LoopEventDefinition
from timeloop.runtime.registry import EventRegistry, ScheduledEvent
from timeloop.state.schema import LoopState, ScheduledEventState

_LOG = logging.getLogger("timeloop.loop")

_PHASE_WRAP = "wrap"
_PHASE_NORMAL = "normal"


class RuntimeLoopEngine:
    """Deterministic repeating loop driven by externally supplied deltas.

    The engine owns elapsed time within one loop iteration, the loop
    duration, the time scale and the running flag. ``update`` fires due
    events in registry order, resolving any number of loop wraps inside a
    single call. Behaviors receive ``context`` unchanged.
    """

    def __init__(
        self,
        *,
        loop_duration_seconds: float = 120.0,
        time_scale: float = 1.0,
        context: object | None = None,
        logger: LoggerPort | None = None,
        registry: EventRegistry | None = None,
    ) -> None:
        _require_positive_duration(loop_duration_seconds)
        _require_non_negative_scale(time_scale)
        self._loop_duration = float(loop_duration_seconds)
        self._time_scale = float(time_scale)
        self._elapsed = 0.0
        self._running = False
        self._context = context
        self._logger: LoggerPort = logger if logger is not None else _LOG
        self._registry = registry if registry is not None else EventRegistry()
        self._pending: list[ScheduledEventState] = []

    @property
    def elapsed_seconds(self) -> float:
        return self._elapsed

    @property
    def loop_duration_seconds(self) -> float:
        return self._loop_duration

    @property
    def time_scale(self) -> float:
        return self._time_scale

    @time_scale.setter
    def time_scale(self, value: float) -> None:
        _require_non_negative_scale(value)
        self._time_scale = float(value)

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def context(self) -> object | None:
        return self._context

    @property
    def events(self) -> tuple[ScheduledEvent, ...]:
        """Return scheduled events in registry order."""
        return tuple(self._registry)

    def start(self) -> None:
        self._running = True

    def stop(self) -> None:
        self._running = False

    def reset(self) -> None:
        """Rewind elapsed time and reactivate every event."""
        self._elapsed = 0.0
        self._registry.restore_all()

    def update(self, delta_seconds: float) -> int:
        """Advance the loop by ``delta_seconds`` scaled by the time scale.

        Each wrap first fires active events with a trigger time inside the
        loop that the pre-wrap elapsed time has reached, then performs the
        loop-boundary reset and carries the overflow into the next
        iteration. A final pass fires events due in the current iteration.
        Returns the number of behaviors invoked, failed ones included.
        """
        if not math.isfinite(delta_seconds) or delta_seconds < 0.0:
            raise ValueError("delta_seconds must be a finite number >= 0")
        if not self._running:
            return 0
        scaled = delta_seconds * self._time_scale
        if not math.isfinite(scaled):
            raise ValueError("scaled delta overflowed")
        self._elapsed += scaled
        fired = 0
        wraps = 0
        while self._elapsed >= self._loop_duration:
            for event in self._registry:
                if not event.active:
                    continue
                if event.trigger_time < self._loop_duration and self._elapsed >= event.trigger_time:
                    self._fire(event, _PHASE_WRAP)
                    fired += 1
            overflow = self._elapsed - self._loop_duration
            self._registry.restore_all()
            self._elapsed = overflow
            wraps += 1

        for event in self._registry:
            if not event.active:
                continue
            if self._elapsed >= event.trigger_time:
                self._fire(event, _PHASE_NORMAL)
                fired += 1

        if wraps:
            self._logger.debug(
                "loop_wrapped wraps=%d elapsed=%.3f fired=%d", wraps, self._elapsed, fired
            )
        return fired

    def schedule_event(
        self,
        event_id: str,
        trigger_time: float,
        behavior: EventBehavior,
        *,
        repeat: bool = False,
        repeat_interval: float | None = None,
    ) -> None:
        """Schedule behavior at a loop offset (seconds from loop start)."""
        self._registry.schedule(
            event_id,
            trigger_time,
            behavior,
            repeat=repeat,
            repeat_interval=repeat_interval,
        )

    def schedule_event_from_definition(
        self,
        definition: LoopEventDefinition,
        behavior: DefinitionBehavior,
    ) -> None:
        """Bind a content definition; behavior receives context and definition."""

        def _bound(context: object) -> None:
            behavior(context, definition)

        self.schedule_event(
            definition.id,
            definition.trigger_time,
            _bound,
            repeat=definition.repeat,
            repeat_interval=definition.repeat_interval,
        )
        self._logger.info(
            "event_scheduled_from_definition id=%s type=%s trigger_time=%s repeat=%s",
            definition.id,
            definition.type.value,
            definition.trigger_time,
            definition.repeat,
        )

    def schedule_events_from_definitions(
        self,
        definitions: Sequence[LoopEventDefinition],
        behavior: DefinitionBehavior,
    ) -> None:
        for definition in definitions:
            self.schedule_event_from_definition(definition, behavior)
        self._logger.info("events_scheduled_from_definitions count=%d", len(definitions))

    def remove_event(self, event_id: str) -> None:
        self._registry.remove(event_id)

    def clear_events(self) -> None:
        self._registry.clear()

    def serialize(self) -> LoopState:
        """Return a timing-only snapshot; behaviors are never included."""
        return LoopState(
            elapsed_seconds=self._elapsed,
            loop_duration_seconds=self._loop_duration,
            time_scale=self._time_scale,
            events=tuple(
                ScheduledEventState(
                    id=event.event_id,
                    trigger_time=event.trigger_time,
                    is_repeating=event.repeat,
                    repeat_interval=event.repeat_interval,
                )
                for event in self._registry.active_events()
            ),
            is_running=self._running,
        )

    def deserialize(self, state: LoopState) -> None:
        """Restore timing fields and empty the registry.

        Snapshot events are kept as pending records until the caller
        re-attaches a behavior for each id.
        """
        errors: list[str] = []
        if not math.isfinite(state.elapsed_seconds) or state.elapsed_seconds < 0.0:
            errors.append("elapsedSeconds must be a finite number >= 0")
        if not math.isfinite(state.loop_duration_seconds) or state.loop_duration_seconds <= 0.0:
            errors.append("loopDurationSeconds must be a finite number > 0")
        if not math.isfinite(state.time_scale) or state.time_scale < 0.0:
            errors.append("timeScale must be a finite number >= 0")
        if errors:
            raise ValidationError(errors)
        self._elapsed = float(state.elapsed_seconds)
        self._loop_duration = float(state.loop_duration_seconds)
        self._time_scale = float(state.time_scale)
        self._running = bool(state.is_running)
        self._registry.clear()
        self._pending = list(state.events)
        self._logger.warning(
            "events_deserialized_without_behavior event_count=%d", len(self._pending)
        )

    def get_serialized_event_ids(self) -> list[str]:
        """Return ids of active events, as ``serialize`` would emit them."""
        return self._registry.active_ids()

    def pending_event_ids(self) -> list[str]:
        return [record.id for record in self._pending]

    def reattach(self, event_id: str, behavior: EventBehavior) -> None:
        """Schedule the first pending record with ``event_id`` using ``behavior``."""
        for index, record in enumerate(self._pending):
            if record.id != event_id:
                continue
            del self._pending[index]
            self.schedule_event(
                record.id,
                record.trigger_time,
                behavior,
                repeat=record.is_repeating,
                repeat_interval=record.repeat_interval,
            )
            return
        raise KeyError(event_id)

    def _fire(self, event: ScheduledEvent, phase: str) -> None:
        try:
            event.behavior(self._context)
        except Exception as exc:
            error = BehaviorError(event.event_id, phase, exc)
            self._logger.error(
                "event_behavior_failed event_id=%s phase=%s error=%s",
                event.event_id,
                phase,
                error,
                exc_info=exc,
            )
        event.mark_fired()


def _require_positive_duration(value: float) -> None:
    if not math.isfinite(value) or value <= 0.0:
        raise ValueError("loop_duration_seconds must be a finite number > 0")


def _require_non_negative_scale(value: float) -> None:
    if not math.isfinite(value) or value < 0.0:
        raise ValueError("time_scale must be a finite number >= 0")
