"""In-memory registry of scheduled loop events."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from timeloop.api.loop import EventBehavior


@dataclass(slots=True)
class ScheduledEvent:
    """One unit of schedulable behavior.

    ``trigger_time`` advances by ``repeat_interval`` after each fire of a
    repeating event; ``original_trigger_time`` never changes and is what a
    loop-boundary reset restores.
    """

    event_id: str
    trigger_time: float
    behavior: EventBehavior
    repeat: bool = False
    repeat_interval: float | None = None
    active: bool = True
    original_trigger_time: float = field(init=False)

    def __post_init__(self) -> None:
        self.original_trigger_time = self.trigger_time

    def mark_fired(self) -> None:
        """Apply the post-fire rule: reschedule repeating, deactivate one-shot."""
        if self.repeat and self.repeat_interval is not None:
            self.trigger_time += self.repeat_interval
        else:
            self.active = False

    def restore(self) -> None:
        self.active = True
        if self.repeat:
            self.trigger_time = self.original_trigger_time


class EventRegistry:
    """Insertion-ordered set of scheduled events.

    Iteration order is scheduling order, which is also the tie-break order
    for events sharing a trigger time. Id uniqueness is left to callers.
    """

    def __init__(self) -> None:
        self._events: list[ScheduledEvent] = []

    def __iter__(self) -> Iterator[ScheduledEvent]:
        return iter(tuple(self._events))

    def __len__(self) -> int:
        return len(self._events)

    def schedule(
        self,
        event_id: str,
        trigger_time: float,
        behavior: EventBehavior,
        *,
        repeat: bool = False,
        repeat_interval: float | None = None,
    ) -> ScheduledEvent:
        """Append a new active event and return it."""
        if repeat and (repeat_interval is None or repeat_interval <= 0.0):
            raise ValueError("repeat_interval must be > 0 for repeating events")
        event = ScheduledEvent(
            event_id=event_id,
            trigger_time=float(trigger_time),
            behavior=behavior,
            repeat=repeat,
            repeat_interval=None if repeat_interval is None else float(repeat_interval),
        )
        self._events.append(event)
        return event

    def remove(self, event_id: str) -> int:
        """Delete every event matching ``event_id``; return how many were removed."""
        kept = [event for event in self._events if event.event_id != event_id]
        removed = len(self._events) - len(kept)
        self._events = kept
        return removed

    def clear(self) -> None:
        self._events = []

    def active_ids(self) -> list[str]:
        """Return ids of active events in scheduling order."""
        return [event.event_id for event in self._events if event.active]

    def active_events(self) -> list[ScheduledEvent]:
        return [event for event in self._events if event.active]

    def restore_all(self) -> None:
        """Reactivate every event and rewind repeating events to their original time."""
        for event in self._events:
            event.restore()
