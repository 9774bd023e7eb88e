"""Public loop engine API contracts."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from timeloop.api.logging import LoggerPort
    from timeloop.content.definitions import LoopEventDefinition
    from timeloop.runtime.config import LoopRuntimeConfig
    from timeloop.state.schema import LoopState

EventBehavior = Callable[[Any], None]
DefinitionBehavior = Callable[[Any, "LoopEventDefinition"], None]


class LoopEngine(Protocol):
    """Repeating time-loop engine contract.

    Calls are not reentrant-safe against each other; a host that
    parallelizes ticks must serialize every call on one engine.
    """

    @property
    def elapsed_seconds(self) -> float: ...

    @property
    def loop_duration_seconds(self) -> float: ...

    @property
    def time_scale(self) -> float: ...

    @property
    def is_running(self) -> bool: ...

    def start(self) -> None:
        """Transition stopped -> running."""

    def stop(self) -> None:
        """Transition running -> stopped, preserving elapsed time."""

    def reset(self) -> None:
        """Rewind to zero and reactivate every event."""

    def update(self, delta_seconds: float) -> int:
        """Advance loop time and return number of fired events."""

    def schedule_event(
        self,
        event_id: str,
        trigger_time: float,
        behavior: EventBehavior,
        *,
        repeat: bool = False,
        repeat_interval: float | None = None,
    ) -> None:
        """Schedule behavior at a loop offset."""

    def schedule_event_from_definition(
        self,
        definition: LoopEventDefinition,
        behavior: DefinitionBehavior,
    ) -> None:
        """Bind a content definition to behavior."""

    def schedule_events_from_definitions(
        self,
        definitions: Sequence[LoopEventDefinition],
        behavior: DefinitionBehavior,
    ) -> None:
        """Bind many content definitions to one shared behavior."""

    def remove_event(self, event_id: str) -> None:
        """Remove every event with the given id."""

    def clear_events(self) -> None:
        """Remove all events."""

    def serialize(self) -> LoopState:
        """Return timing-only snapshot of active events."""

    def deserialize(self, state: LoopState) -> None:
        """Restore timing fields; events come back as pending records."""

    def get_serialized_event_ids(self) -> list[str]:
        """Return ids of currently active events."""

    def pending_event_ids(self) -> list[str]:
        """Return restored event ids still waiting for behavior."""

    def reattach(self, event_id: str, behavior: EventBehavior) -> None:
        """Schedule a pending restored event with its behavior."""


def create_loop_engine(
    config: LoopRuntimeConfig | None = None,
    *,
    context: object | None = None,
    logger: LoggerPort | None = None,
) -> LoopEngine:
    """Create default loop engine from runtime configuration."""
    from timeloop.runtime.config import load_loop_config
    from timeloop.runtime.loop_engine import RuntimeLoopEngine

    resolved = config if config is not None else load_loop_config()
    engine = RuntimeLoopEngine(
        loop_duration_seconds=resolved.loop_duration_seconds,
        time_scale=resolved.time_scale,
        context=context,
        logger=logger,
    )
    if resolved.autostart:
        engine.start()
    return engine
