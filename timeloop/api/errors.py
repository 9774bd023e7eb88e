"""Public error types for loop and state operations."""

from __future__ import annotations

from collections.abc import Iterable


class ValidationError(ValueError):
    """Structural mismatch in a loaded or imported payload."""

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors: tuple[str, ...] = tuple(errors)
        super().__init__(", ".join(self.errors) or "invalid payload")


class SerializationError(RuntimeError):
    """State object could not be encoded."""


class BehaviorError(RuntimeError):
    """Event behavior failed while firing."""

    def __init__(self, event_id: str, phase: str, cause: BaseException | None = None) -> None:
        self.event_id = event_id
        self.phase = phase
        self.cause = cause
        detail = f": {cause!r}" if cause is not None else ""
        super().__init__(f"event '{event_id}' failed during {phase} pass{detail}")
