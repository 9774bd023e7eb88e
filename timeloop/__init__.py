"""Deterministic repeating time-loop scheduler."""

from timeloop.api import (
    BehaviorError,
    LoopEngine,
    SerializationError,
    ValidationError,
    create_loop_engine,
)

__all__ = [
    "BehaviorError",
    "LoopEngine",
    "SerializationError",
    "ValidationError",
    "create_loop_engine",
]
