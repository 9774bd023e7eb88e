"""Public time-loop API contracts."""

from timeloop.api.errors import BehaviorError, SerializationError, ValidationError
from timeloop.api.logging import LoggerPort, LoggingConfig, configure_logging, get_logger
from timeloop.api.loop import DefinitionBehavior, EventBehavior, LoopEngine, create_loop_engine

__all__ = [
    "BehaviorError",
    "DefinitionBehavior",
    "EventBehavior",
    "LoggerPort",
    "LoggingConfig",
    "LoopEngine",
    "SerializationError",
    "ValidationError",
    "configure_logging",
    "create_loop_engine",
    "get_logger",
]
