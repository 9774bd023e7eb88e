"""Loop runtime modules."""

from timeloop.runtime.config import LoopRuntimeConfig, load_loop_config
from timeloop.runtime.logging import (
    JsonFormatter,
    configure_logging,
    logging_config_from,
    setup_logging,
)
from timeloop.runtime.loop_engine import RuntimeLoopEngine
from timeloop.runtime.registry import EventRegistry, ScheduledEvent

__all__ = [
    "EventRegistry",
    "JsonFormatter",
    "LoopRuntimeConfig",
    "RuntimeLoopEngine",
    "ScheduledEvent",
    "configure_logging",
    "load_loop_config",
    "logging_config_from",
    "setup_logging",
]
