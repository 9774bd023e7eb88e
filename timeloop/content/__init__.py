"""Declarative loop content."""

from timeloop.content.definitions import (
    EventType,
    LoopEventDefinition,
    Position,
    definition_to_payload,
    payload_to_definition,
    payloads_to_definitions,
)

__all__ = [
    "EventType",
    "LoopEventDefinition",
    "Position",
    "definition_to_payload",
    "payload_to_definition",
    "payloads_to_definitions",
]
