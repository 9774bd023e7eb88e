"""Loop state codec and game-state persistence."""

from timeloop.state.game_state import (
    STATE_VERSION,
    GameState,
    ValidationResult,
    capture_game_state,
    create_empty_game_state,
    validate_game_state,
)
from timeloop.state.schema import (
    LoopState,
    ScheduledEventState,
    loop_state_to_payload,
    payload_to_loop_state,
)

__all__ = [
    "STATE_VERSION",
    "GameState",
    "LoopState",
    "ScheduledEventState",
    "ValidationResult",
    "capture_game_state",
    "create_empty_game_state",
    "loop_state_to_payload",
    "payload_to_loop_state",
    "validate_game_state",
]
