"""Command-line entry point for headless loop tooling."""

from __future__ import annotations

import argparse
from collections.abc import Mapping, Sequence
from pathlib import Path

from timeloop.api.errors import ValidationError
from timeloop.api.logging import get_logger
from timeloop.content.definitions import LoopEventDefinition, payloads_to_definitions
from timeloop.runtime.config import load_loop_config
from timeloop.runtime.logging import setup_logging
from timeloop.runtime.loop_engine import RuntimeLoopEngine
from timeloop.state.game_state import validate_game_state
from timeloop.state.json_codec import dumps_text, loads
from timeloop.state.repository import SaveRepository
from timeloop.state.schema import loop_state_to_payload
from timeloop.state.service import SaveService, payload_to_save_data

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="timeloop", description="Time-loop scheduler tools")
    commands = parser.add_subparsers(dest="command", required=True)

    validate = commands.add_parser("validate", help="Validate a game-state or save JSON file.")
    validate.add_argument("path", type=Path)

    saves = commands.add_parser("saves", help="List saves newest first.")
    saves.add_argument("--dir", type=Path, default=None, help="Save directory.")

    simulate = commands.add_parser("simulate", help="Run a headless loop and print its state.")
    simulate.add_argument("--duration", type=float, default=None, help="Loop duration seconds.")
    simulate.add_argument("--scale", type=float, default=None, help="Time scale.")
    simulate.add_argument("--step", type=float, default=1.0, help="Seconds per tick.")
    simulate.add_argument("--ticks", type=int, default=10, help="Number of ticks.")
    simulate.add_argument("--events", type=Path, default=None, help="JSON list of definitions.")
    return parser


def run_validate(path: Path) -> int:
    try:
        payload = loads(path.read_bytes())
        if isinstance(payload, Mapping) and "metadata" in payload and "state" in payload:
            payload_to_save_data(payload)
            errors: tuple[str, ...] = ()
        else:
            errors = validate_game_state(payload).errors
    except ValidationError as exc:
        errors = exc.errors
    except OSError as exc:
        errors = (f"cannot read {path}: {exc.strerror or exc}",)
    if errors:
        for message in errors:
            print(f"invalid: {message}")
        return 1
    print("valid")
    return 0


def run_saves(directory: Path | None) -> int:
    root = directory if directory is not None else Path(load_loop_config().save_dir)
    service = SaveService(SaveRepository(root))
    for metadata in service.list_saves():
        print(
            f"{metadata.slot.value}\ttimestamp={metadata.timestamp}"
            f"\tversion={metadata.version}\tloop_time={metadata.loop_time:.3f}"
        )
    return 0


def run_simulate(
    *,
    duration: float | None,
    scale: float | None,
    step: float,
    ticks: int,
    events_path: Path | None,
) -> int:
    config = load_loop_config()
    engine = RuntimeLoopEngine(
        loop_duration_seconds=duration if duration is not None else config.loop_duration_seconds,
        time_scale=scale if scale is not None else config.time_scale,
    )
    definitions: Sequence[LoopEventDefinition] = ()
    if events_path is not None:
        definitions = payloads_to_definitions(loads(events_path.read_bytes()))

    def _log_fire(_context: object, definition: LoopEventDefinition) -> None:
        logger.info(
            "event_fired id=%s type=%s elapsed=%.3f",
            definition.id,
            definition.type.value,
            engine.elapsed_seconds,
        )

    engine.schedule_events_from_definitions(definitions, _log_fire)
    engine.start()
    for _ in range(max(0, ticks)):
        engine.update(step)
    print(dumps_text(loop_state_to_payload(engine.serialize()), pretty=True))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the timeloop CLI."""
    setup_logging()
    args = build_parser().parse_args(argv)
    if args.command == "validate":
        return run_validate(args.path)
    if args.command == "saves":
        return run_saves(args.dir)
    return run_simulate(
        duration=args.duration,
        scale=args.scale,
        step=args.step,
        ticks=args.ticks,
        events_path=args.events,
    )


if __name__ == "__main__":
    raise SystemExit(main())
