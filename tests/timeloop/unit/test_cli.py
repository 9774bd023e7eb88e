from __future__ import annotations

from pathlib import Path

import orjson

from timeloop.main import main
from timeloop.state.game_state import create_empty_game_state
from timeloop.state.repository import SaveRepository
from timeloop.state.service import SaveService, SaveSlot


def _write_json(path: Path, payload: object) -> Path:
    path.write_bytes(orjson.dumps(payload))
    return path


def test_validate_accepts_game_state_file(tmp_path: Path, capsys) -> None:
    path = _write_json(tmp_path / "state.json", create_empty_game_state())

    assert main(["validate", str(path)]) == 0
    assert capsys.readouterr().out.strip() == "valid"


def test_validate_reports_each_error(tmp_path: Path, capsys) -> None:
    state = create_empty_game_state()
    del state["hourlyCycle"]
    state["loopManager"]["events"] = None
    path = _write_json(tmp_path / "state.json", state)

    assert main(["validate", str(path)]) == 1
    lines = capsys.readouterr().out.splitlines()
    assert "invalid: State must have hourlyCycle" in lines
    assert "invalid: loopManager.events must be an array" in lines


def test_validate_reports_malformed_json(tmp_path: Path, capsys) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{", encoding="utf-8")

    assert main(["validate", str(path)]) == 1
    assert capsys.readouterr().out.startswith("invalid: State is not valid JSON")


def test_saves_lists_slots_newest_first(tmp_path: Path, capsys) -> None:
    clock = iter([1000, 2000])
    service = SaveService(SaveRepository(tmp_path), clock=lambda: next(clock))
    service.save(SaveSlot.MANUAL1, create_empty_game_state())
    service.save(SaveSlot.QUICKSAVE, create_empty_game_state())

    assert main(["saves", "--dir", str(tmp_path)]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert [line.split("\t")[0] for line in lines] == ["quicksave", "manual1"]


def test_simulate_prints_wrapped_loop_state(tmp_path: Path, capsys) -> None:
    events = _write_json(
        tmp_path / "events.json", [{"id": "crime", "triggerTime": 5, "type": "crime"}]
    )

    exit_code = main(
        [
            "simulate",
            "--duration", "10",
            "--scale", "1",
            "--step", "1",
            "--ticks", "12",
            "--events", str(events),
        ]
    )

    assert exit_code == 0
    payload = orjson.loads(capsys.readouterr().out)
    assert payload["elapsedSeconds"] == 2.0
    assert payload["isRunning"] is True
    assert payload["events"] == [{"id": "crime", "triggerTime": 5.0, "isRepeating": False}]


def test_validate_reports_unreadable_file(tmp_path: Path, capsys) -> None:
    missing = tmp_path / "missing.json"

    assert main(["validate", str(missing)]) == 1
    assert capsys.readouterr().out.startswith(f"invalid: cannot read {missing}")
