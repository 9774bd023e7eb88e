"""Save-slot use cases over a pluggable save store."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from copy import deepcopy
from dataclasses import dataclass, replace
from enum import StrEnum
from pathlib import Path

from timeloop.api.errors import SerializationError, ValidationError
from timeloop.api.logging import LoggerPort
from timeloop.state.game_state import STATE_VERSION, GameState, now_millis, validate_game_state
from timeloop.state.json_codec import dumps_text, loads
from timeloop.state.repository import SaveStore
from timeloop.state.schema import is_number

_LOG = logging.getLogger("timeloop.state")

SAVE_KEY_PREFIX = "timeloop_save_"


class SaveSlot(StrEnum):
    """Named save slots."""

    AUTO = "auto"
    MANUAL1 = "manual1"
    MANUAL2 = "manual2"
    MANUAL3 = "manual3"
    QUICKSAVE = "quicksave"


@dataclass(frozen=True, slots=True)
class SaveMetadata:
    slot: SaveSlot
    timestamp: int
    version: str
    loop_time: float
    play_time: float | None = None


@dataclass(frozen=True, slots=True)
class SaveData:
    metadata: SaveMetadata
    state: GameState


def serialize_state(state: GameState) -> str:
    """Encode a game state as pretty JSON text."""
    return dumps_text(state, pretty=True)


def deserialize_state(text: str | bytes) -> GameState:
    """Parse and validate a game state from JSON text."""
    payload = loads(text)
    result = validate_game_state(payload)
    if not result.valid:
        raise ValidationError(result.errors)
    return payload


def save_data_to_payload(data: SaveData) -> dict[str, object]:
    metadata: dict[str, object] = {
        "slot": data.metadata.slot.value,
        "timestamp": data.metadata.timestamp,
        "version": data.metadata.version,
        "loopTime": data.metadata.loop_time,
    }
    if data.metadata.play_time is not None:
        metadata["playTime"] = data.metadata.play_time
    return {"metadata": metadata, "state": data.state}


def payload_to_metadata(payload: object) -> SaveMetadata:
    """Validate and construct save metadata."""
    if not isinstance(payload, Mapping):
        raise ValidationError(["Save metadata must be an object"])
    errors: list[str] = []
    slot: SaveSlot | None = None
    try:
        slot = SaveSlot(str(payload.get("slot")))
    except ValueError:
        errors.append("Save metadata slot is unknown")
    timestamp = payload.get("timestamp")
    if not is_number(timestamp):
        errors.append("Save metadata timestamp must be a number")
    version = payload.get("version")
    if not isinstance(version, str):
        errors.append("Save metadata version must be a string")
    loop_time = payload.get("loopTime")
    if not is_number(loop_time):
        errors.append("Save metadata loopTime must be a number")
    play_time = payload.get("playTime")
    if play_time is not None and not is_number(play_time):
        errors.append("Save metadata playTime must be a number")
    if errors:
        raise ValidationError(errors)
    return SaveMetadata(
        slot=slot,
        timestamp=int(timestamp),
        version=version,
        loop_time=float(loop_time),
        play_time=None if play_time is None else float(play_time),
    )


def payload_to_save_data(payload: object) -> SaveData:
    """Validate a save document and construct save data."""
    if not isinstance(payload, Mapping):
        raise ValidationError(["Save data must be an object"])
    metadata = payload_to_metadata(payload.get("metadata"))
    state = payload.get("state")
    result = validate_game_state(state)
    if not result.valid:
        raise ValidationError(result.errors)
    return SaveData(metadata=metadata, state=dict(state))


class SaveService:
    """High-level save/load operations with validation and logging."""

    def __init__(
        self,
        store: SaveStore,
        *,
        clock: Callable[[], int] = now_millis,
        logger: LoggerPort | None = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._logger: LoggerPort = logger if logger is not None else _LOG

    def save(
        self,
        slot: SaveSlot,
        state: GameState,
        *,
        play_time: float | None = None,
    ) -> SaveMetadata:
        """Validate and persist ``state`` into ``slot``."""
        result = validate_game_state(state)
        if not result.valid:
            self._logger.error("save_rejected slot=%s errors=%s", slot, list(result.errors))
            raise ValidationError(result.errors)
        metadata = SaveMetadata(
            slot=slot,
            timestamp=self._clock(),
            version=STATE_VERSION,
            loop_time=float(state["loopManager"]["elapsedSeconds"]),
            play_time=play_time,
        )
        data = SaveData(metadata=metadata, state=state)
        try:
            text = dumps_text(save_data_to_payload(data))
        except SerializationError:
            self._logger.exception("save_failed slot=%s", slot)
            raise
        self._store.write_text(_key_for(slot), text)
        self._logger.info("game_saved slot=%s timestamp=%d", slot, metadata.timestamp)
        return metadata

    def load(self, slot: SaveSlot) -> SaveData | None:
        """Load save data from ``slot``; None when the slot is empty."""
        text = self._store.read_text(_key_for(slot))
        if text is None:
            self._logger.debug("save_not_found slot=%s", slot)
            return None
        try:
            data = payload_to_save_data(loads(text))
        except ValidationError as exc:
            self._logger.error("load_failed slot=%s errors=%s", slot, list(exc.errors))
            raise
        self._logger.info("game_loaded slot=%s timestamp=%d", slot, data.metadata.timestamp)
        return data

    def delete(self, slot: SaveSlot) -> bool:
        existed = self._store.delete(_key_for(slot))
        if existed:
            self._logger.info("save_deleted slot=%s", slot)
        return existed

    def has_save(self, slot: SaveSlot) -> bool:
        return self._store.read_text(_key_for(slot)) is not None

    def get_metadata(self, slot: SaveSlot) -> SaveMetadata | None:
        """Return slot metadata without validating the full state."""
        text = self._store.read_text(_key_for(slot))
        if text is None:
            return None
        try:
            return _metadata_from_text(text)
        except ValidationError as exc:
            self._logger.warning(
                "save_metadata_unreadable slot=%s errors=%s", slot, list(exc.errors)
            )
            return None

    def list_saves(self) -> list[SaveMetadata]:
        """Return metadata for every readable save, newest first."""
        saves: list[SaveMetadata] = []
        for key in self._store.keys():
            if not key.startswith(SAVE_KEY_PREFIX):
                continue
            text = self._store.read_text(key)
            if text is None:
                continue
            try:
                saves.append(_metadata_from_text(text))
            except ValidationError as exc:
                self._logger.warning(
                    "save_corrupted_skipped key=%s errors=%s", key, list(exc.errors)
                )
        saves.sort(key=lambda item: item.timestamp, reverse=True)
        return saves

    def clear_all(self) -> int:
        count = 0
        for key in self._store.keys():
            if key.startswith(SAVE_KEY_PREFIX) and self._store.delete(key):
                count += 1
        self._logger.info("saves_cleared count=%d", count)
        return count

    def clone(self, source: SaveSlot, target: SaveSlot) -> bool:
        """Copy a save into another slot; False when the source is empty."""
        data = self.load(source)
        if data is None:
            self._logger.warning("clone_source_missing source=%s", source)
            return False
        self._write(self._retarget(data, target))
        self._logger.info("save_cloned source=%s target=%s", source, target)
        return True

    def export_to_file(self, slot: SaveSlot, directory: Path) -> Path:
        """Write a slot's save document as pretty JSON and return the path."""
        data = self.load(slot)
        if data is None:
            raise FileNotFoundError(f"No save found in slot: {slot}")
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{SAVE_KEY_PREFIX}{slot}_{self._clock()}.json"
        path.write_text(dumps_text(save_data_to_payload(data), pretty=True), encoding="utf-8")
        self._logger.info("save_exported slot=%s path=%s", slot, path)
        return path

    def import_from_file(self, path: Path, target: SaveSlot) -> SaveData:
        """Validate a save document file and store it into ``target``."""
        try:
            data = payload_to_save_data(loads(path.read_bytes()))
        except ValidationError as exc:
            self._logger.error("import_failed path=%s errors=%s", path, list(exc.errors))
            raise
        original_slot = data.metadata.slot
        imported = self._retarget(data, target)
        self._write(imported)
        self._logger.info("save_imported target=%s original=%s", target, original_slot)
        return imported

    def _retarget(self, data: SaveData, target: SaveSlot) -> SaveData:
        metadata = replace(data.metadata, slot=target, timestamp=self._clock())
        return SaveData(metadata=metadata, state=deepcopy(data.state))

    def _write(self, data: SaveData) -> None:
        self._store.write_text(_key_for(data.metadata.slot), dumps_text(save_data_to_payload(data)))


def _metadata_from_text(text: str) -> SaveMetadata:
    payload = loads(text)
    if not isinstance(payload, Mapping):
        raise ValidationError(["Save data must be an object"])
    return payload_to_metadata(payload.get("metadata"))


def _key_for(slot: SaveSlot) -> str:
    return f"{SAVE_KEY_PREFIX}{SaveSlot(slot).value}"
