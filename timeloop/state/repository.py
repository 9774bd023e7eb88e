"""Persistence layer for save documents."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol


class SaveStore(Protocol):
    """Key-value text storage used by the save service."""

    def read_text(self, key: str) -> str | None: ...

    def write_text(self, key: str, text: str) -> None: ...

    def delete(self, key: str) -> bool: ...

    def keys(self) -> list[str]: ...


class SaveRepository:
    """JSON file repository, one file per key under a root directory."""

    def __init__(self, root: Path) -> None:
        self._root = root
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def read_text(self, key: str) -> str | None:
        path = self._path_for_key(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write_text(self, key: str, text: str) -> None:
        path = self._path_for_key(key)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(text, encoding="utf-8")
        tmp_path.replace(path)

    def delete(self, key: str) -> bool:
        path = self._path_for_key(key)
        if not path.exists():
            return False
        path.unlink()
        return True

    def keys(self) -> list[str]:
        return sorted(path.stem for path in self._root.glob("*.json"))

    def _path_for_key(self, key: str) -> Path:
        return self._root / f"{_validate_key(key)}.json"


class MemorySaveStore:
    """In-process save store for tests and headless sessions."""

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def read_text(self, key: str) -> str | None:
        return self._items.get(_validate_key(key))

    def write_text(self, key: str, text: str) -> None:
        self._items[_validate_key(key)] = text

    def delete(self, key: str) -> bool:
        return self._items.pop(_validate_key(key), None) is not None

    def keys(self) -> list[str]:
        return sorted(self._items)


def _validate_key(key: str) -> str:
    cleaned = key.strip()
    if not cleaned:
        raise ValueError("Save key cannot be empty.")
    if any(not (char.isalnum() or char in {"-", "_"}) for char in cleaned):
        raise ValueError(f"Save key '{key}' contains unsupported characters.")
    return cleaned
