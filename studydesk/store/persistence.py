"""
Key-value storage and the snapshot repository.

Storage is a flat string-keyed namespace of string values. Files on disk
live under ``<data_dir>/<key>.json``, one file per key, like the JSON
session files of a study session store.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Protocol, runtime_checkable

from loguru import logger

from studydesk.core.models import DashboardState
from studydesk.errors import SnapshotDecodeError
from studydesk.store.schema import decode_snapshot, encode_snapshot

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


@runtime_checkable
class KeyValueStorage(Protocol):
    """Minimal storage surface the store needs."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStorage:
    """In-process storage, used by tests and dry runs."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStorage:
    """
    One JSON file per key in a directory.

    Writes go to a temporary sibling file first and are then renamed over
    the target, so a crash mid-write never leaves a truncated snapshot.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory).expanduser()
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(value, encoding="utf-8")
        os.replace(tmp, path)

    def remove(self, key: str) -> None:
        path = self.path_for(key)
        if path.exists():
            path.unlink()


class SnapshotRepository:
    """
    Loads and saves the dashboard snapshot under one storage key.

    Args:
        storage: Backing storage
        key: Storage key of the snapshot
    """

    def __init__(self, storage: KeyValueStorage, key: str):
        self.storage = storage
        self.key = key

    def load(self) -> DashboardState | None:
        """
        Read the stored snapshot.

        Returns:
            Decoded state, or None when nothing is stored or the stored value
            cannot be read or parsed (the caller falls back to defaults).
        """
        try:
            raw = self.storage.get(self.key)
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Failed to read snapshot '{}': {}", self.key, e)
            return None
        if raw is None:
            logger.debug("No stored snapshot under '{}'", self.key)
            return None

        try:
            state = decode_snapshot(raw)
        except (SnapshotDecodeError, RecursionError) as e:
            logger.error("Failed to load snapshot '{}': {}", self.key, e)
            return None

        logger.debug("Loaded snapshot '{}'", self.key)
        return state

    def save(self, state: DashboardState) -> bool:
        """
        Write the full snapshot.

        Write failures are logged and swallowed; in-memory state stays
        authoritative until the next successful save.

        Returns:
            True if the write succeeded
        """
        try:
            self.storage.set(self.key, encode_snapshot(state))
        except OSError as e:
            logger.error("Failed to save snapshot '{}': {}", self.key, e)
            return False
        return True
