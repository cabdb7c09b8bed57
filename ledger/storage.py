"""Persistence adapters the ledger session loads from and saves to."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional, Protocol

from .exceptions import PersistenceError

logger = logging.getLogger(__name__)

EXPENSES_KEY = "expenses-v1"
CATEGORIES_KEY = "expense-categories-v1"


class Storage(Protocol):
    """Durable key/value contract: raw bytes in, raw bytes out."""

    def load(self, key: str) -> Optional[bytes]:
        ...

    def save(self, key: str, data: bytes) -> None:
        ...


class FileStorage:
    """File-based storage with crash-safe writes, one file per key."""

    def __init__(self, base_path: Path) -> None:
        self._base_path = Path(base_path)
        self._base_path.mkdir(parents=True, exist_ok=True)

    def load(self, key: str) -> Optional[bytes]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_bytes()
        except OSError as exc:
            raise PersistenceError(f"Unable to read from {path}") from exc

    def save(self, key: str, data: bytes) -> None:
        path = self._path_for(key)
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with temp_path.open("wb") as handle:
                handle.write(data)
                handle.flush()
            # replace() is atomic on POSIX, so readers never see a half-written file.
            temp_path.replace(path)
        except OSError as exc:
            logger.error("Failed to persist %s: %s", key, exc)
            raise PersistenceError(f"Unable to write to {path}") from exc

    def _path_for(self, key: str) -> Path:
        return self._base_path / f"{key}.json"

    @property
    def base_path(self) -> Path:
        return self._base_path


class MemoryStorage:
    """In-process storage, handy for tests and for embedding the engine."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None) -> None:
        self._data: Dict[str, bytes] = dict(initial or {})

    def load(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def save(self, key: str, data: bytes) -> None:
        self._data[key] = bytes(data)
