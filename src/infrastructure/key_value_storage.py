"""
Key-Value Storage Module

A flat string key-value namespace in the shape of a mobile async storage:
each logical collection is one JSON-encoded string under one key.

Writes inside transaction() are applied all-or-nothing; the JSON file
backend commits them with a single atomic file replace.
"""

import json
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from infrastructure.logger import get_logger

logger = get_logger("KeyValueStorage")


# ==============================================================================
# Custom Exceptions
# ==============================================================================
class AttendanceStoreError(Exception):
    """Base exception for record store errors."""
    pass


class StorageError(AttendanceStoreError):
    """Raised when the underlying storage cannot be read or written."""
    pass


# ==============================================================================
# Storage Backends
# ==============================================================================
class KeyValueStorage(ABC):
    """
    Abstract string key-value storage.

    Subclasses provide _load() and _persist(); this base class handles
    locking and transactional buffering.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._depth = 0
        self._data: Dict[str, str] = {}
        self._snapshot: Optional[Dict[str, str]] = None

    @abstractmethod
    def _load(self) -> Dict[str, str]:
        """Read the full namespace from the backend."""
        pass

    @abstractmethod
    def _persist(self, data: Dict[str, str]) -> None:
        """Write the full namespace to the backend."""
        pass

    def get_item(self, key: str) -> Optional[str]:
        """Get the value stored under key, or None."""
        with self._lock:
            if self._depth == 0:
                self._data = self._load()
            return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        """Store value under key."""
        if not isinstance(value, str):
            raise StorageError(f"Value for {key} must be a string")
        with self.transaction():
            self._data[key] = value

    def remove_item(self, key: str) -> None:
        """Remove key if present."""
        with self.transaction():
            self._data.pop(key, None)

    def keys(self) -> List[str]:
        """List stored keys."""
        with self._lock:
            if self._depth == 0:
                self._data = self._load()
            return list(self._data.keys())

    @contextmanager
    def transaction(self) -> Iterator["KeyValueStorage"]:
        """
        Group reads and writes into one atomic unit.

        Re-entrant: nested transactions join the outermost one. If the
        block raises, or the final write fails, the namespace is rolled
        back and the exception propagates.
        """
        with self._lock:
            if self._depth == 0:
                self._data = self._load()
                self._snapshot = dict(self._data)
            self._depth += 1
            try:
                yield self
                if self._depth == 1 and self._data != self._snapshot:
                    self._persist(self._data)
            except BaseException:
                if self._depth == 1:
                    self._data = dict(self._snapshot)
                raise
            finally:
                self._depth -= 1
                if self._depth == 0:
                    self._snapshot = None


class InMemoryStorage(KeyValueStorage):
    """Volatile storage, used for tests and dry runs."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        super().__init__()
        self._committed: Dict[str, str] = dict(initial or {})

    def _load(self) -> Dict[str, str]:
        return dict(self._committed)

    def _persist(self, data: Dict[str, str]) -> None:
        self._committed = dict(data)


class JsonFileStorage(KeyValueStorage):
    """
    Storage backed by one JSON object file: {key: value-string}.

    A missing file is an empty namespace. Writes go to a temporary file
    in the same directory which then replaces the target.
    """

    def __init__(self, path: Path):
        super().__init__()
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Cannot read storage file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Storage file {self.path} is not a JSON object")
        return data

    def _persist(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=self.path.name, suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.remove(tmp_name)
                raise
        except OSError as e:
            raise StorageError(f"Cannot write storage file {self.path}: {e}") from e
        logger.debug(f"Wrote {len(data)} keys to {self.path}")
