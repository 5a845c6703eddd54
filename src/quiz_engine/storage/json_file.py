"""
JSON file store

All keys live in one JSON object on disk. Writes go to a temporary file
next to the target and are moved into place, so a crash mid-write never
leaves a truncated file behind.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from .base import KeyValueStore, StorageError


class JSONFileStore(KeyValueStore):
    """Key-value store backed by a single JSON file."""

    def __init__(self, path: Union[str, Path]):
        """
        Initialize store.

        Args:
            path: JSON file to use; created on first write
        """
        self.path = Path(path)

    @property
    def name(self) -> str:
        return "file"

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt state file {self.path}: {e}") from e
        except OSError as e:
            raise StorageError(f"Cannot read state file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"State file {self.path} does not hold a JSON object")
        return data

    def _write(self, data: dict) -> None:
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StorageError(f"Cannot write state file {self.path}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(path={str(self.path)!r})"
