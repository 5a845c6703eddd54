"""
In-memory store

Keeps values in a dict. Nothing survives the process; useful for tests and
for hosts that don't persist progress.
"""

from typing import Optional

from .base import KeyValueStore


class MemoryStore(KeyValueStore):
    """Dict-backed key-value store."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    @property
    def name(self) -> str:
        return "memory"

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)
