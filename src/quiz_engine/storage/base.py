"""
Base protocol for persistence backends

Session state is stored as one string value per key. The engine only needs
get/set/remove, so any host storage can be plugged in.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..errors import StorageError, StorageAuthenticationError

__all__ = ["KeyValueStore", "StorageError", "StorageAuthenticationError"]


class KeyValueStore(ABC):
    """
    Abstract base class for key-value persistence.

    Implementations raise StorageError on backend failures. A `set` must
    replace the whole value at once: a reader sees the old value or the
    new one, never a mix.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name (e.g., 'memory', 'file', 'cloudflare')."""
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read a value.

        Args:
            key: Record key

        Returns:
            Stored string, or None if the key is absent

        Raises:
            StorageError: On backend failures
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Write a value, replacing any previous one.

        Raises:
            StorageError: On backend failures
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """
        Delete a value. Removing an absent key is not an error.

        Raises:
            StorageError: On backend failures
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
