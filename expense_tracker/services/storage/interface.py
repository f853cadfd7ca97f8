"""
Abstract Storage Interface

DESIGN DECISION: Durable storage is a plain string key-value slot store.
The expense store serializes its whole collection into one slot and
replaces it wholesale on every write. This allows us to:
1. Use an in-memory dict for tests
2. Use a directory of JSON files on disk
3. Swap in another backend without touching the store

The interface is intentionally tiny - no partial writes, no queries.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorage(ABC):
    """
    Abstract interface for durable string storage.

    Any backend must implement these methods.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the raw value stored under a key.

        Args:
            key: Slot name

        Returns:
            The stored string, or None if the slot is empty

        Raises:
            StorageReadError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Replace the value stored under a key.

        Args:
            key: Slot name
            value: Complete new value

        Raises:
            StorageWriteError: If the value could not be written
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """
        Empty a slot. Removing an empty slot is not an error.

        Raises:
            StorageWriteError: If the slot could not be cleared
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """Stored value could not be read."""
    pass


class StorageWriteError(StorageError):
    """Value could not be written (disk full, quota exceeded, permissions)."""
    pass


class StoreNotReadyError(StorageError):
    """The expense store was used before it loaded its data."""
    pass
