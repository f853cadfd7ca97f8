"""
Storage Services Package

Provides the abstract key-value interface and its implementations.
The expense store only ever talks to KeyValueStorage.
"""

from expense_tracker.services.storage.interface import (
    KeyValueStorage,
    StorageError,
    StorageReadError,
    StorageWriteError,
    StoreNotReadyError,
)
from expense_tracker.services.storage.json_file import JsonFileStorage
from expense_tracker.services.storage.memory import InMemoryStorage

__all__ = [
    # Interface
    "KeyValueStorage",
    # Exceptions
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    "StoreNotReadyError",
    # Implementations
    "InMemoryStorage",
    "JsonFileStorage",
]
