"""In-memory storage backend, used for tests and throwaway sessions."""

from typing import Optional

from expense_tracker.services.storage.interface import KeyValueStorage, StorageWriteError


class InMemoryStorage(KeyValueStorage):
    """
    Dict-backed storage.

    Setting fail_writes makes every write raise StorageWriteError, which
    is how a full browser quota or a read-only disk looks to the store.
    """

    def __init__(
        self,
        initial: Optional[dict[str, str]] = None,
        fail_writes: bool = False,
    ):
        self._slots: dict[str, str] = dict(initial or {})
        self.fail_writes = fail_writes
        self.write_count = 0

    def get(self, key: str) -> Optional[str]:
        return self._slots.get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageWriteError(f"Quota exceeded while writing '{key}'")
        self._slots[key] = value
        self.write_count += 1

    def remove(self, key: str) -> None:
        if self.fail_writes:
            raise StorageWriteError(f"Quota exceeded while removing '{key}'")
        self._slots.pop(key, None)
