"""
JSON File Storage Implementation

DESIGN DECISION: Each storage key maps to one file, <key>.json, inside a
data directory. The file holds the raw value exactly as the store
serialized it.

Writes are atomic: the value goes to a temporary file next to the target,
is flushed and fsynced, then renamed over the target with os.replace.
A crash mid-write leaves the previous value intact instead of a truncated
file.

TRADEOFFS:
- Whole-file rewrites on every mutation (fine for a personal ledger)
- No locking; one process owns the directory
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional

import structlog
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from expense_tracker.services.storage.interface import (
    KeyValueStorage,
    StorageReadError,
    StorageWriteError,
)


_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")

logger = structlog.get_logger(__name__)


class JsonFileStorage(KeyValueStorage):
    """
    Directory-backed storage with atomic replace-on-write.

    Transient OSErrors during a write are retried with exponential
    backoff; if every attempt fails, StorageWriteError is raised.
    """

    def __init__(
        self,
        directory: str | Path,
        write_attempts: int = 3,
        fsync: bool = True,
    ):
        """
        Initialize file storage.

        Args:
            directory: Where the slot files live. Created on first write.
            write_attempts: Attempts per write before giving up.
            fsync: Whether to fsync the file and directory after writing.
        """
        self._directory = Path(directory)
        self._write_attempts = max(1, write_attempts)
        self._fsync = fsync

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        """File that holds the given key."""
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(f"Could not read {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self._write_attempts),
                wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
                retry=retry_if_exception_type(OSError),
                reraise=True,
            ):
                with attempt:
                    self._write_atomic(path, value)
        except OSError as e:
            raise StorageWriteError(f"Could not write {path}: {e}") from e

    def remove(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageWriteError(f"Could not remove {path}: {e}") from e

    def _write_atomic(self, path: Path, value: str) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)

        temp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="wb",
                suffix=".tmp",
                prefix=path.name + "-",
                dir=self._directory,
                delete=False,
            ) as tf:
                temp_name = tf.name
                tf.write(value.encode("utf-8"))
                tf.flush()
                if self._fsync:
                    os.fsync(tf.fileno())

            os.replace(temp_name, path)
            temp_name = None
        finally:
            if temp_name and os.path.exists(temp_name):
                try:
                    os.unlink(temp_name)
                except OSError:
                    logger.warning("temp_file_cleanup_failed", temp_file=temp_name)

        if self._fsync:
            self._fsync_directory()

    def _fsync_directory(self) -> None:
        # Not every platform allows opening a directory for fsync.
        try:
            dir_fd = os.open(self._directory, os.O_RDONLY)
        except OSError:
            return
        try:
            os.fsync(dir_fd)
        except OSError as e:
            logger.debug("directory_fsync_failed", directory=str(self._directory), error=str(e))
        finally:
            os.close(dir_fd)
