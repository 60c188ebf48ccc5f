"""File handle cache.

Lazily opens one read handle per indexed file and keeps it for the life of
the index session.
"""

from __future__ import annotations

import logging
import os
import threading
from typing import BinaryIO

from ..core.errors import FileOpenError, MissingRegistryEntryError, StaleIndexError
from ..core.types import RegisteredFile, file_key
from ..interfaces.store import KeyValueStore

logger = logging.getLogger(__name__)


class FileHandleCache:
    """Memoized read handles keyed by file number.

    Args:
        store: Store holding the file registry
        verify_sizes: Refuse files whose size changed since indexing

    Invariants:
        - At most one handle per file number
        - Handles are only released by close()
        - The handle map is guarded by a lock; lock_for() guards each handle
    """

    def __init__(self, store: KeyValueStore, verify_sizes: bool = True):
        self.store = store
        self.verify_sizes = verify_sizes
        self._handles: dict[int, BinaryIO] = {}
        self._handle_locks: dict[int, threading.Lock] = {}
        self._lock = threading.Lock()

    def registered_file(self, file_number: int) -> RegisteredFile:
        """Return the registry row for file_number."""
        value = self.store.get(file_key(file_number))
        if value is None:
            raise MissingRegistryEntryError(file_number)
        return RegisteredFile.unpack(file_number, value)

    def entry_for(self, file_number: int) -> tuple[BinaryIO, threading.Lock]:
        """Return file_number's handle and its lock, opening the file on first use."""
        with self._lock:
            fh = self._handles.get(file_number)
            if fh is None:
                fh = self._open(file_number)
                self._handles[file_number] = fh
                self._handle_locks[file_number] = threading.Lock()
            return fh, self._handle_locks[file_number]

    def handle_for(self, file_number: int) -> BinaryIO:
        """Return the open handle for file_number, opening it on first use."""
        return self.entry_for(file_number)[0]

    def lock_for(self, file_number: int) -> threading.Lock:
        """Lock that makes seek+read on file_number's handle atomic."""
        return self.entry_for(file_number)[1]

    def _open(self, file_number: int) -> BinaryIO:
        entry = self.registered_file(file_number)
        try:
            fh = open(entry.path, "rb")
        except OSError as e:
            raise FileOpenError(entry.path, e.strerror or str(e)) from e

        if self.verify_sizes:
            actual = os.fstat(fh.fileno()).st_size
            if actual != entry.size:
                fh.close()
                raise StaleIndexError(entry.path, entry.size, actual)

        logger.debug(f"Opened handle for file {file_number}: {entry.path}")
        return fh

    def __len__(self) -> int:
        return len(self._handles)

    def close(self) -> None:
        """Close every cached handle."""
        with self._lock:
            for fh in self._handles.values():
                fh.close()
            count = len(self._handles)
            self._handles.clear()
            self._handle_locks.clear()
        if count:
            logger.debug(f"Closed {count} file handles")
