"""Log-structured key-value store used as the persistent index.

Uses sortedcontainers.SortedDict for the in-memory view and a RecordLog
for durability.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path

from sortedcontainers import SortedDict

from ..core.errors import ReadOnlyIndexError, StoreError
from ..core.types import Key, Value
from .kvlog import RecordLog

logger = logging.getLogger(__name__)

MODES = ("r", "w", "n")


class SimpleLogStore:
    """Persistent string -> bytes mapping.

    Args:
        path: Path to the store's log file
        mode: "r" read-only, "w" read-write creating if missing,
            "n" read-write starting empty
        flush_every_write: Whether to fsync after each put

    Invariants:
        - Every put goes to the log before the in-memory view
        - The latest put for a key wins on replay
        - Keys iterate in sorted order
    """

    def __init__(self, path: str | Path, mode: str = "r", flush_every_write: bool = False):
        if mode not in MODES:
            raise ValueError(f"Invalid store mode {mode!r}, expected one of {MODES}")

        self.path = Path(path)
        self.mode = mode
        self._data: SortedDict = SortedDict()
        self._dead = 0
        self._log = RecordLog(self.path, writable=mode != "r", flush_every_write=flush_every_write)

        if mode == "n":
            self._log.truncate()
        else:
            self._recover()

        logger.info(f"Opened index store {self.path} (mode={mode}, {len(self._data)} keys)")

    @classmethod
    def open(cls, path: str | Path, mode: str = "r", **kwargs) -> SimpleLogStore:
        return cls(path, mode, **kwargs)

    def _recover(self) -> None:
        """Rebuild the in-memory view from the log."""
        count = 0
        for key, value in self._log:
            if key in self._data:
                self._dead += 1
            self._data[key] = value
            count += 1
        if self.writable:
            self._log.discard_torn_tail()
        logger.debug(f"Replayed {count} records from {self.path}")

    @property
    def writable(self) -> bool:
        return self.mode != "r"

    def get(self, key: Key) -> Value | None:
        """Return value for key or None."""
        return self._data.get(key)

    def put(self, key: Key, value: Value) -> None:
        """Insert or overwrite key with value."""
        if not self.writable:
            raise ReadOnlyIndexError(f"Index {self.path} was opened without write access")
        self._log.append(key, value)
        if key in self._data:
            self._dead += 1
        self._data[key] = value

    def items(self) -> Iterator[tuple[Key, Value]]:
        """Iterate (key, value) pairs in key order."""
        yield from self._data.items()

    def keys(self) -> Iterator[Key]:
        yield from self._data.keys()

    def __contains__(self, key: Key) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    @property
    def dead_records(self) -> int:
        """Number of overwritten records still present in the log."""
        return self._dead

    def sync(self) -> None:
        self._log.sync()

    def compact(self) -> None:
        """Rewrite the log with only the live records.

        The new log is written to a temp file and renamed over the old one.
        """
        if not self.writable:
            raise ReadOnlyIndexError(f"Index {self.path} was opened without write access")

        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with RecordLog(temp_path, writable=True) as temp_log:
                temp_log.truncate()
                for key, value in self._data.items():
                    temp_log.append(key, value)
            os.replace(temp_path, self.path)
        except OSError as e:
            raise StoreError(f"Failed to compact {self.path}: {e}") from e

        self._log.reopen()
        logger.info(f"Compacted {self.path}: dropped {self._dead} dead records")
        self._dead = 0

    def close(self) -> None:
        """Close store and release resources."""
        self._log.close()
        logger.debug(f"Closed index store {self.path}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
