"""Append-only record log backing the key-value store.

Provides a durable, crash-safe log of key/value puts with CRC32 checksums.
"""

from __future__ import annotations

import logging
import os
import struct
import zlib
from collections.abc import Iterator
from pathlib import Path

from ..core.errors import LogCorruptionError, ReadOnlyIndexError, StoreError
from ..core.types import Key, Value

logger = logging.getLogger(__name__)

# Log record format:
# [magic (4B)] [key_len (4B)] [key bytes] [value_len (4B)] [value bytes] [crc32 (4B)]
MAGIC = 0x53514901  # "SQI" + version
_U32 = struct.Struct("<I")


class RecordLog:
    """Append-only log of (key, value) puts.

    Args:
        path: Path to log file
        writable: Open for appending; otherwise the log is only replayed
        flush_every_write: Whether to fsync after each append

    Invariants:
        - Records are written with checksums and replayed in append order
        - A partial record at EOF is skipped during replay
        - discard_torn_tail() cuts that partial record off a writable log
        - A read-only log never creates or modifies the file
    """

    def __init__(self, path: str | Path, writable: bool = False, flush_every_write: bool = False):
        self.path = Path(path)
        self.writable = writable
        self.flush_every_write = flush_every_write
        self._fd = None
        self.valid_end = 0  # end of the last intact record seen by replay
        if writable:
            self._open_for_write()
        elif not self.path.exists():
            raise StoreError(f"No index at {self.path}")

    def _open_for_write(self) -> None:
        """Open log file for appending."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._fd = open(self.path, "ab")
        except OSError as e:
            raise StoreError(f"Can't open index {self.path} for writing: {e}") from e
        logger.debug(f"Opened log {self.path} at offset {self._fd.tell()}")

    def append(self, key: Key, value: Value) -> None:
        """Append one put to the log."""
        if not self.writable:
            raise ReadOnlyIndexError(f"Index {self.path} was opened without write access")
        if self._fd is None:
            raise StoreError(f"Log {self.path} is closed")

        key_bytes = key.encode("utf-8")
        payload = (
            _U32.pack(MAGIC)
            + _U32.pack(len(key_bytes))
            + key_bytes
            + _U32.pack(len(value))
            + value
        )
        self._fd.write(payload + _U32.pack(zlib.crc32(payload)))
        if self.flush_every_write:
            self.sync()

    def sync(self) -> None:
        """Force data to disk (fsync)."""
        if self._fd:
            self._fd.flush()
            os.fsync(self._fd.fileno())

    def truncate(self) -> None:
        """Discard every record in the log."""
        if not self.writable:
            raise ReadOnlyIndexError(f"Index {self.path} was opened without write access")
        self._fd.truncate(0)
        self.sync()
        logger.info(f"Truncated log {self.path}")

    def discard_torn_tail(self) -> None:
        """Cut a partial record left at EOF by a crash, so appends follow intact data.

        Call after a full replay.
        """
        if not self.writable:
            raise ReadOnlyIndexError(f"Index {self.path} was opened without write access")
        self._fd.flush()
        size = self.path.stat().st_size
        if size > self.valid_end:
            self._fd.truncate(self.valid_end)
            self.sync()
            logger.warning(
                f"Discarded {size - self.valid_end} bytes of partial record at end of {self.path}"
            )

    def reopen(self) -> None:
        """Reopen the append handle, e.g. after the file was replaced."""
        if self._fd:
            self._fd.close()
        self._open_for_write()

    def close(self) -> None:
        """Close writer and release resources."""
        if self._fd:
            self.sync()
            self._fd.close()
            self._fd = None
            logger.debug(f"Closed log {self.path}")

    def __iter__(self) -> Iterator[tuple[Key, Value]]:
        """Iterate records in append order.

        Skips a partial record at EOF.
        """
        if self._fd:
            self._fd.flush()
        try:
            f = open(self.path, "rb")
        except FileNotFoundError:
            return
        except OSError as e:
            raise StoreError(f"Can't read index {self.path}: {e}") from e

        self.valid_end = 0
        with f:
            while True:
                start = f.tell()
                magic_bytes = f.read(4)
                if len(magic_bytes) == 0:
                    break  # EOF
                if len(magic_bytes) < 4:
                    logger.warning(f"Partial record at offset {start} in {self.path}, skipping")
                    break

                magic = _U32.unpack(magic_bytes)[0]
                if magic != MAGIC:
                    raise LogCorruptionError(f"Invalid magic {magic:x} at offset {start} in {self.path}")

                key_len_bytes = f.read(4)
                key = f.read(_U32.unpack(key_len_bytes)[0]) if len(key_len_bytes) == 4 else b""
                value_len_bytes = f.read(4)
                value = f.read(_U32.unpack(value_len_bytes)[0]) if len(value_len_bytes) == 4 else b""
                crc_bytes = f.read(4)

                if len(crc_bytes) < 4:
                    logger.warning(f"Partial record at offset {start} in {self.path}, skipping")
                    break

                payload = magic_bytes + key_len_bytes + key + value_len_bytes + value
                stored_crc = _U32.unpack(crc_bytes)[0]
                computed_crc = zlib.crc32(payload)
                if stored_crc != computed_crc:
                    raise LogCorruptionError(
                        f"CRC mismatch at offset {start} in {self.path}: "
                        f"expected {computed_crc:x}, got {stored_crc:x}"
                    )

                self.valid_end = f.tell()
                yield (key.decode("utf-8"), value)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
