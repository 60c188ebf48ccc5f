"""Index builder.

Runs the scanner and extractor over a list of files and writes
identifier -> (file number, offset) entries plus file registry and stamp
entries straight into the store.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from ..core.errors import FileOpenError, IncompatibleIndexError, ReadOnlyIndexError
from ..core.types import (
    FILE_COUNT_KEY,
    INDEX_VERSION,
    TYPE_KEY,
    VERSION_KEY,
    BuildStats,
    RecordLocation,
    RegisteredFile,
    file_key,
    is_reserved,
)
from ..interfaces.store import KeyValueStore
from .extractor import KeyExtractor
from .formats import RecordFormat
from .scanner import RecordScanner

logger = logging.getLogger(__name__)


def check_stamps(store: KeyValueStore, record_format: RecordFormat) -> None:
    """Raise IncompatibleIndexError unless the store's stamps match."""
    for key, expected in ((TYPE_KEY, record_format.type_stamp), (VERSION_KEY, INDEX_VERSION)):
        found = store.get(key)
        found_str = found.decode("utf-8") if found is not None else None
        if found_str != expected:
            raise IncompatibleIndexError(key, expected, found_str)


def file_count(store: KeyValueStore) -> int:
    """Number of files registered in the store."""
    value = store.get(FILE_COUNT_KEY)
    return int(value.decode("utf-8")) if value is not None else 0


class IndexBuilder:
    """Populate a store with the records of one or more files.

    Args:
        store: Writable key-value store
        record_format: Format the files are in
        scanner: Splits files into chunks (default: on the format's sentinel)
        extractor: Finds identifiers in chunks (default: the format's keyword)

    Invariants:
        - Stamps are written or verified before any file is read
        - A file is registered before any of its entries is written
        - A failed build propagates its error and leaves a partial index
    """

    def __init__(
        self,
        store: KeyValueStore,
        record_format: RecordFormat,
        scanner: RecordScanner | None = None,
        extractor: KeyExtractor | None = None,
    ):
        self.store = store
        self.record_format = record_format
        self.scanner = scanner or RecordScanner(record_format.sentinel)
        self.extractor = extractor or KeyExtractor(
            record_format.keyword, record_format.delimiters
        )

    def _write_stamps(self) -> None:
        """Stamp a fresh store or verify the stamps of an existing one."""
        if self.store.get(TYPE_KEY) is None and self.store.get(VERSION_KEY) is None:
            self.store.put(TYPE_KEY, self.record_format.type_stamp.encode("utf-8"))
            self.store.put(VERSION_KEY, INDEX_VERSION.encode("utf-8"))
            logger.info(f"Stamped new index as {self.record_format.type_stamp} v{INDEX_VERSION}")
        else:
            check_stamps(self.store, self.record_format)

    def build(self, files: Iterable[str | Path]) -> BuildStats:
        """Index every file in order; file numbers continue the registry."""
        if not getattr(self.store, "writable", True):
            raise ReadOnlyIndexError("make_index requires an index opened with write access")

        self._write_stamps()
        stats = BuildStats()
        next_number = file_count(self.store)

        for path in files:
            self.index_file(path, next_number, stats)
            next_number += 1
            self.store.put(FILE_COUNT_KEY, str(next_number).encode("utf-8"))
            stats.files += 1

        logger.info(
            f"Indexed {stats.files} files: {stats.records} records, "
            f"{stats.identifiers} identifiers"
        )
        return stats

    def index_file(self, path: str | Path, file_number: int, stats: BuildStats | None = None) -> BuildStats:
        """Register path as file_number and index its records."""
        stats = stats if stats is not None else BuildStats()
        path = os.path.abspath(path)
        try:
            size = os.path.getsize(path)
        except OSError as e:
            raise FileOpenError(path, e.strerror or str(e)) from e

        entry = RegisteredFile(file_number, path, size)
        self.store.put(file_key(file_number), entry.pack())
        logger.debug(f"Registered file {file_number}: {path} ({size} bytes)")

        found = 0
        for chunk in self.scanner.scan(path):
            identifiers = self.extractor.extract(chunk.data)
            if not identifiers:
                continue
            if chunk.offset is None:
                logger.debug(f"Ignoring {len(identifiers)} identifiers before first record in {path}")
                stats.skipped += len(identifiers)
                continue

            stats.records += 1
            value = RecordLocation(file_number, chunk.offset).pack()
            for identifier in identifiers:
                if is_reserved(identifier):
                    logger.warning(f"Skipping reserved identifier {identifier!r} in {path}")
                    stats.skipped += 1
                    continue
                self.store.put(identifier, value)
                found += 1

        stats.identifiers += found
        logger.info(f"Indexed {path} as file {file_number}: {found} identifiers")
        return stats
