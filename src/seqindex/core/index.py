"""Index session - main public API.

Owns the key-value store and the file handle cache of one open index and
wires the builder and retriever to them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any, BinaryIO

from ..components.builder import IndexBuilder, check_stamps, file_count
from ..components.extractor import KeyExtractor
from ..components.formats import RecordFormat, get_format
from ..components.handles import FileHandleCache
from ..components.kvstore import SimpleLogStore
from ..components.parser import RawRecordParser
from ..components.retriever import Retriever
from ..components.scanner import RecordScanner
from ..interfaces.parser import RecordParser
from ..interfaces.store import KeyValueStore
from .config import IndexConfig
from .errors import ReadOnlyIndexError
from .types import TYPE_KEY, BuildStats, Key, RecordLocation, RegisteredFile, is_reserved

logger = logging.getLogger(__name__)

StoreFactory = Callable[[IndexConfig], KeyValueStore]


def open_log_store(config: IndexConfig) -> KeyValueStore:
    return SimpleLogStore.open(
        config.index_path, config.store_mode, flush_every_write=config.flush_every_write
    )


class RecordIndex:
    """An open identifier -> record index.

    Args:
        config: Index configuration
        store_factory: Opens the key-value store for config

    Public API:
        - make_index(*files): Index files into a writable index
        - locate(id): Record location or None
        - get_stream(id): Handle seeked to the record or None
        - fetch_hash(id, parser): Parsed record or None
        - count_records(): Number of indexed identifiers
        - files(): Registered files by number

    Invariants:
        - An existing index is checked against the format and version
          stamps before any lookup
        - Store and handles are released by close(), also on errors
    """

    def __init__(self, config: IndexConfig, store_factory: StoreFactory = open_log_store):
        self.config = config
        self.record_format: RecordFormat = get_format(config.record_format)
        self.store = store_factory(config)

        try:
            if not config.write_flag or self.store.get(TYPE_KEY) is not None:
                check_stamps(self.store, self.record_format)
        except Exception:
            self.store.close()
            raise

        self._cache = FileHandleCache(self.store, verify_sizes=config.verify_file_sizes)
        self._retriever = Retriever(self.store, self._cache)
        logger.info(f"Opened {self.record_format.name} index {config.index_path}")

    @classmethod
    def open(cls, index_path: str | Path, write_flag: bool = False, **kwargs: Any) -> RecordIndex:
        return cls(IndexConfig(index_path=str(index_path), write_flag=write_flag, **kwargs))

    def make_index(self, *files: str | Path) -> BuildStats:
        """Index files; requires write access."""
        if not self.config.write_flag:
            raise ReadOnlyIndexError(
                f"Index {self.config.index_path} must be opened with write_flag to build it"
            )

        builder = IndexBuilder(
            self.store,
            self.record_format,
            scanner=RecordScanner(self.record_format.sentinel, self.config.block_size),
            extractor=KeyExtractor(
                self.record_format.keyword, self.record_format.delimiters, self.config.encoding
            ),
        )
        stats = builder.build(files)

        if self.config.compact_after_build and getattr(self.store, "dead_records", 0):
            self.store.compact()
        return stats

    def locate(self, identifier: Key) -> RecordLocation | None:
        return self._retriever.locate(identifier)

    def get_stream(self, identifier: Key) -> BinaryIO | None:
        return self._retriever.get_stream(identifier)

    def fetch_hash(self, identifier: Key, parser: RecordParser | None = None) -> Any | None:
        """Return the parsed record for identifier, or None if not indexed."""
        if parser is None:
            parser = RawRecordParser(self.record_format.sentinel)
        return self._retriever.fetch(identifier, parser)

    def identifiers(self) -> Iterator[Key]:
        """Iterate indexed identifiers in sorted order."""
        for key, _value in self.store.items():
            if not is_reserved(key):
                yield key

    def count_records(self) -> int:
        return sum(1 for _ in self.identifiers())

    def files(self) -> list[RegisteredFile]:
        return [self._cache.registered_file(n) for n in range(file_count(self.store))]

    def compact(self) -> None:
        """Drop overwritten entries from the on-disk index."""
        if not self.config.write_flag:
            raise ReadOnlyIndexError(
                f"Index {self.config.index_path} must be opened with write_flag to compact it"
            )
        self.store.compact()

    def close(self) -> None:
        """Release file handles and close the store."""
        try:
            self._cache.close()
        finally:
            self.store.close()
        logger.debug(f"Closed index {self.config.index_path}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
