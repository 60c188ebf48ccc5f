"""Entry points for building and querying an index in one call.

Each call opens its own index session and closes it before returning, also
when the build or lookup fails.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any

from .core.config import IndexConfig
from .core.errors import ReadOnlyIndexError
from .core.index import RecordIndex
from .core.types import BuildStats, RecordLocation
from .interfaces.parser import RecordParser


def make_index(
    index_path: str | Path,
    write_flag: bool,
    *files: str | Path,
    record_format: str = "sequence",
    config: IndexConfig | None = None,
) -> BuildStats:
    """Index files into the index at index_path.

    write_flag must be true: an existing index is only ever opened for
    writing when asked to. A failed build raises and leaves a partial index
    that must be rebuilt.
    """
    if not write_flag:
        raise ReadOnlyIndexError(f"make_index on {index_path} requires write_flag")
    if config is None:
        config = IndexConfig(index_path=str(index_path), record_format=record_format)
    config = replace(config, index_path=str(index_path), write_flag=True)

    with RecordIndex(config) as index:
        return index.make_index(*files)


def fetch_record_location(
    index_path: str | Path, identifier: str, record_format: str = "sequence"
) -> RecordLocation | None:
    """Return identifier's (file number, offset), or None if not indexed."""
    with RecordIndex.open(index_path, record_format=record_format) as index:
        return index.locate(identifier)


def fetch_hash(
    index_path: str | Path,
    identifier: str,
    parser: RecordParser | None = None,
    record_format: str = "sequence",
) -> Any | None:
    """Return identifier's record as decoded by parser, or None if not indexed.

    Without a parser the raw record bytes are returned.
    """
    with RecordIndex.open(index_path, record_format=record_format) as index:
        return index.fetch_hash(identifier, parser)
