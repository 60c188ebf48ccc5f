"""seqindex - identifier to byte-offset index for record-oriented flat files."""

from .api import fetch_hash, fetch_record_location, make_index
from .components.formats import SEQUENCE, RecordFormat, get_format, register_format
from .core.config import IndexConfig
from .core.errors import (
    FileOpenError,
    IncompatibleIndexError,
    IndexerError,
    LogCorruptionError,
    MissingRegistryEntryError,
    ReadOnlyIndexError,
    StaleIndexError,
    StoreError,
)
from .core.index import RecordIndex
from .core.types import BuildStats, Chunk, RecordLocation, RegisteredFile

__all__ = [
    "make_index",
    "fetch_record_location",
    "fetch_hash",
    "RecordIndex",
    "IndexConfig",
    "RecordFormat",
    "SEQUENCE",
    "get_format",
    "register_format",
    "IndexerError",
    "FileOpenError",
    "IncompatibleIndexError",
    "StaleIndexError",
    "MissingRegistryEntryError",
    "StoreError",
    "LogCorruptionError",
    "ReadOnlyIndexError",
    "BuildStats",
    "Chunk",
    "RecordLocation",
    "RegisteredFile",
]
