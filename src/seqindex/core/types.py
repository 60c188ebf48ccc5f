"""Common type definitions for seqindex.

Defines the records that flow between the scanner, builder and retriever,
and the packing of index values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

# Store primitive types
Key = str
Value = bytes

# Reserved store keys; extracted identifiers never start with this prefix
RESERVED_PREFIX = "__"
TYPE_KEY = "__TYPE"
VERSION_KEY = "__VERSION"
FILE_COUNT_KEY = "__FILE_COUNT"
FILE_KEY_TEMPLATE = "__FILE_{}"

# Layout version of the index written by this engine
INDEX_VERSION = "1"

# Fields inside a value are joined with the ASCII file separator
FIELD_SEPARATOR = "\x1c"


def file_key(file_number: int) -> Key:
    """Return the registry key for a file number."""
    return FILE_KEY_TEMPLATE.format(file_number)


def is_reserved(key: Key) -> bool:
    return key.startswith(RESERVED_PREFIX)


def pack_record(*fields: object) -> Value:
    """Join fields into a stored value."""
    return FIELD_SEPARATOR.join(str(f) for f in fields).encode("utf-8")


def unpack_record(value: Value) -> list[str]:
    """Split a stored value back into its fields."""
    return value.decode("utf-8").split(FIELD_SEPARATOR)


class Chunk(NamedTuple):
    """Bytes between two sentinels and the offset of the record they belong to.

    offset is None for the chunk that precedes the first sentinel.
    """

    data: bytes
    offset: int | None


@dataclass(frozen=True)
class RecordLocation:
    """Where an identified record starts."""

    file_number: int
    offset: int

    def pack(self) -> Value:
        return pack_record(self.file_number, self.offset)

    @classmethod
    def unpack(cls, value: Value) -> RecordLocation:
        file_number, offset = unpack_record(value)
        return cls(int(file_number), int(offset))


@dataclass(frozen=True)
class RegisteredFile:
    """A FileRegistry row: the indexed path and its size at index time."""

    file_number: int
    path: str
    size: int

    def pack(self) -> Value:
        return pack_record(self.path, self.size)

    @classmethod
    def unpack(cls, file_number: int, value: Value) -> RegisteredFile:
        path, size = value.decode("utf-8").rsplit(FIELD_SEPARATOR, 1)
        return cls(file_number, path, int(size))


@dataclass
class BuildStats:
    """Counters reported by a build."""

    files: int = 0
    records: int = 0
    identifiers: int = 0
    skipped: int = 0
