"""Protocol definition for the Key-Value Store."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol

from ..core.types import Key, Value


class KeyValueStore(Protocol):
    """Persistent mapping from string keys to opaque byte values."""

    @classmethod
    def open(cls, path: str, mode: str = "r") -> KeyValueStore:
        """Open the store at path.

        Modes: "r" read-only, "w" read-write (create if missing),
        "n" read-write starting from an empty store.
        """
        ...

    def get(self, key: Key) -> Value | None:
        """Return the value for key or None if not present."""
        ...

    def put(self, key: Key, value: Value) -> None:
        """Insert or overwrite key; durable after sync() or close()."""
        ...

    def items(self) -> Iterator[tuple[Key, Value]]:
        """Iterate (key, value) pairs in key order."""
        ...

    def close(self) -> None:
        """Flush pending writes and release resources."""
        ...
