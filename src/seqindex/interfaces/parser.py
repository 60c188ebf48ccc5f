"""Protocol definition for the structural record parser."""

from __future__ import annotations

from typing import Any, BinaryIO, Protocol


class RecordParser(Protocol):
    """Decodes the record that starts at a handle's current position."""

    def next_record(self, fh: BinaryIO) -> Any | None:
        """Parse and return the next record, or None at end of file."""
        ...
