"""Exception hierarchy for seqindex.

Defines all custom exceptions used throughout the implementation. A missing
identifier is not an error: lookups return None for it.
"""

from __future__ import annotations


class IndexerError(Exception):
    """Base exception for all seqindex errors."""
    pass


class FileOpenError(IndexerError):
    """Raised when an input file or an indexed file cannot be opened."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Can't open {path}: {reason}")


class IncompatibleIndexError(IndexerError):
    """Raised when an index was built for another format or engine version."""

    def __init__(self, key: str, expected: str, found: str | None):
        self.key = key
        self.expected = expected
        self.found = found
        super().__init__(
            f"Incompatible index: {key} is {found!r}, expected {expected!r}; rebuild required"
        )


class StaleIndexError(IncompatibleIndexError):
    """Raised when an indexed file changed size since it was indexed."""

    def __init__(self, path: str, expected_size: int, actual_size: int):
        self.path = path
        self.expected_size = expected_size
        self.actual_size = actual_size
        IndexerError.__init__(
            self,
            f"File {path} is {actual_size} bytes but was {expected_size} bytes "
            f"when indexed; rebuild required",
        )


class MissingRegistryEntryError(IndexerError):
    """Raised when an index entry refers to an unregistered file number."""

    def __init__(self, file_number: int):
        self.file_number = file_number
        super().__init__(f"Can't get filename for index: {file_number}")


class StoreError(IndexerError):
    """Raised when the key-value store cannot be opened or used."""
    pass


class LogCorruptionError(StoreError):
    """Raised when the store's record log is corrupted or invalid."""
    pass


class ReadOnlyIndexError(StoreError):
    """Raised when writing to an index opened without write access."""
    pass
