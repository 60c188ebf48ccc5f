"""Retriever.

Resolves identifiers to record locations and positions file handles for a
structural parser. Never parses record content itself.
"""

from __future__ import annotations

import logging
from typing import Any, BinaryIO

from ..core.types import Key, RecordLocation, is_reserved
from ..interfaces.parser import RecordParser
from ..interfaces.store import KeyValueStore
from .handles import FileHandleCache

logger = logging.getLogger(__name__)


class Retriever:
    """Look up identifiers and seek to their records.

    Args:
        store: Store holding index entries
        cache: Handle cache of the same index session
    """

    def __init__(self, store: KeyValueStore, cache: FileHandleCache):
        self.store = store
        self.cache = cache

    def locate(self, identifier: Key) -> RecordLocation | None:
        """Return where identifier's record starts, or None if not indexed."""
        if is_reserved(identifier):
            return None
        value = self.store.get(identifier)
        if value is None:
            logger.debug(f"Identifier {identifier!r} not in index")
            return None
        return RecordLocation.unpack(value)

    def get_stream(self, identifier: Key) -> BinaryIO | None:
        """Return the cached handle seeked to identifier's record.

        The handle is shared with other lookups on the same file.
        """
        location = self.locate(identifier)
        if location is None:
            return None
        fh = self.cache.handle_for(location.file_number)
        fh.seek(location.offset)
        return fh

    def fetch(self, identifier: Key, parser: RecordParser) -> Any | None:
        """Seek to identifier's record and return parser's decode of it."""
        location = self.locate(identifier)
        if location is None:
            return None
        fh, lock = self.cache.entry_for(location.file_number)
        with lock:
            fh.seek(location.offset)
            return parser.next_record(fh)
