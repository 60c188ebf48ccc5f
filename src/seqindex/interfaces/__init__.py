"""Protocols for the capabilities injected into the indexing engine."""

from .parser import RecordParser
from .store import KeyValueStore

__all__ = ["KeyValueStore", "RecordParser"]
