"""seqindex core: configuration, errors, types and the index session."""

from .index import RecordIndex

__all__ = ["RecordIndex"]
