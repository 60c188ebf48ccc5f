"""Configuration for seqindex.

Defines all tunable parameters of an index session.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any


@dataclass
class IndexConfig:
    """Configuration parameters for an index session.

    Attributes:
        index_path: Path of the index file (the store's record log)
        write_flag: Open the index for writing; required by make_index
        overwrite: Start from an empty index even if the file exists
        record_format: Name of the record format the index is built for
        block_size: Bytes read per block while scanning input files
        encoding: Encoding used to decode extracted identifiers
        flush_every_write: Whether to fsync the log after each put
        compact_after_build: Rewrite the log without dead entries after a build
        verify_file_sizes: Check indexed files still have their indexed size
    """

    index_path: str
    write_flag: bool = False
    overwrite: bool = False
    record_format: str = "sequence"
    block_size: int = 1024 * 1024  # 1 MB
    encoding: str = "utf-8"
    flush_every_write: bool = False
    compact_after_build: bool = True
    verify_file_sizes: bool = True

    def __post_init__(self):
        self.index_path = str(self.index_path)
        if self.block_size <= 0:
            raise ValueError(f"block_size must be positive, got {self.block_size}")

    @property
    def store_mode(self) -> str:
        """Mode the key-value store is opened with."""
        if not self.write_flag:
            return "r"
        return "n" if self.overwrite else "w"

    @classmethod
    def from_toml(cls, path: str | Path, **overrides: Any) -> IndexConfig:
        """Load configuration from a TOML file; keyword overrides win."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        data = tomllib.loads(path.read_text(encoding="utf-8"))

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys in {path}: {', '.join(sorted(unknown))}")

        data.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**data)
