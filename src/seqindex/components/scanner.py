"""Record scanner.

Streams a flat file and splits it into chunks on a multi-byte sentinel, the
way line readers split on a newline.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

from ..core.errors import FileOpenError
from ..core.types import Chunk


class RecordScanner:
    """Split a file into sentinel-delimited chunks with record offsets.

    Args:
        sentinel: Literal bytes that open every record
        block_size: Bytes read from the file per block

    Invariants:
        - Chunks never contain the sentinel that ends them
        - The first chunk (preamble) has offset None
        - Every later offset is stream position minus len(sentinel) at the
          point the previous chunk was consumed, i.e. the first byte of the
          sentinel opening the chunk's record
    """

    def __init__(self, sentinel: bytes, block_size: int = 1024 * 1024):
        if not sentinel:
            raise ValueError("sentinel must not be empty")
        self.sentinel = sentinel
        self.block_size = block_size

    def scan(self, path: str | Path) -> Iterator[Chunk]:
        """Yield every chunk of the file at path."""
        try:
            f = open(path, "rb")
        except OSError as e:
            raise FileOpenError(str(path), e.strerror or str(e)) from e

        with f:
            yield from self.split(f)

    def split(self, f: BinaryIO) -> Iterator[Chunk]:
        """Yield every chunk readable from an open binary stream."""
        sentinel = self.sentinel
        sentinel_len = len(sentinel)

        buf = bytearray()
        position = 0  # stream position of buf[0]
        start = 0  # first unconsumed byte in buf
        offset: int | None = None
        search_from = 0
        eof = False

        while True:
            idx = buf.find(sentinel, search_from)
            if idx == -1:
                if eof:
                    break
                block = f.read(self.block_size)
                if not block:
                    eof = True
                    continue
                del buf[:start]
                position += start
                start = 0
                # A sentinel may straddle the block boundary
                search_from = max(0, len(buf) - sentinel_len + 1)
                buf += block
                continue

            end = idx + sentinel_len
            yield Chunk(bytes(buf[start:idx]), offset)

            # tell() after consuming the sentinel, minus its length
            offset = position + end - sentinel_len
            start = search_from = end

        if start < len(buf):
            yield Chunk(bytes(buf[start:]), offset)

