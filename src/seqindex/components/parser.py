"""Default record parser.

Returns the raw bytes of the record at the handle's position, from its
opening sentinel up to the next one. A structural decoder for the format
can be passed to fetch_hash instead.
"""

from __future__ import annotations

from typing import BinaryIO


class RawRecordParser:
    """Read one sentinel-delimited record as bytes.

    Args:
        sentinel: Literal bytes that open every record
        block_size: Bytes read per block
    """

    def __init__(self, sentinel: bytes, block_size: int = 64 * 1024):
        self.sentinel = sentinel
        self.block_size = block_size

    def next_record(self, fh: BinaryIO) -> bytes | None:
        start = fh.tell()
        buf = bytearray()
        # Skip the record's own sentinel when looking for the next one
        search_from = len(self.sentinel) if self._at_sentinel(fh) else 0

        while True:
            idx = buf.find(self.sentinel, search_from)
            if idx != -1:
                fh.seek(start + idx)
                return bytes(buf[:idx])
            block = fh.read(self.block_size)
            if not block:
                break
            search_from = max(search_from, len(buf) - len(self.sentinel) + 1)
            buf += block

        return bytes(buf) if buf else None

    def _at_sentinel(self, fh: BinaryIO) -> bool:
        pos = fh.tell()
        head = fh.read(len(self.sentinel))
        fh.seek(pos)
        return head == self.sentinel
