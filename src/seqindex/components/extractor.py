"""Key extractor.

Pulls identifier fields out of a record chunk with a small hand-written
tokenizer instead of a general pattern engine. An identifier field is:

    delimiter, whitespace+, keyword, whitespace*, '"', value, '"', whitespace+, delimiter

where delimiter is one of the format's structural characters (",{}" for
ASN.1 text), the keyword matches case-insensitively and value is one or
more non-quote bytes. Matches do not overlap: the closing delimiter of one
field cannot open the next.
"""

from __future__ import annotations

from collections.abc import Iterator

WHITESPACE = frozenset(b" \t\n\r\f\v")
QUOTE = ord('"')


class KeyExtractor:
    """Find every identifier field in a chunk.

    Args:
        keyword: Field name introducing an identifier (e.g. b"accession")
        delimiters: Structural characters bounding the field
        encoding: Encoding used to decode identifier bytes
    """

    def __init__(self, keyword: bytes, delimiters: bytes = b",{}", encoding: str = "utf-8"):
        if not keyword:
            raise ValueError("keyword must not be empty")
        self.keyword = keyword.lower()
        self.delimiters = frozenset(delimiters)
        self.encoding = encoding

    def extract(self, chunk: bytes) -> list[str]:
        """Return identifiers in the order they appear in chunk."""
        return list(self.iter_identifiers(chunk))

    def iter_identifiers(self, chunk: bytes) -> Iterator[str]:
        lowered = chunk.lower()
        keyword = self.keyword
        delimiters = self.delimiters
        n = len(chunk)

        floor = 0  # first byte a new field may start at
        pos = 0
        while True:
            k = lowered.find(keyword, pos)
            if k == -1:
                return
            pos = k + 1

            # delimiter whitespace+ keyword
            i = k - 1
            while i >= floor and chunk[i] in WHITESPACE:
                i -= 1
            if i == k - 1 or i < floor or chunk[i] not in delimiters:
                continue

            # keyword whitespace* '"'
            j = k + len(keyword)
            while j < n and chunk[j] in WHITESPACE:
                j += 1
            if j >= n or chunk[j] != QUOTE:
                continue

            # '"' value '"'
            close = chunk.find(b'"', j + 1)
            if close == -1 or close == j + 1:
                continue

            # '"' whitespace+ delimiter
            m = close + 1
            while m < n and chunk[m] in WHITESPACE:
                m += 1
            if m == close + 1 or m >= n or chunk[m] not in delimiters:
                continue

            yield chunk[j + 1 : close].decode(self.encoding, errors="replace")
            floor = pos = m + 1
