"""Record formats the indexer knows how to split and key."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RecordFormat:
    """How records of one flat-file format are delimited and identified.

    Attributes:
        name: Short name used in configuration
        sentinel: Literal bytes that open every record
        keyword: Field name whose quoted value is an identifier
        type_stamp: Format stamp persisted in indexes of this format
        delimiters: Structural characters that bound an identifier field
    """

    name: str
    sentinel: bytes
    keyword: bytes
    type_stamp: str
    delimiters: bytes = b",{}"

    def __post_init__(self):
        if not self.sentinel:
            raise ValueError("sentinel must not be empty")
        if not self.keyword:
            raise ValueError("keyword must not be empty")


# NCBI ASN.1 text Seq-entry dumps; nucleotide and protein accessions
SEQUENCE = RecordFormat(
    name="sequence",
    sentinel=b"Seq-entry ::= set {",
    keyword=b"accession",
    type_stamp="__Sequence_ASN1__",
)

FORMATS: dict[str, RecordFormat] = {SEQUENCE.name: SEQUENCE}


def get_format(name: str | RecordFormat) -> RecordFormat:
    """Return the registered format called name."""
    if isinstance(name, RecordFormat):
        return name
    try:
        return FORMATS[name]
    except KeyError:
        raise ValueError(
            f"Unknown record format {name!r}, expected one of {sorted(FORMATS)}"
        ) from None


def register_format(fmt: RecordFormat) -> None:
    """Make fmt available by name."""
    FORMATS[fmt.name] = fmt
