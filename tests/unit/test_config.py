"""Unit tests for configuration and record formats."""

import shutil
import tempfile
from pathlib import Path

import pytest

from seqindex.components.formats import SEQUENCE, RecordFormat, get_format
from seqindex.core.config import IndexConfig


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    yield tmpdir
    shutil.rmtree(tmpdir, ignore_errors=True)


def test_defaults():
    config = IndexConfig(index_path="seq.idx")
    assert config.write_flag is False
    assert config.record_format == "sequence"
    assert config.store_mode == "r"


@pytest.mark.parametrize(
    "write_flag,overwrite,mode",
    [(False, False, "r"), (False, True, "r"), (True, False, "w"), (True, True, "n")],
)
def test_store_mode(write_flag, overwrite, mode):
    config = IndexConfig(index_path="seq.idx", write_flag=write_flag, overwrite=overwrite)
    assert config.store_mode == mode


def test_invalid_block_size():
    with pytest.raises(ValueError):
        IndexConfig(index_path="seq.idx", block_size=0)


def test_from_toml(temp_dir):
    path = Path(temp_dir) / "seqindex.toml"
    path.write_text('block_size = 4096\nencoding = "latin-1"\nindex_path = "ignored.idx"\n')

    config = IndexConfig.from_toml(path, index_path="seq.idx", record_format=None)

    assert config.block_size == 4096
    assert config.encoding == "latin-1"
    assert config.index_path == "seq.idx"
    assert config.record_format == "sequence"


def test_from_toml_unknown_key(temp_dir):
    path = Path(temp_dir) / "seqindex.toml"
    path.write_text("bogus = 1\n")

    with pytest.raises(ValueError, match="bogus"):
        IndexConfig.from_toml(path, index_path="seq.idx")


def test_from_toml_missing_file(temp_dir):
    with pytest.raises(FileNotFoundError):
        IndexConfig.from_toml(Path(temp_dir) / "nope.toml")


def test_get_format():
    assert get_format("sequence") is SEQUENCE
    assert get_format(SEQUENCE) is SEQUENCE
    with pytest.raises(ValueError):
        get_format("genbank-flat")


def test_sequence_format():
    assert SEQUENCE.sentinel == b"Seq-entry ::= set {"
    assert SEQUENCE.keyword == b"accession"
    assert SEQUENCE.type_stamp == "__Sequence_ASN1__"


def test_format_requires_sentinel():
    with pytest.raises(ValueError):
        RecordFormat("bad", b"", b"id", "__Bad__")
