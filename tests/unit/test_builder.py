"""Unit tests for the index builder."""

import shutil
import tempfile
from pathlib import Path

import pytest

from seqindex.components.builder import IndexBuilder, check_stamps, file_count
from seqindex.components.formats import SEQUENCE, RecordFormat
from seqindex.components.kvstore import SimpleLogStore
from seqindex.core.errors import FileOpenError, IncompatibleIndexError, ReadOnlyIndexError
from seqindex.core.types import (
    FILE_COUNT_KEY,
    INDEX_VERSION,
    TYPE_KEY,
    VERSION_KEY,
    RecordLocation,
    RegisteredFile,
    file_key,
)

SENTINEL = SEQUENCE.sentinel


def record(*accessions: str) -> bytes:
    ids = b"".join(
        b'\n    genbank {\n      accession "' + acc.encode() + b'" ,\n      version 1 } ,'
        for acc in accessions
    )
    return SENTINEL + b"\n  seq {\n  id {" + ids + b"\n  } }\n"


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    yield tmpdir
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def store(temp_dir):
    """Create a fresh writable store."""
    store = SimpleLogStore.open(Path(temp_dir) / "seq.idx", "n")
    yield store
    store.close()


def write(temp_dir, name: str, data: bytes) -> Path:
    path = Path(temp_dir) / name
    path.write_bytes(data)
    return path


def test_build_single_file(temp_dir, store):
    """Identifiers map to the offset of their record's sentinel."""
    rec1, rec2 = record("AF093062"), record("AF093063")
    data = b"...junk...\n" + rec1 + rec2
    path = write(temp_dir, "a.asn", data)

    stats = IndexBuilder(store, SEQUENCE).build([path])

    assert stats.files == 1
    assert stats.records == 2
    assert stats.identifiers == 2
    assert RecordLocation.unpack(store.get("AF093062")) == RecordLocation(0, data.index(rec1))
    assert RecordLocation.unpack(store.get("AF093063")) == RecordLocation(0, data.index(rec2))


def test_build_writes_stamps_and_registry(temp_dir, store):
    path = write(temp_dir, "a.asn", record("AF093062"))

    IndexBuilder(store, SEQUENCE).build([path])

    assert store.get(TYPE_KEY) == b"__Sequence_ASN1__"
    assert store.get(VERSION_KEY) == INDEX_VERSION.encode()
    assert store.get(FILE_COUNT_KEY) == b"1"
    entry = RegisteredFile.unpack(0, store.get(file_key(0)))
    assert entry.path == str(path)
    assert entry.size == path.stat().st_size


def test_two_identifiers_share_location(temp_dir, store):
    """A record with two accessions yields two entries at the same location."""
    path = write(temp_dir, "a.asn", record("AF093062", "AAC64372"))

    stats = IndexBuilder(store, SEQUENCE).build([path])

    assert stats.records == 1
    assert stats.identifiers == 2
    assert store.get("AF093062") == store.get("AAC64372")
    assert RecordLocation.unpack(store.get("AF093062")) == RecordLocation(0, 0)


def test_duplicate_identifier_last_writer_wins(temp_dir, store):
    """The same identifier in two files resolves to the later file."""
    a = write(temp_dir, "a.asn", record("DUP1"))
    b = write(temp_dir, "b.asn", b"header\n" + record("DUP1"))

    IndexBuilder(store, SEQUENCE).build([a, b])

    assert RecordLocation.unpack(store.get("DUP1")) == RecordLocation(1, len(b"header\n"))
    assert sum(1 for key, _ in store.items() if key == "DUP1") == 1


def test_preamble_identifiers_skipped(temp_dir, store):
    """Identifiers before the first sentinel have no record to point at."""
    data = b'{ accession "EARLY" , }\n' + record("AF093062")
    path = write(temp_dir, "a.asn", data)

    stats = IndexBuilder(store, SEQUENCE).build([path])

    assert store.get("EARLY") is None
    assert stats.skipped == 1
    assert stats.identifiers == 1


def test_reserved_identifier_skipped(temp_dir, store):
    """Identifiers that look like reserved keys can't overwrite bookkeeping."""
    path = write(temp_dir, "a.asn", record("__FILE_0", "AF093062"))

    stats = IndexBuilder(store, SEQUENCE).build([path])

    assert RegisteredFile.unpack(0, store.get(file_key(0))).path == str(path)
    assert stats.skipped == 1
    assert store.get("AF093062") is not None


def test_file_numbers_continue_on_reopen(temp_dir):
    """Building into an existing compatible index appends to the registry."""
    index_path = Path(temp_dir) / "seq.idx"
    a = write(temp_dir, "a.asn", record("A1"))
    b = write(temp_dir, "b.asn", record("B1"))

    with SimpleLogStore.open(index_path, "n") as store:
        IndexBuilder(store, SEQUENCE).build([a])
    with SimpleLogStore.open(index_path, "w") as store:
        IndexBuilder(store, SEQUENCE).build([b])
        assert file_count(store) == 2
        assert RecordLocation.unpack(store.get("B1")).file_number == 1


def test_incompatible_stamp_rejected(temp_dir, store):
    """Building into an index of another format fails before reading files."""
    other = RecordFormat("other", b"Other ::= {", b"name", "__Other__")
    path = write(temp_dir, "a.asn", record("AF093062"))
    IndexBuilder(store, other).build([])

    with pytest.raises(IncompatibleIndexError):
        IndexBuilder(store, SEQUENCE).build([path])
    assert store.get("AF093062") is None


def test_check_stamps_version_mismatch(store):
    store.put(TYPE_KEY, SEQUENCE.type_stamp.encode())
    store.put(VERSION_KEY, b"0")

    with pytest.raises(IncompatibleIndexError) as excinfo:
        check_stamps(store, SEQUENCE)
    assert excinfo.value.key == VERSION_KEY
    assert excinfo.value.found == "0"


def test_missing_file_aborts_build(temp_dir, store):
    """A missing input file raises and leaves earlier files indexed."""
    a = write(temp_dir, "a.asn", record("A1"))
    missing = Path(temp_dir) / "missing.asn"

    with pytest.raises(FileOpenError):
        IndexBuilder(store, SEQUENCE).build([a, missing])

    assert store.get("A1") is not None
    assert file_count(store) == 1


def test_read_only_store_rejected(temp_dir):
    index_path = Path(temp_dir) / "seq.idx"
    SimpleLogStore.open(index_path, "w").close()

    with SimpleLogStore.open(index_path, "r") as store:
        with pytest.raises(ReadOnlyIndexError):
            IndexBuilder(store, SEQUENCE).build([])
