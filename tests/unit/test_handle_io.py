import gc
import warnings

import pytest

from dirglob import (
    ClosedDirectoryError,
    DirConfigError,
    DirectoryListing,
    DirectoryResource,
    DirNotFoundError,
)


@pytest.fixture
def letters(memfs):
    memfs.populate(["d/a", "d/b/", "d/c"])
    return memfs


def test_read_sequence(letters, dirsvc):
    with dirsvc.open_directory("/d") as d:
        assert [d.read() for _ in range(6)] == [".", "..", "a", "b", "c", None]


def test_tell_and_seek(letters, dirsvc):
    with dirsvc.open_directory("/d") as d:
        seen = []
        while True:
            pos = d.tell()
            name = d.read()
            if name is None:
                break
            seen.append((pos, name))
        for pos, name in seen:
            assert d.seek(pos) == pos
            assert d.read() == name


def test_pos_property(letters, dirsvc):
    with dirsvc.open_directory("/d") as d:
        d.read()
        d.read()
        pos = d.pos
        name = d.read()
        d.pos = pos
        assert d.read() == name


def test_seek_past_end_reads_none(letters, dirsvc):
    with dirsvc.open_directory("/d") as d:
        d.seek(100)
        assert d.read() is None


def test_seek_negative_rejected(letters, dirsvc):
    with dirsvc.open_directory("/d") as d:
        with pytest.raises(ValueError):
            d.seek(-1)


def test_rewind(letters, dirsvc):
    with dirsvc.open_directory("/d") as d:
        first = [d.read() for _ in range(3)]
        d.rewind()
        assert [d.read() for _ in range(3)] == first


def test_iteration_continues_from_cursor(letters, dirsvc):
    with dirsvc.open_directory("/d") as d:
        d.read()
        d.read()
        assert list(d) == ["a", "b", "c"]
        assert list(d.each()) == []


def test_entries_and_children(letters, dirsvc):
    with dirsvc.open_directory("/d") as d:
        d.read()
        assert d.entries() == [".", "..", "a", "b", "c"]
        assert d.children() == ["a", "b", "c"]
        assert list(d.each_child()) == ["a", "b", "c"]
        assert d.read() == ".."


def test_snapshot_is_taken_at_open(letters, dirsvc):
    with dirsvc.open_directory("/d") as d:
        letters.touch("/d/late")
        assert "late" not in d.children()
    assert "late" in dirsvc.children("/d")


def test_operations_after_close_raise(letters, dirsvc):
    d = dirsvc.open_directory("/d")
    d.close()
    assert d.closed
    for op in (d.read, d.tell, d.rewind, d.entries, d.children, d.resolved_path):
        with pytest.raises(ClosedDirectoryError, match="closed directory"):
            op()
    with pytest.raises(ClosedDirectoryError):
        d.seek(0)


def test_close_is_idempotent(letters, dirsvc):
    d = dirsvc.open_directory("/d")
    d.close()
    d.close()
    assert d.closed


def test_path_and_repr(letters, dirsvc):
    with dirsvc.open_directory("/d") as d:
        assert d.path == "/d"
        assert repr(d) == "<DirectoryResource:/d>"
        assert d.resolved_path() == "/d"


def test_relative_path_resolved_at_open(letters, dirsvc):
    letters.chdir("/d")
    with dirsvc.open_directory("b") as d:
        letters.chdir("/")
        assert d.path == "b"
        assert d.resolved_path() == "/d/b"


def test_open_missing_directory(dirsvc):
    with pytest.raises(DirNotFoundError):
        dirsvc.open_directory("/nope")


def test_open_file_rejected(letters, dirsvc):
    with pytest.raises(NotADirectoryError):
        dirsvc.open_directory("/d/a")


def test_unknown_keyword(letters, dirsvc):
    with pytest.raises(DirConfigError, match="unknown keyword"):
        dirsvc.open_directory("/d", xawqij="a")
    with pytest.raises(DirConfigError, match="unknown keyword"):
        dirsvc.entries("/d", xawqij="a")
    with pytest.raises(DirConfigError, match="unknown keyword"):
        dirsvc.foreach("/d", xawqij="a")


def test_nul_path_rejected(dirsvc):
    with pytest.raises(DirConfigError):
        dirsvc.entries("/d\0")


def test_encoding_binary(letters, dirsvc):
    assert dirsvc.entries("/d", encoding="binary") == [b".", b"..", b"a", b"b", b"c"]


def test_encoding_named(letters, dirsvc):
    with dirsvc.open_directory("/d", encoding="UTF-8") as d:
        assert d.encoding == "utf-8"
        assert d.read() == "."


def test_unknown_encoding(letters, dirsvc):
    with pytest.raises(DirConfigError, match="unknown encoding"):
        dirsvc.open_directory("/d", encoding="no-such-codec")


def test_foreach_is_deferred(memfs, dirsvc):
    listing = dirsvc.foreach("/later")
    assert isinstance(listing, DirectoryListing)
    with pytest.raises(DirNotFoundError):
        list(listing)
    memfs.mkdir("/later")
    assert list(listing) == [".", ".."]
    memfs.touch("/later/x")
    assert list(listing) == [".", "..", "x"]


def test_each_child(letters, dirsvc):
    assert list(dirsvc.each_child("/d")) == ["a", "b", "c"]


def test_unclosed_resource_warns(letters, memfs):
    d = DirectoryResource(memfs, "/d")
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        del d
        gc.collect()
    assert any(issubclass(w.category, ResourceWarning) for w in caught)
