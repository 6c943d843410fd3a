from __future__ import annotations

import stat

import pytest

from ftpfs.directory import DirectoryHandle
from ftpfs.entry import EntryKind, RemoteEntry
from ftpfs.errors import ReadOnDirectoryError

ENTRIES = [RemoteEntry(name=n, size=i) for i, n in enumerate(["c", "a", "b"])]


@pytest.mark.parametrize(
    "count, expected",
    [(0, 3), (-1, 3), (1, 1), (2, 2), (3, 3), (4, 3), (100, 3)],
)
def test_readdir_returns_prefix(count, expected):
    d = DirectoryHandle("/x", ENTRIES)
    got = d.readdir(count)
    assert got == ENTRIES[:expected]


def test_readdir_does_not_advance():
    d = DirectoryHandle("/x", ENTRIES)
    assert d.readdir(1) == d.readdir(1) == [ENTRIES[0]]


def test_listing_order_is_preserved():
    d = DirectoryHandle("/x", ENTRIES)
    assert [e.name for e in d.readdir()] == ["c", "a", "b"]


def test_read_and_seek_fail():
    d = DirectoryHandle("/x", ENTRIES)
    with pytest.raises(ReadOnDirectoryError):
        d.read(10)
    with pytest.raises(ReadOnDirectoryError):
        d.readinto(bytearray(4))
    with pytest.raises(ReadOnDirectoryError):
        d.seek(0)
    with pytest.raises(IsADirectoryError):
        d.seek(5, 1)


def test_stat_describes_directory():
    d = DirectoryHandle("/x")
    info = d.stat()
    assert info is d
    assert info.name == "/x"
    assert info.size == 0
    assert info.is_dir
    assert info.mtime is None
    assert stat.S_ISDIR(info.mode)
    assert stat.S_IMODE(info.mode) == 0o644


def test_entry_mode_convention():
    f = RemoteEntry(name="f", size=3)
    sub = RemoteEntry(name="s", kind=EntryKind.DIRECTORY)
    assert f.mode == 0o644 and not f.is_dir
    assert stat.S_ISDIR(sub.mode) and sub.is_dir


def test_entry_rejects_negative_size():
    with pytest.raises(ValueError):
        RemoteEntry(name="f", size=-1)
