from __future__ import annotations

from datetime import datetime
from typing import Iterable

from .constants import DIR_MODE
from .entry import RemoteEntry
from .errors import ReadOnDirectoryError


class DirectoryHandle:
    """A directory listing materialized at open time.

    The handle doubles as its own metadata record, so ``stat()`` returns it.
    """

    def __init__(self, path: str, entries: Iterable[RemoteEntry] = ()):
        self.path = path
        self.entries = tuple(entries)

    def __repr__(self) -> str:
        return f"DirectoryHandle({self.path!r}, {len(self.entries)} entries)"

    def __enter__(self) -> "DirectoryHandle":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def readdir(self, count: int = 0) -> list[RemoteEntry]:
        # fixed prefix, no cursor across calls
        if count <= 0 or count > len(self.entries):
            return list(self.entries)
        return list(self.entries[:count])

    def read(self, size: int = -1) -> bytes:
        raise ReadOnDirectoryError(self.path)

    def readinto(self, b: bytearray | memoryview) -> int:
        raise ReadOnDirectoryError(self.path)

    def seek(self, offset: int, whence: int = 0) -> int:
        raise ReadOnDirectoryError(self.path)

    def stat(self) -> "DirectoryHandle":
        return self

    def close(self) -> None:
        pass

    @property
    def name(self) -> str:
        return self.path

    @property
    def size(self) -> int:
        return 0

    @property
    def mode(self) -> int:
        return DIR_MODE

    @property
    def mtime(self) -> datetime | None:
        return None

    @property
    def is_dir(self) -> bool:
        return True
