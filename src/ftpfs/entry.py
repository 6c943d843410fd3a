from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable

from .constants import DIR_MODE, FILE_MODE


class EntryKind(enum.Enum):
    FILE = "file"
    DIRECTORY = "directory"


@runtime_checkable
class FileInfo(Protocol):
    """Metadata answered by listing entries and directory handles alike."""

    @property
    def name(self) -> str: ...

    @property
    def size(self) -> int: ...

    @property
    def mode(self) -> int: ...

    @property
    def mtime(self) -> datetime | None: ...

    @property
    def is_dir(self) -> bool: ...


@dataclass(frozen=True, slots=True)
class RemoteEntry:
    """One object reported by a LIST reply.

    FTP carries no usable permission model, so ``mode`` is a fixed
    convention rather than server data.
    """

    name: str
    size: int = 0
    mtime: datetime | None = None
    kind: EntryKind = EntryKind.FILE

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ValueError(f"negative size for {self.name!r}: {self.size}")

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @property
    def mode(self) -> int:
        return DIR_MODE if self.is_dir else FILE_MODE
