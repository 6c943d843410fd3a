"""FTP as a random-access file system.

Open any remote path through :class:`FtpFileSystem`; directories come back
as :class:`DirectoryHandle` listings and files as seekable
:class:`StreamingFile` readers built on REST + RETR.
"""

from .config import FtpConfig
from .directory import DirectoryHandle
from .entry import EntryKind, FileInfo, RemoteEntry
from .errors import FtpFsError, InvalidArgumentError, NotFoundError, ReaddirOnFileError, ReadOnDirectoryError
from .file import StreamingFile
from .fs import FtpFileSystem
from .transport import ByteStream, FtpTransport, Transport

__all__ = [
    "ByteStream",
    "DirectoryHandle",
    "EntryKind",
    "FileInfo",
    "FtpConfig",
    "FtpFileSystem",
    "FtpFsError",
    "FtpTransport",
    "InvalidArgumentError",
    "NotFoundError",
    "ReadOnDirectoryError",
    "ReaddirOnFileError",
    "RemoteEntry",
    "StreamingFile",
    "Transport",
]
