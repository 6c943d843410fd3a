from __future__ import annotations

import ftplib
import logging

from .config import FtpConfig
from .directory import DirectoryHandle
from .errors import NotFoundError
from .file import StreamingFile
from .transport import FtpTransport, Transport

log = logging.getLogger(__name__)

Handle = StreamingFile | DirectoryHandle


class FtpFileSystem:
    """Path-addressed view of one logged-in FTP session.

    Not safe for concurrent use: the session serves one caller at a time,
    and every handle opened here shares it.
    """

    def __init__(self, transport: Transport):
        self.transport = transport

    @classmethod
    def connect(cls, config: FtpConfig) -> "FtpFileSystem":
        return cls(FtpTransport.connect(config))

    def open(self, path: str) -> Handle:
        """Open ``path`` as a streaming file or a directory listing.

        The server is asked to LIST the path. A single non-directory entry
        named exactly ``path`` means ``path`` is that file. An empty listing
        is either an empty directory or a missing path; a CWD into it tells
        the two apart.
        """
        entries = self.transport.list(path)

        if len(entries) == 1 and not entries[0].is_dir and entries[0].name == path:
            log.debug("open %s: file of %d bytes", path, entries[0].size)
            return StreamingFile(self.transport, path, entries[0])

        if not entries:
            try:
                self.transport.change_dir(path)
            except ftplib.all_errors as e:
                log.debug("open %s: empty listing and CWD failed (%s)", path, e)
                raise NotFoundError(path) from e

        log.debug("open %s: directory of %d entries", path, len(entries))
        return DirectoryHandle(path, entries)

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> "FtpFileSystem":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
