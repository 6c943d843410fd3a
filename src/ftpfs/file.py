"""Seekable reads over a sequential download protocol.

FTP can only stream a file forward from a starting offset (REST + RETR),
and every new stream costs a full command/data-connection handshake.
:class:`StreamingFile` turns that into a random-access reader:

- reads continue the open stream while no seek is pending,
- a seek back into the last ``BUFFER_CAPACITY`` delivered bytes is replayed
  from memory without touching the server,
- any other seek drops the open stream and starts a new one at the target.

Seeks are lazy; only the next read decides which of these applies.
"""
from __future__ import annotations

import io
import logging
import os
import threading
from typing import Callable

from .constants import BUFFER_CAPACITY
from .entry import RemoteEntry
from .errors import InvalidArgumentError, ReaddirOnFileError
from .lookback import LookbackBuffer
from .transport import ByteStream, Transport

log = logging.getLogger(__name__)


def _close_quietly(stream: ByteStream) -> None:
    try:
        stream.close()
    except Exception as e:
        log.debug("background stream release failed: %s", e)


def release_in_background(stream: ByteStream) -> None:
    """Close ``stream`` on a daemon thread without waiting for it.

    Errors from the close are logged at debug level and dropped.
    """
    t = threading.Thread(target=_close_quietly, args=(stream,), name="ftpfs-release", daemon=True)
    t.start()


class StreamingFile(io.RawIOBase):
    def __init__(
        self,
        transport: Transport,
        path: str,
        entry: RemoteEntry,
        *,
        buffer_capacity: int = BUFFER_CAPACITY,
        releaser: Callable[[ByteStream], None] = release_in_background,
    ):
        super().__init__()
        self._transport = transport
        self.path = path
        self.entry = entry
        self.size = entry.size
        self.committed = 0
        self.requested = 0
        self._stream: ByteStream | None = None
        self._buffer = LookbackBuffer(buffer_capacity)
        self._release = releaser

    def __repr__(self) -> str:
        return f"StreamingFile({self.path!r}, size={self.size}, pos={self.requested})"

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    @property
    def stream_open(self) -> bool:
        return self._stream is not None

    def readinto(self, b: bytearray | memoryview) -> int:
        if self.closed:
            raise ValueError("I/O operation on closed file")
        if len(b) == 0:
            return 0

        if self.requested != self.committed:
            if self.requested in self._buffer:
                data = self._buffer.slice_from(self.requested, len(b))
                n = len(data)
                b[:n] = data
                self.requested += n
                log.debug("%s: replayed %d bytes from buffer", self.path, n)
                return n
            if self._stream is not None:
                stream, self._stream = self._stream, None
                self._release(stream)

        if self._stream is None:
            self._stream = self._transport.open_stream_from(self.path, self.requested)
            self.committed = self.requested
            self._buffer.reset(self.committed)

        n = self._stream.readinto(b) or 0
        self._buffer.append(memoryview(b)[:n])
        self.committed += n
        self.requested = self.committed
        return n

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        if self.closed:
            raise ValueError("I/O operation on closed file")
        if whence == os.SEEK_SET:
            pos = offset
        elif whence == os.SEEK_CUR:
            pos = self.committed + offset
        elif whence == os.SEEK_END:
            pos = self.size + offset
        else:
            raise InvalidArgumentError(f"invalid whence ({whence})")

        if pos < 0:
            raise InvalidArgumentError(f"negative seek position {pos} in {self.path}")
        # lazy: the next read decides between replay and a new stream
        self.requested = pos
        return pos

    def tell(self) -> int:
        return self.requested

    def close(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None
        super().close()

    def readdir(self, count: int = 0) -> list[RemoteEntry]:
        raise ReaddirOnFileError(self.path)

    def stat(self) -> RemoteEntry:
        return self.entry
