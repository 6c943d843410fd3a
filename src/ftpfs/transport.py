"""FTP transport collaborator.

The file system needs three primitives from a session: list a path, change
into a directory, and open a forward-only byte stream at an offset. The
:class:`Transport` protocol names them; :class:`FtpTransport` provides them
over :mod:`ftplib`.
"""
from __future__ import annotations

import ftplib
import logging
import socket
import threading
from collections import deque
from typing import Protocol, runtime_checkable

from .config import FtpConfig
from .entry import RemoteEntry
from .listing import parse_listing

log = logging.getLogger(__name__)


@runtime_checkable
class ByteStream(Protocol):
    def readinto(self, b: bytearray | memoryview) -> int | None: ...

    def close(self) -> None: ...


@runtime_checkable
class Transport(Protocol):
    def list(self, path: str) -> list[RemoteEntry]: ...

    def change_dir(self, path: str) -> None: ...

    def open_stream_from(self, path: str, offset: int) -> ByteStream: ...

    def close(self) -> None: ...


class RetrStream:
    """Data connection of one RETR transfer.

    Closing it ends the transfer early if it has not completed; the final
    control reply is collected by the owning transport.
    """

    def __init__(self, transport: FtpTransport, conn: socket.socket, path: str, offset: int):
        self._transport = transport
        self._conn = conn
        self.path = path
        self.offset = offset
        self.closed = False

    def readinto(self, b: bytearray | memoryview) -> int:
        return self._conn.recv_into(b)

    def shutdown(self) -> None:
        if not self.closed:
            self.closed = True
            self._conn.close()

    def close(self) -> None:
        self.shutdown()
        self._transport._finish(self)


class FtpTransport:
    """Single-owner FTP session.

    Control-channel commands are serialized with a lock. A transfer whose
    data connection was closed still owes one final reply on the control
    channel, so every such reply is drained, oldest first, before the next
    command goes out. This keeps a stream released from another thread from
    interleaving its reply with a new command.

    Because there is only one control channel, the next command waits for
    those replies. A reader that seeks far away releases its old stream on
    another thread, but its next RETR still blocks until the old transfer's
    final reply has been read.
    """

    def __init__(self, ftp: ftplib.FTP):
        self._ftp = ftp
        self._lock = threading.Lock()
        self._pending: deque[RetrStream] = deque()

    @classmethod
    def connect(cls, config: FtpConfig) -> "FtpTransport":
        ftp_cls = ftplib.FTP_TLS if config.tls else ftplib.FTP
        ftp = ftp_cls(timeout=config.timeout_s, encoding=config.encoding)
        ftp.connect(config.host, config.port)
        ftp.login(config.user, config.password)
        if isinstance(ftp, ftplib.FTP_TLS):
            ftp.prot_p()
        ftp.set_pasv(config.passive)
        log.info("connected to %s:%d as %s", config.host, config.port, config.user)
        return cls(ftp)

    def _collect(self, stream: RetrStream) -> None:
        stream.shutdown()
        try:
            resp = self._ftp.getresp()
        except (ftplib.error_temp, ftplib.error_perm, ftplib.error_reply) as e:
            # 426/451 and friends are the normal answer to a transfer cut short
            log.debug("transfer of %s ended with %s", stream.path, e)
        else:
            log.debug("transfer of %s ended with %s", stream.path, resp)

    def _drain(self) -> None:
        while self._pending:
            self._collect(self._pending.popleft())

    def _finish(self, stream: RetrStream) -> None:
        with self._lock:
            while stream in self._pending:
                self._collect(self._pending.popleft())

    def list(self, path: str) -> list[RemoteEntry]:
        lines: list[str] = []
        with self._lock:
            self._drain()
            self._ftp.retrlines(f"LIST {path}", lines.append)
        return parse_listing(lines)

    def change_dir(self, path: str) -> None:
        with self._lock:
            self._drain()
            self._ftp.cwd(path)

    def open_stream_from(self, path: str, offset: int) -> RetrStream:
        with self._lock:
            self._drain()
            self._ftp.voidcmd("TYPE I")
            conn = self._ftp.transfercmd(f"RETR {path}", rest=offset or None)
            stream = RetrStream(self, conn, path, offset)
            self._pending.append(stream)
        log.debug("RETR %s from offset %d", path, offset)
        return stream

    def close(self) -> None:
        with self._lock:
            for stream in self._pending:
                stream.shutdown()
            self._pending.clear()
            try:
                self._ftp.quit()
            except ftplib.all_errors as e:
                log.debug("QUIT failed (%s); closing control connection", e)
                self._ftp.close()

    def __enter__(self) -> "FtpTransport":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
