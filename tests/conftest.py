from __future__ import annotations

import ftplib
import io
import socket
from collections import deque

import pytest

from ftpfs.entry import EntryKind, RemoteEntry
from ftpfs.fs import FtpFileSystem


class FakeStream:
    def __init__(self, data: bytes, chunk: int | None = None):
        self._src = io.BytesIO(data)
        self._chunk = chunk
        self.closed = False

    def readinto(self, b) -> int:
        if self.closed:
            raise ValueError("read on closed stream")
        view = memoryview(b)
        if self._chunk is not None:
            view = view[: self._chunk]
        return self._src.readinto(view)

    def close(self) -> None:
        self.closed = True


class FakeTransport:
    """In-memory session recording every call made to it."""

    def __init__(self, files: dict[str, bytes] | None = None, dirs: dict[str, list[RemoteEntry]] | None = None,
                 chunk: int | None = None):
        self.files = files or {}
        self.dirs = dirs or {}
        self.chunk = chunk
        self.calls: list[tuple] = []
        self.streams: list[FakeStream] = []

    def list(self, path: str) -> list[RemoteEntry]:
        self.calls.append(("list", path))
        if path in self.files:
            return [RemoteEntry(name=path, size=len(self.files[path]))]
        return list(self.dirs.get(path, []))

    def change_dir(self, path: str) -> None:
        self.calls.append(("change_dir", path))
        if path not in self.dirs:
            raise ftplib.error_perm(f"550 {path}: No such file or directory")

    def open_stream_from(self, path: str, offset: int) -> FakeStream:
        self.calls.append(("open", path, offset))
        stream = FakeStream(self.files[path][offset:], self.chunk)
        self.streams.append(stream)
        return stream

    def close(self) -> None:
        self.calls.append(("close",))

    def opens(self) -> list[tuple]:
        return [c for c in self.calls if c[0] == "open"]


A_TXT = b"hello, world"
B_TXT = b"bytes"


def make_tree(**kwargs) -> FakeTransport:
    return FakeTransport(
        files={"/d/a.txt": A_TXT, "/d/b.txt": B_TXT, "/big.bin": bytes(range(256)) * 16},
        dirs={
            "/d": [
                RemoteEntry(name="a.txt", size=len(A_TXT)),
                RemoteEntry(name="b.txt", size=len(B_TXT)),
            ],
            "/": [
                RemoteEntry(name="d", kind=EntryKind.DIRECTORY),
                RemoteEntry(name="big.bin", size=4096),
            ],
            "/empty": [],
        },
        **kwargs,
    )


@pytest.fixture
def transport() -> FakeTransport:
    return make_tree()


@pytest.fixture
def fs(transport: FakeTransport) -> FtpFileSystem:
    return FtpFileSystem(transport)


@pytest.fixture
def tree_factory():
    return make_tree


class FakeFTP:
    """Stands in for ftplib.FTP; data connections are local socket pairs.

    A RETR of a path in ``files`` sends the content from the REST offset and
    closes the server side of the data connection.
    """

    def __init__(self, listing=(), replies=(), files: dict[str, bytes] | None = None):
        self.listing = list(listing)
        self.replies = deque(replies)
        self.files = files or {}
        self.sent: list[str] = []
        self.peers: list[socket.socket] = []
        self.quit_called = False

    def retrlines(self, cmd, callback):
        self.sent.append(cmd)
        for line in self.listing:
            callback(line)
        return "226 Transfer complete"

    def cwd(self, path):
        self.sent.append(f"CWD {path}")
        if path == "/missing":
            raise ftplib.error_perm("550 No such directory")
        return "250 OK"

    def voidcmd(self, cmd):
        self.sent.append(cmd)
        return "200 OK"

    def transfercmd(self, cmd, rest=None):
        if rest is not None:
            self.sent.append(f"REST {rest}")
        self.sent.append(cmd)
        ours, theirs = socket.socketpair()
        self.peers.append(theirs)
        path = cmd.split(" ", 1)[1]
        if path in self.files:
            theirs.sendall(self.files[path][rest or 0 :])
            theirs.close()
        return ours

    def getresp(self):
        self.sent.append("<reply>")
        reply = self.replies.popleft()
        if reply.startswith("4"):
            raise ftplib.error_temp(reply)
        return reply

    def quit(self):
        self.quit_called = True
        return "221 Goodbye"

    def close(self):
        pass


@pytest.fixture
def ftp_factory():
    made: list[FakeFTP] = []

    def make(*args, **kwargs) -> FakeFTP:
        fake = FakeFTP(*args, **kwargs)
        made.append(fake)
        return fake

    yield make
    for fake in made:
        for peer in fake.peers:
            peer.close()
