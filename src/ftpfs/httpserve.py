"""Serve an :class:`~ftpfs.fs.FtpFileSystem` over HTTP.

The server is single-threaded: every request shares the one FTP session.
"""
from __future__ import annotations

import ftplib
import html
import logging
import re
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, HTTPServer
from urllib.parse import quote, unquote, urlsplit

from .constants import COPY_CHUNK
from .directory import DirectoryHandle
from .errors import NotFoundError
from .file import StreamingFile
from .fs import FtpFileSystem

log = logging.getLogger(__name__)

_RANGE_RE = re.compile(r"^bytes=(\d*)-(\d*)$")


def parse_range(header: str | None, size: int) -> tuple[int, int] | None:
    """Resolve a single ``Range`` header to an inclusive ``(first, last)``.

    Returns None when the header is absent or not a single byte range.
    Raises ValueError when the range cannot be satisfied.
    """
    if not header:
        return None
    m = _RANGE_RE.match(header.strip())
    if not m or (not m[1] and not m[2]):
        return None
    if not m[1]:
        suffix = int(m[2])
        if suffix == 0 or size == 0:
            raise ValueError(f"unsatisfiable range {header!r}")
        return max(0, size - suffix), size - 1
    first = int(m[1])
    last = int(m[2]) if m[2] else size - 1
    if first >= size or last < first:
        raise ValueError(f"unsatisfiable range {header!r}")
    return first, min(last, size - 1)


def _copy_range(src: StreamingFile, dst, length: int) -> None:
    remaining = length
    while remaining > 0:
        chunk = src.read(min(COPY_CHUNK, remaining))
        if not chunk:
            break
        dst.write(chunk)
        remaining -= len(chunk)


class FtpRequestHandler(BaseHTTPRequestHandler):
    fs: FtpFileSystem
    server_version = "ftpfs"

    def do_GET(self) -> None:
        self._serve(send_body=True)

    def do_HEAD(self) -> None:
        self._serve(send_body=False)

    def log_message(self, format: str, *args) -> None:
        log.info("%s %s", self.address_string(), format % args)

    def _serve(self, send_body: bool) -> None:
        path = unquote(urlsplit(self.path).path) or "/"
        try:
            handle = self.fs.open(path)
        except NotFoundError:
            self.send_error(HTTPStatus.NOT_FOUND)
            return
        except ftplib.all_errors as e:
            log.warning("open %s failed: %s", path, e)
            self.send_error(HTTPStatus.BAD_GATEWAY, str(e))
            return

        try:
            if isinstance(handle, DirectoryHandle):
                self._send_listing(handle, send_body)
            else:
                self._send_file(handle, send_body)
        except ftplib.all_errors as e:
            # headers may already be out; all we can do is drop the connection
            log.warning("transfer of %s failed: %s", path, e)
            self.close_connection = True
        finally:
            handle.close()

    def _send_file(self, f: StreamingFile, send_body: bool) -> None:
        try:
            rng = parse_range(self.headers.get("Range"), f.size)
        except ValueError:
            self.send_response(HTTPStatus.REQUESTED_RANGE_NOT_SATISFIABLE)
            self.send_header("Content-Range", f"bytes */{f.size}")
            self.send_header("Content-Length", "0")
            self.end_headers()
            return

        if rng is None:
            first, length = 0, f.size
            self.send_response(HTTPStatus.OK)
        else:
            first, last = rng
            length = last - first + 1
            self.send_response(HTTPStatus.PARTIAL_CONTENT)
            self.send_header("Content-Range", f"bytes {first}-{last}/{f.size}")
        self.send_header("Content-Type", "application/octet-stream")
        self.send_header("Content-Length", str(length))
        self.send_header("Accept-Ranges", "bytes")
        if f.entry.mtime is not None:
            self.send_header("Last-Modified", self.date_time_string(f.entry.mtime.timestamp()))
        self.end_headers()

        if send_body:
            f.seek(first)
            _copy_range(f, self.wfile, length)

    def _send_listing(self, d: DirectoryHandle, send_body: bool) -> None:
        base = d.path.rstrip("/")
        items = []
        for e in d.readdir():
            label = e.name + ("/" if e.is_dir else "")
            href = quote(f"{base}/{e.name.rsplit('/', 1)[-1]}")
            items.append(f'<li><a href="{href}">{html.escape(label)}</a></li>')
        title = html.escape(d.path)
        body = (
            f"<!DOCTYPE html>\n<html><head><title>{title}</title></head>\n"
            f"<body><h1>{title}</h1>\n<ul>\n" + "\n".join(items) + "\n</ul></body></html>\n"
        ).encode("utf-8")

        self.send_response(HTTPStatus.OK)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if send_body:
            self.wfile.write(body)


def make_server(fs: FtpFileSystem, host: str, port: int) -> HTTPServer:
    handler = type("BoundFtpRequestHandler", (FtpRequestHandler,), {"fs": fs})
    server = HTTPServer((host, port), handler)
    log.info("serving FTP file system on http://%s:%d/", *server.server_address[:2])
    return server
