from __future__ import annotations

import argparse
import ftplib
import logging
import stat
import sys
from typing import BinaryIO, TextIO

from .config import FtpConfig
from .constants import COPY_CHUNK, DEFAULT_HTTP_HOST, DEFAULT_HTTP_PORT, URL_ENV_VAR
from .directory import DirectoryHandle
from .entry import FileInfo
from .errors import FtpFsError
from .fs import FtpFileSystem
from .httpserve import make_server


def format_info(info: FileInfo) -> str:
    mtime = info.mtime.strftime("%Y-%m-%d %H:%M") if info.mtime else "-"
    # FileInfo modes carry no S_IFREG bit, so the type column is set here
    perms = ("d" if info.is_dir else "-") + stat.filemode(info.mode)[1:]
    return f"{perms} {info.size:>12} {mtime:>16} {info.name}"


def cmd_ls(fs: FtpFileSystem, args: argparse.Namespace, out: TextIO) -> int:
    with fs.open(args.path) as handle:
        if isinstance(handle, DirectoryHandle):
            infos: list[FileInfo] = list(handle.readdir(args.count))
        else:
            infos = [handle.stat()]
    for info in infos:
        print(format_info(info), file=out)
    return 0


def cmd_cat(fs: FtpFileSystem, args: argparse.Namespace, out: BinaryIO) -> int:
    with fs.open(args.path) as f:
        if args.offset:
            f.seek(args.offset)
        remaining = args.length
        while remaining is None or remaining > 0:
            size = COPY_CHUNK if remaining is None else min(COPY_CHUNK, remaining)
            chunk = f.read(size)
            if not chunk:
                break
            out.write(chunk)
            if remaining is not None:
                remaining -= len(chunk)
    out.flush()
    return 0


def cmd_serve(fs: FtpFileSystem, args: argparse.Namespace) -> int:
    server = make_server(fs, args.bind, args.port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logging.info("interrupted; shutting down")
    finally:
        server.server_close()
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ftpfs", description="Browse and serve an FTP server as a seekable file system.")
    p.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    p.add_argument("--url", default=None, help=f"ftp:// or ftps:// URL (default: ${URL_ENV_VAR})")
    p.add_argument("--timeout", type=float, default=None, help="socket timeout in seconds")
    p.add_argument("--active", action="store_true", help="use active mode instead of passive")
    sub = p.add_subparsers(dest="cmd", required=True)

    ls = sub.add_parser("ls", help="list a directory or describe a file")
    ls.add_argument("path")
    ls.add_argument("--count", type=int, default=0, help="list at most this many entries (0 = all)")

    cat = sub.add_parser("cat", help="write a file (or a byte range of it) to stdout")
    cat.add_argument("path")
    cat.add_argument("--offset", type=int, default=0)
    cat.add_argument("--length", type=int, default=None)

    serve = sub.add_parser("serve", help="serve the FTP tree over HTTP")
    serve.add_argument("--bind", default=DEFAULT_HTTP_HOST)
    serve.add_argument("--port", type=int, default=DEFAULT_HTTP_PORT)

    return p


def load_config(args: argparse.Namespace) -> FtpConfig:
    overrides: dict[str, object] = {}
    if args.timeout is not None:
        overrides["timeout_s"] = args.timeout
    if args.active:
        overrides["passive"] = False
    if args.url:
        return FtpConfig.from_url(args.url, **overrides)
    return FtpConfig.from_env(**overrides)


def run(fs: FtpFileSystem, args: argparse.Namespace) -> int:
    if args.cmd == "ls":
        return cmd_ls(fs, args, sys.stdout)
    if args.cmd == "cat":
        return cmd_cat(fs, args, sys.stdout.buffer)
    return cmd_serve(fs, args)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s [%(levelname)s] %(message)s")

    try:
        config = load_config(args)
    except ValueError as e:
        print(f"ftpfs: {e}", file=sys.stderr)
        return 2

    try:
        with FtpFileSystem.connect(config) as fs:
            return run(fs, args)
    except (FtpFsError, *ftplib.all_errors) as e:
        print(f"ftpfs: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
