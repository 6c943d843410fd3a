from __future__ import annotations


class FtpFsError(Exception):
    """Base class for errors raised by the file system itself.

    Transport failures (``ftplib.all_errors``) are not wrapped and reach the
    caller unchanged.
    """


class NotFoundError(FtpFsError, FileNotFoundError):
    def __init__(self, path: str):
        super().__init__(f"file not found: {path}")
        self.path = path


class InvalidArgumentError(FtpFsError, ValueError):
    pass


class ReadOnDirectoryError(FtpFsError, IsADirectoryError):
    def __init__(self, path: str):
        super().__init__(f"read on directory: {path}")
        self.path = path


class ReaddirOnFileError(FtpFsError, NotADirectoryError):
    def __init__(self, path: str):
        super().__init__(f"readdir on file: {path}")
        self.path = path
