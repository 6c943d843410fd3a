from __future__ import annotations

import stat

BUFFER_CAPACITY = 1024  # look-back window of a streaming file handle

FILE_MODE = 0o644
DIR_MODE = stat.S_IFDIR | FILE_MODE

DEFAULT_PORT = 21
DEFAULT_USER = "anonymous"
DEFAULT_TIMEOUT_S = 30.0
DEFAULT_ENCODING = "utf-8"
URL_ENV_VAR = "FTPFS_URL"

DEFAULT_HTTP_HOST = "127.0.0.1"
DEFAULT_HTTP_PORT = 8021
COPY_CHUNK = 64 * 1024
