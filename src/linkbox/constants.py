from __future__ import annotations

HEADER_FORMAT = "!II"  # header_size (includes its own 4 bytes), file_size
HEADER_SIZE_FIELD = 4
MAX_HEADER_SIZE = 4096
MAX_FILE_SIZE = 0xFFFFFFFF

CHUNK_SIZE = 4096

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3490
DEFAULT_BACKLOG = 10
DEFAULT_IO_TIMEOUT_S = 30.0
ACCEPT_POLL_S = 0.5
