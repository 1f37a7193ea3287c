from __future__ import annotations

import logging
import socket

from .constants import CHUNK_SIZE, DEFAULT_IO_TIMEOUT_S
from .errors import ConnectionLost
from .files import PathLike
from .session import FailureKind, ProgressCallback, SendSession, TransferResult, TransferState

logger = logging.getLogger(__name__)


def connect(host: str, port: int, *, timeout: float | None = DEFAULT_IO_TIMEOUT_S) -> socket.socket:
    try:
        conn = socket.create_connection((host, port), timeout=timeout)
    except OSError as exc:
        raise ConnectionLost(f"failed to connect to {host}:{port}: {exc}") from exc
    logger.info("connected to %s:%d", host, port)
    return conn


def send_file(
    host: str,
    port: int,
    path: PathLike,
    *,
    name: bytes | None = None,
    size: int | None = None,
    chunk_size: int = CHUNK_SIZE,
    timeout: float | None = DEFAULT_IO_TIMEOUT_S,
    on_progress: ProgressCallback | None = None,
) -> TransferResult:
    """Connect once, send ``path``, close. Failures come back as a FAILED result."""
    try:
        conn = connect(host, port, timeout=timeout)
    except ConnectionLost as exc:
        logger.warning("send aborted; kind=%s: %s", FailureKind.CONNECTION.value, exc)
        return TransferResult(
            TransferState.FAILED,
            None,
            0,
            failure=FailureKind.CONNECTION,
            error=exc,
        )

    session = SendSession(
        conn,
        path,
        size=size,
        name=name,
        chunk_size=chunk_size,
        on_progress=on_progress,
    )
    return session.run()
