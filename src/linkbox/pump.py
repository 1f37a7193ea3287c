from __future__ import annotations

import logging
import socket

from .errors import ConnectionLost, ShortRead

logger = logging.getLogger(__name__)


def send_all(conn: socket.socket, data: bytes) -> int:
    view = memoryview(data)
    sent_total = 0
    while sent_total < len(view):
        try:
            sent = conn.send(view[sent_total:])
        except socket.timeout as exc:
            raise ConnectionLost(f"send timed out after {sent_total} of {len(view)} bytes") from exc
        except OSError as exc:
            raise ConnectionLost(f"send failed after {sent_total} of {len(view)} bytes: {exc}") from exc
        if sent <= 0:
            raise ConnectionLost(f"send made no progress after {sent_total} of {len(view)} bytes")
        sent_total += sent
    return sent_total


def recv_exact(conn: socket.socket, n: int) -> bytes:
    """Read exactly ``n`` bytes, raising ShortRead (with the partial data) on EOF."""
    if n == 0:
        return b""
    buf = bytearray(n)
    view = memoryview(buf)
    got = 0
    while got < n:
        try:
            count = conn.recv_into(view[got:], n - got)
        except socket.timeout as exc:
            raise ConnectionLost(f"recv timed out after {got} of {n} bytes") from exc
        except OSError as exc:
            raise ConnectionLost(f"recv failed after {got} of {n} bytes: {exc}") from exc
        if count <= 0:
            logger.debug("peer closed; got=%d wanted=%d", got, n)
            raise ShortRead(n, bytes(buf[:got]))
        got += count
    return bytes(buf)
