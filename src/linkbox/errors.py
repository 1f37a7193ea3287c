from __future__ import annotations


class TransferError(Exception):
    pass


class ConnectionLost(TransferError, ConnectionError):
    """Socket failure, reset, timeout, or a send that made no progress."""


class ShortRead(ConnectionLost):
    """Peer closed the stream before the requested byte count arrived."""

    def __init__(self, expected: int, partial: bytes = b""):
        super().__init__(f"peer closed after {len(partial)} of {expected} bytes")
        self.expected = expected
        self.partial = partial


class TruncatedTransfer(TransferError):
    def __init__(self, received: int, expected: int):
        super().__init__(f"body truncated: received {received} of {expected} bytes")
        self.received = received
        self.expected = expected


class MalformedHeader(TransferError, ValueError):
    pass


class SizeMismatch(TransferError):
    def __init__(self, declared: int, actual: int):
        super().__init__(f"declared {declared} bytes but file produced {actual}")
        self.declared = declared
        self.actual = actual
