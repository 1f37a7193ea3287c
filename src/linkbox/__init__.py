"""linkbox: single-file transfer over a stream connection.

The package keeps the layers apart:
- header framing (pure, no I/O)
- the byte pump that absorbs short reads and writes
- send/receive sessions that own one connection each
- the acceptor and connector glue around them
"""

from .client import send_file
from .errors import (
    ConnectionLost,
    MalformedHeader,
    ShortRead,
    SizeMismatch,
    TransferError,
    TruncatedTransfer,
)
from .header import Header
from .server import Acceptor
from .session import FailureKind, ReceiveSession, SendSession, TransferResult, TransferState

__all__ = [
    "Acceptor",
    "ConnectionLost",
    "FailureKind",
    "Header",
    "MalformedHeader",
    "ReceiveSession",
    "SendSession",
    "ShortRead",
    "SizeMismatch",
    "TransferError",
    "TransferResult",
    "TransferState",
    "TruncatedTransfer",
    "send_file",
]
