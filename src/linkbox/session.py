from __future__ import annotations

import enum
import functools
import logging
import os
import socket
import stat
import time
from contextlib import closing
from dataclasses import dataclass, field
from typing import BinaryIO, Callable

from .constants import CHUNK_SIZE, MAX_HEADER_SIZE
from .errors import (
    ConnectionLost,
    MalformedHeader,
    ShortRead,
    SizeMismatch,
    TransferError,
    TruncatedTransfer,
)
from .files import DirectoryOpener, PathLike, file_size, open_readable, wire_name
from .header import Header, decode
from .pump import recv_exact, send_all

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]
Opener = Callable[[bytes], BinaryIO]


class TransferState(enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


class FailureKind(enum.Enum):
    CONNECTION = "connection"
    TRUNCATED = "truncated"
    MALFORMED_HEADER = "malformed_header"
    SIZE_MISMATCH = "size_mismatch"
    IO = "io"
    PERMISSION = "permission"


def failure_kind(exc: BaseException) -> FailureKind:
    # ConnectionLost is an OSError, so it must be matched before the local I/O kinds.
    if isinstance(exc, MalformedHeader):
        return FailureKind.MALFORMED_HEADER
    if isinstance(exc, SizeMismatch):
        return FailureKind.SIZE_MISMATCH
    if isinstance(exc, (TruncatedTransfer, ShortRead)):
        return FailureKind.TRUNCATED
    if isinstance(exc, ConnectionLost):
        return FailureKind.CONNECTION
    if isinstance(exc, PermissionError):
        return FailureKind.PERMISSION
    return FailureKind.IO


@dataclass(slots=True)
class TransferResult:
    state: TransferState
    header: Header | None
    bytes_transferred: int
    failure: FailureKind | None = None
    error: BaseException | None = None
    destination: str | None = None
    duration_s: float = 0.0

    @property
    def ok(self) -> bool:
        return self.state is TransferState.COMPLETED

    @property
    def throughput_mbps(self) -> float:
        if self.duration_s <= 0:
            return 0.0
        return (self.bytes_transferred * 8 / 1_000_000) / self.duration_s

    def raise_for_failure(self) -> None:
        if self.error is not None:
            raise self.error


@dataclass(slots=True)
class SendSession:
    """Client side: header, then the file body in chunks, over one connection.

    The session owns ``conn`` and closes it when ``run`` returns.
    """

    conn: socket.socket
    path: PathLike
    size: int | None = None
    name: bytes | None = None
    chunk_size: int = CHUNK_SIZE
    on_progress: ProgressCallback | None = None
    header: Header | None = field(default=None, init=False)
    bytes_transferred: int = field(default=0, init=False)
    state: TransferState = field(default=TransferState.PENDING, init=False)

    def run(self) -> TransferResult:
        start = time.monotonic()
        self.state = TransferState.ACTIVE
        try:
            with closing(self.conn), open_readable(self.path) as f:
                self._send(f)
        except (TransferError, OSError) as exc:
            return self._finish(start, exc)
        return self._finish(start)

    def _send(self, f: BinaryIO) -> None:
        size = file_size(self.path) if self.size is None else self.size
        name = wire_name(self.path) if self.name is None else self.name
        self.header = Header(name=name, size=size)
        send_all(self.conn, self.header.to_bytes())
        logger.info("send start; name=%r size=%d", name, size)

        remaining = size
        while remaining:
            chunk = f.read(min(self.chunk_size, remaining))
            if not chunk:
                raise SizeMismatch(size, self.bytes_transferred)
            send_all(self.conn, chunk)
            self.bytes_transferred += len(chunk)
            remaining -= len(chunk)
            logger.debug("sent chunk; bytes=%d total=%d/%d", len(chunk), self.bytes_transferred, size)
            if self.on_progress is not None:
                self.on_progress(self.bytes_transferred, size)

        extra = f.read(1)
        if extra:
            raise SizeMismatch(size, _actual_size(f, size + len(extra)))

    def _finish(self, start: float, exc: BaseException | None = None) -> TransferResult:
        duration = time.monotonic() - start
        if exc is None:
            self.state = TransferState.COMPLETED
            logger.info("send done; bytes=%d seconds=%.3f", self.bytes_transferred, duration)
            return TransferResult(self.state, self.header, self.bytes_transferred, duration_s=duration)

        self.state = TransferState.FAILED
        kind = failure_kind(exc)
        logger.warning("send failed; kind=%s sent=%d: %s", kind.value, self.bytes_transferred, exc)
        return TransferResult(
            self.state,
            self.header,
            self.bytes_transferred,
            failure=kind,
            error=exc,
            duration_s=duration,
        )


@dataclass(slots=True)
class ReceiveSession:
    """Server side: parse the header, then stream exactly ``header.size`` bytes to disk.

    A truncated body leaves the partially written destination in place;
    ``TransferResult.destination`` names it so the caller can discard it.
    """

    conn: socket.socket
    open_destination: Opener = field(default_factory=DirectoryOpener)
    chunk_size: int = CHUNK_SIZE
    max_header_size: int = MAX_HEADER_SIZE
    header: Header | None = field(default=None, init=False)
    bytes_transferred: int = field(default=0, init=False)
    destination: str | None = field(default=None, init=False)
    state: TransferState = field(default=TransferState.PENDING, init=False)

    def run(self) -> TransferResult:
        start = time.monotonic()
        self.state = TransferState.ACTIVE
        try:
            with closing(self.conn):
                read = functools.partial(recv_exact, self.conn)
                self.header = decode(read, max_header_size=self.max_header_size)
                logger.info("receive start; name=%r size=%d", self.header.name, self.header.size)
                with self.open_destination(self.header.name) as out:
                    name = getattr(out, "name", None)
                    self.destination = os.fspath(name) if isinstance(name, (str, os.PathLike)) else None
                    self._drain(out)
        except (TransferError, OSError) as exc:
            return self._finish(start, exc)
        return self._finish(start)

    def _drain(self, out: BinaryIO) -> None:
        assert self.header is not None
        size = self.header.size
        while self.bytes_transferred < size:
            want = min(self.chunk_size, size - self.bytes_transferred)
            try:
                chunk = recv_exact(self.conn, want)
            except ShortRead as exc:
                if exc.partial:
                    out.write(exc.partial)
                    self.bytes_transferred += len(exc.partial)
                raise TruncatedTransfer(self.bytes_transferred, size) from exc
            out.write(chunk)
            self.bytes_transferred += len(chunk)
            logger.debug("received chunk; bytes=%d total=%d/%d", len(chunk), self.bytes_transferred, size)

    def _finish(self, start: float, exc: BaseException | None = None) -> TransferResult:
        duration = time.monotonic() - start
        if exc is None:
            self.state = TransferState.COMPLETED
            logger.info(
                "receive done; name=%r bytes=%d seconds=%.3f",
                self.header.name if self.header else None,
                self.bytes_transferred,
                duration,
            )
            return TransferResult(
                self.state,
                self.header,
                self.bytes_transferred,
                destination=self.destination,
                duration_s=duration,
            )

        self.state = TransferState.FAILED
        kind = failure_kind(exc)
        logger.warning("receive failed; kind=%s received=%d: %s", kind.value, self.bytes_transferred, exc)
        return TransferResult(
            self.state,
            self.header,
            self.bytes_transferred,
            failure=kind,
            error=exc,
            destination=self.destination,
            duration_s=duration,
        )


def _actual_size(f: BinaryIO, at_least: int) -> int:
    # Only regular files have a size worth reporting; pipes and devices may never end.
    st = os.fstat(f.fileno())
    if stat.S_ISREG(st.st_mode):
        return max(st.st_size, at_least)
    return at_least
