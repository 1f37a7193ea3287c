from __future__ import annotations

import logging
import socket
import threading
from typing import Callable, Tuple

from .constants import (
    ACCEPT_POLL_S,
    CHUNK_SIZE,
    DEFAULT_BACKLOG,
    DEFAULT_HOST,
    DEFAULT_IO_TIMEOUT_S,
    DEFAULT_PORT,
    MAX_HEADER_SIZE,
)
from .files import DirectoryOpener
from .session import Opener, ReceiveSession, TransferResult

logger = logging.getLogger(__name__)

ResultCallback = Callable[[TransferResult], None]


class Acceptor:
    """Listening socket plus one receive worker thread per accepted connection.

    Workers share nothing. A worker that fails, or crashes outright, is logged
    and forgotten; the accept loop keeps running.
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        *,
        backlog: int = DEFAULT_BACKLOG,
        open_destination: Opener | None = None,
        chunk_size: int = CHUNK_SIZE,
        io_timeout: float | None = DEFAULT_IO_TIMEOUT_S,
        max_header_size: int = MAX_HEADER_SIZE,
        on_result: ResultCallback | None = None,
    ):
        self.host = host
        self.port = port
        self.backlog = backlog
        self.open_destination = open_destination or DirectoryOpener()
        self.chunk_size = chunk_size
        self.io_timeout = io_timeout
        self.max_header_size = max_header_size
        self.on_result = on_result

        self.sock: socket.socket | None = None
        self._stop = threading.Event()
        self._workers: set[threading.Thread] = set()
        self._loop_thread: threading.Thread | None = None

    @property
    def address(self) -> Tuple[str, int]:
        if self.sock is None:
            raise RuntimeError("acceptor is not listening")
        host, port = self.sock.getsockname()[:2]
        return host, port

    def start(self) -> "Acceptor":
        if self.sock is not None:
            return self
        self.sock = socket.create_server((self.host, self.port), backlog=self.backlog)
        self.sock.settimeout(ACCEPT_POLL_S)
        self._stop.clear()
        logger.info("listening on %s:%d", *self.address)
        return self

    def serve_forever(self) -> None:
        sock = self.start().sock
        assert sock is not None
        logger.info("waiting for connections")
        try:
            while not self._stop.is_set():
                self._reap()
                try:
                    conn, addr = sock.accept()
                except socket.timeout:
                    continue
                except OSError:
                    if self._stop.is_set():
                        break
                    logger.exception("accept failed")
                    continue
                self._spawn(conn, addr)
        finally:
            self._close_listener()

    def serve_in_background(self) -> threading.Thread:
        self.start()
        t = threading.Thread(target=self.serve_forever, name="linkbox-acceptor", daemon=True)
        self._loop_thread = t
        t.start()
        return t

    def shutdown(self, timeout: float | None = None) -> None:
        self._stop.set()
        loop = self._loop_thread
        if loop is not None and loop is not threading.current_thread():
            loop.join(timeout)
            if loop.is_alive():
                # The loop still owns the worker set; call shutdown() again to join it.
                logger.warning("accept loop did not stop within %ss", timeout)
                return
            self._loop_thread = None
        else:
            self._close_listener()
        for t in list(self._workers):
            t.join(timeout)
        self._reap()
        logger.info("acceptor stopped")

    @property
    def active_workers(self) -> int:
        return sum(1 for t in list(self._workers) if t.is_alive())

    def __enter__(self) -> "Acceptor":
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.shutdown()

    def _spawn(self, conn: socket.socket, addr) -> None:
        logger.info("got connection from %s", addr[0] if addr else "?")
        conn.settimeout(self.io_timeout)
        t = threading.Thread(
            target=self._work,
            args=(conn, addr),
            name=f"linkbox-worker-{addr[0]}:{addr[1]}" if addr else "linkbox-worker",
            daemon=True,
        )
        self._workers.add(t)
        t.start()

    def _work(self, conn: socket.socket, addr) -> None:
        try:
            session = ReceiveSession(
                conn,
                open_destination=self.open_destination,
                chunk_size=self.chunk_size,
                max_header_size=self.max_header_size,
            )
            result = session.run()
            if self.on_result is not None:
                self.on_result(result)
        except Exception:
            logger.exception("worker crashed; peer=%s", addr)
            conn.close()

    def _reap(self) -> None:
        for t in [t for t in self._workers if not t.is_alive()]:
            t.join()
            self._workers.discard(t)

    def _close_listener(self) -> None:
        sock, self.sock = self.sock, None
        if sock is not None:
            sock.close()
