from __future__ import annotations

import os
import tempfile
import time
from dataclasses import dataclass

from .client import send_file
from .constants import CHUNK_SIZE
from .files import DirectoryOpener
from .server import Acceptor
from .session import TransferResult


@dataclass(frozen=True, slots=True)
class BenchmarkResult:
    bytes_transferred: int
    duration_s: float
    throughput_mbps: float


def run_benchmark(*, size_bytes: int, chunk_size: int = CHUNK_SIZE, timeout_s: float = 10.0) -> BenchmarkResult:
    """Send ``size_bytes`` of generated data to a loopback Acceptor and time it."""
    received: list[TransferResult] = []

    with tempfile.TemporaryDirectory() as tmp:
        src = os.path.join(tmp, "bench.bin")
        out_dir = os.path.join(tmp, "out")
        os.mkdir(out_dir)
        with open(src, "wb") as f:
            f.write(b"A" * size_bytes)

        acceptor = Acceptor(
            "127.0.0.1",
            0,
            open_destination=DirectoryOpener(out_dir),
            chunk_size=chunk_size,
            io_timeout=timeout_s,
            on_result=received.append,
        )
        with acceptor:
            acceptor.serve_in_background()
            host, port = acceptor.address
            sent = send_file(host, port, src, chunk_size=chunk_size, timeout=timeout_s)
            deadline = time.monotonic() + timeout_s
            while not received and time.monotonic() < deadline:
                time.sleep(0.01)
        sent.raise_for_failure()

        if len(received) != 1:
            raise RuntimeError(f"expected one receive result, got {len(received)}")
        received[0].raise_for_failure()
        actual_size = os.path.getsize(os.path.join(out_dir, "bench.bin"))
        if actual_size != size_bytes:
            raise RuntimeError(f"received {actual_size} bytes, expected {size_bytes}")

    duration_s = max(0.001, sent.duration_s)
    return BenchmarkResult(
        bytes_transferred=size_bytes,
        duration_s=duration_s,
        throughput_mbps=(size_bytes * 8 / 1_000_000) / duration_s,
    )
