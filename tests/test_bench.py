from __future__ import annotations

import logging

from linkbox import log
from linkbox.bench import run_benchmark


def test_benchmark_loopback():
    r = run_benchmark(size_bytes=50_000, chunk_size=1024)
    assert r.bytes_transferred == 50_000
    assert r.duration_s > 0
    assert r.throughput_mbps > 0


def test_configure_logging(monkeypatch):
    seen = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: seen.update(kw))
    log.configure_logging("debug")
    assert seen == {"level": logging.DEBUG, "format": log.LOG_FORMAT}
