from __future__ import annotations

import io
import struct

import pytest

from linkbox.constants import MAX_HEADER_SIZE
from linkbox.errors import MalformedHeader, ShortRead
from linkbox.header import Header, decode, encode


def test_encode_layout():
    raw = encode(b"report.pdf", 1234)
    assert raw[:4] == struct.pack("!I", len(b"report.pdf") + 4)
    assert raw[4:8] == struct.pack("!I", 1234)
    assert raw[8:] == b"report.pdf"


@pytest.mark.parametrize(
    "name,size",
    [
        (b"a", 0),
        (b"", 17),
        (b"photo.jpg", 4096),
        (b"x" * (MAX_HEADER_SIZE - 4), 0xFFFFFFFF),
    ],
)
def test_roundtrip(name, size):
    h = decode(io.BytesIO(encode(name, size)).read)
    assert h == Header(name=name, size=size)


def test_decode_twice_is_stable():
    raw = Header(b"notes.txt", 42).to_bytes()
    first = Header.read_from(io.BytesIO(raw).read)
    second = Header.read_from(io.BytesIO(raw).read)
    assert first == second == Header(b"notes.txt", 42)


def test_decode_leaves_body_unread():
    stream = io.BytesIO(encode(b"f", 3) + b"abc")
    decode(stream.read)
    assert stream.read() == b"abc"


def test_oversize_header_rejected_before_reading_name():
    calls = []
    stream = io.BytesIO(struct.pack("!II", MAX_HEADER_SIZE + 1, 10) + b"z" * 64)

    def read(n):
        calls.append(n)
        return stream.read(n)

    with pytest.raises(MalformedHeader):
        decode(read)
    assert calls == [8]


def test_custom_max_header_size():
    raw = encode(b"abcdefgh", 1)
    with pytest.raises(MalformedHeader):
        decode(io.BytesIO(raw).read, max_header_size=8)


def test_undersize_header_rejected():
    raw = struct.pack("!II", 3, 0)
    with pytest.raises(MalformedHeader):
        decode(io.BytesIO(raw).read)


def test_short_prefix_raises_short_read():
    with pytest.raises(ShortRead):
        decode(io.BytesIO(b"\x00\x00\x00").read)


def test_short_name_raises_short_read():
    raw = encode(b"longname", 1)[:-3]
    with pytest.raises(ShortRead) as info:
        decode(io.BytesIO(raw).read)
    assert info.value.partial == b"longn"


def test_encode_rejects_long_name():
    with pytest.raises(MalformedHeader):
        encode(b"n" * MAX_HEADER_SIZE, 0)


def test_encode_rejects_size_over_32_bits():
    with pytest.raises(MalformedHeader):
        encode(b"big", 0x1_0000_0000)
