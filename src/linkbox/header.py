from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Callable

from .constants import HEADER_FORMAT, HEADER_SIZE_FIELD, MAX_FILE_SIZE, MAX_HEADER_SIZE
from .errors import MalformedHeader, ShortRead

_PREFIX = struct.Struct(HEADER_FORMAT)

Reader = Callable[[int], bytes]


def _read(read: Reader, n: int) -> bytes:
    data = read(n)
    if len(data) != n:
        raise ShortRead(n, data)
    return data


@dataclass(frozen=True, slots=True)
class Header:
    name: bytes
    size: int

    def to_bytes(self) -> bytes:
        return encode(self.name, self.size)

    @staticmethod
    def read_from(read: Reader, max_header_size: int = MAX_HEADER_SIZE) -> "Header":
        return decode(read, max_header_size=max_header_size)


def encode(name: bytes, size: int) -> bytes:
    header_size = len(name) + HEADER_SIZE_FIELD
    if header_size > MAX_HEADER_SIZE:
        raise MalformedHeader(f"name too long: header would be {header_size} bytes (max {MAX_HEADER_SIZE})")
    if not 0 <= size <= MAX_FILE_SIZE:
        raise MalformedHeader(f"file size out of range for a 32-bit field: {size}")
    return _PREFIX.pack(header_size, size) + bytes(name)


def decode(read: Reader, max_header_size: int = MAX_HEADER_SIZE) -> Header:
    """Read one header from ``read``.

    ``read(n)`` may be any callable returning up to ``n`` bytes. The declared
    header size is checked before the name is read, so a hostile length never
    drives an allocation.
    """
    header_size, size = _PREFIX.unpack(_read(read, _PREFIX.size))
    if header_size < HEADER_SIZE_FIELD:
        raise MalformedHeader(f"header size {header_size} is smaller than its own field")
    if header_size > max_header_size:
        raise MalformedHeader(f"header size {header_size} exceeds maximum {max_header_size}")

    name_len = header_size - HEADER_SIZE_FIELD
    name = _read(read, name_len) if name_len else b""
    return Header(name=name, size=size)
