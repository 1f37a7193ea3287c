from __future__ import annotations

import os
from pathlib import Path
from typing import BinaryIO, Union

from .errors import MalformedHeader

PathLike = Union[str, "os.PathLike[str]"]


def open_readable(path: PathLike) -> BinaryIO:
    if not os.access(path, os.R_OK) and os.path.exists(path):
        raise PermissionError(f"file is not readable: {path}")
    return open(path, "rb")


def file_size(path: PathLike) -> int:
    return os.path.getsize(path)


def wire_name(path: PathLike) -> bytes:
    return os.fsencode(os.path.basename(os.fspath(path)))


class DirectoryOpener:
    """Default destination policy: write the received name's base name into one directory.

    Existing files are overwritten.
    """

    def __init__(self, base_dir: PathLike = "."):
        self.base_dir = Path(base_dir)

    def resolve(self, name: bytes) -> Path:
        base = os.path.basename(os.fsdecode(name).replace("\\", "/"))
        if base in ("", ".", "..") or "\x00" in base:
            raise MalformedHeader(f"unusable file name: {name!r}")
        return self.base_dir / base

    def __call__(self, name: bytes) -> BinaryIO:
        return open(self.resolve(name), "wb")
