from __future__ import annotations

import pytest

from linkbox.errors import MalformedHeader
from linkbox.files import DirectoryOpener, file_size, open_readable, wire_name


def test_wire_name_is_base_name(tmp_path):
    assert wire_name(tmp_path / "sub" / "report.pdf") == b"report.pdf"


def test_file_size_and_readable(tmp_path):
    p = tmp_path / "a.bin"
    p.write_bytes(b"12345")
    assert file_size(p) == 5
    with open_readable(p) as f:
        assert f.read() == b"12345"


@pytest.mark.parametrize("name", [b"../../etc/passwd", b"/abs/path.txt", b"dir\\evil.txt"])
def test_directory_opener_strips_directories(tmp_path, name):
    target = DirectoryOpener(tmp_path).resolve(name)
    assert target.parent == tmp_path


@pytest.mark.parametrize("name", [b"", b".", b"..", b"dir/"])
def test_directory_opener_rejects_unusable_names(tmp_path, name):
    with pytest.raises(MalformedHeader):
        DirectoryOpener(tmp_path).resolve(name)


def test_directory_opener_writes(tmp_path):
    with DirectoryOpener(tmp_path)(b"out.txt") as f:
        f.write(b"ok")
    assert (tmp_path / "out.txt").read_bytes() == b"ok"


def test_open_readable_denied(tmp_path, monkeypatch):
    p = tmp_path / "locked.bin"
    p.write_bytes(b"secret")
    monkeypatch.setattr("linkbox.files.os.access", lambda path, mode: False)
    with pytest.raises(PermissionError):
        open_readable(p)
