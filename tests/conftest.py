"""Shared fixtures for the reqinject test suite.

All archives and staging trees are built under tmp_path; no real
deployment artifacts are touched.
"""

import io
import struct
import zipfile
from pathlib import Path

import pytest


def _zip_bytes(members: dict[str, bytes], modes: dict[str, int] | None = None) -> bytes:
    modes = modes or {}
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in members.items():
            info = zipfile.ZipInfo(name, date_time=(2020, 1, 1, 0, 0, 0))
            info.create_system = 3
            info.external_attr = modes.get(name, 0o100644) << 16
            zf.writestr(info, data)
    return buffer.getvalue()


@pytest.fixture
def zip_bytes():
    """Factory: build zip bytes from a {name: content} mapping."""
    return _zip_bytes


def _rewrite_member_header(archive_bytes: bytes, method: int | None = None, flag_bits: int = 0) -> bytes:
    """Patch the first member's local and central headers in place."""
    data = bytearray(archive_bytes)
    central = data.find(b"PK\x01\x02")
    # (flags offset, method offset) in the local and central headers
    for flags_at, method_at in ((6, 8), (central + 8, central + 10)):
        flags = struct.unpack_from("<H", data, flags_at)[0]
        struct.pack_into("<H", data, flags_at, flags | flag_bits)
        if method is not None:
            struct.pack_into("<H", data, method_at, method)
    return bytes(data)


@pytest.fixture
def unreadable_zip_bytes():
    """Factory: a one-member archive zipfile can list but not extract.

    kind="deflate64" uses a compression method zipfile does not implement;
    kind="encrypted" sets the traditional encryption flag.
    """

    def _make(kind: str = "deflate64", name: str = "handler.py") -> bytes:
        original = _zip_bytes({name: b"def main(): pass\n"})
        if kind == "deflate64":
            return _rewrite_member_header(original, method=9)
        if kind == "encrypted":
            return _rewrite_member_header(original, flag_bits=0x1)
        raise ValueError(kind)

    return _make


@pytest.fixture
def make_artifact(tmp_path):
    """Factory: write a deployment archive and return its path."""

    def _make(name: str = "service.zip", members: dict[str, bytes] | None = None) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(_zip_bytes(members if members is not None else {"handler.py": b"def main(): pass\n"}))
        return path

    return _make


@pytest.fixture
def make_tree(tmp_path):
    """Factory: write a staging tree from {relative path: content} and return its root."""

    def _make(root: str, files: dict[str, bytes], modes: dict[str, int] | None = None) -> Path:
        base = tmp_path / root
        base.mkdir(parents=True, exist_ok=True)
        for rel, content in files.items():
            path = base / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
            if modes and rel in modes:
                path.chmod(modes[rel])
        return base

    return _make


def read_archive(path: Path) -> dict[str, tuple[bytes, int]]:
    """Map each member name to (content, permission bits)."""
    with zipfile.ZipFile(path) as zf:
        return {
            info.filename: (zf.read(info), info.external_attr >> 16)
            for info in zf.infolist()
        }


@pytest.fixture
def archive_contents():
    return read_archive
