"""Tests for the staging source enumerator.

All staging trees are written to tmp_path.
"""

import os

import pytest

from reqinject.errors import FileReadError, StagingSourceMissingError
from reqinject.staging import (
    BUNDLE_ENTRY_NAME,
    DirectoryTree,
    PrebuiltBundle,
    enumerate_candidates,
    iter_file_candidates,
)


# ---------------------------------------------------------------------------
# DirectoryTree
# ---------------------------------------------------------------------------

class TestDirectoryTree:
    def test_files_are_relative_to_root(self, make_tree):
        root = make_tree("requirements", {
            "six.py": b"six",
            "requests/__init__.py": b"req",
            "requests/adapters/http.py": b"http",
        })
        paths = [c.logical_path for c in iter_file_candidates(DirectoryTree(root))]
        assert sorted(paths) == ["requests/__init__.py", "requests/adapters/http.py", "six.py"]

    def test_directories_are_reported_but_not_files(self, make_tree):
        root = make_tree("requirements", {"pkg/mod.py": b"x"})

        everything = list(enumerate_candidates(DirectoryTree(root)))
        dirs = [c.logical_path for c in everything if c.is_directory]
        files = [c.logical_path for c in everything if not c.is_directory]
        assert dirs == ["pkg"]
        assert files == ["pkg/mod.py"]

        assert [c.logical_path for c in iter_file_candidates(DirectoryTree(root))] == ["pkg/mod.py"]

    def test_dotfiles_are_included(self, make_tree):
        root = make_tree("requirements", {".hidden": b"h", "pkg/.config": b"c"})
        paths = {c.logical_path for c in iter_file_candidates(DirectoryTree(root))}
        assert paths == {".hidden", "pkg/.config"}

    def test_order_is_deterministic_and_lexical(self, make_tree):
        root = make_tree("requirements", {
            "zeta.py": b"z",
            "alpha/b.py": b"b",
            "alpha/a.py": b"a",
            "mid.py": b"m",
        })
        first = [c.logical_path for c in iter_file_candidates(DirectoryTree(root))]
        second = [c.logical_path for c in iter_file_candidates(DirectoryTree(root))]

        assert first == second
        assert first == ["mid.py", "zeta.py", "alpha/a.py", "alpha/b.py"]

    def test_permission_bits_come_from_stat(self, make_tree):
        root = make_tree(
            "requirements",
            {"bin/tool": b"#!/bin/sh\n", "six.py": b"six"},
            modes={"bin/tool": 0o755, "six.py": 0o644},
        )
        modes = {c.logical_path: c.permission_bits for c in iter_file_candidates(DirectoryTree(root))}

        assert modes["bin/tool"] == os.stat(root / "bin" / "tool").st_mode
        assert modes["bin/tool"] & 0o777 == 0o755
        assert modes["six.py"] & 0o777 == 0o644

    def test_source_path_points_at_file(self, make_tree):
        root = make_tree("requirements", {"pkg/mod.py": b"x"})
        (candidate,) = iter_file_candidates(DirectoryTree(root))
        assert candidate.source_path == root / "pkg" / "mod.py"

    def test_empty_directory_yields_nothing(self, make_tree):
        root = make_tree("requirements", {})
        assert list(iter_file_candidates(DirectoryTree(root))) == []

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(StagingSourceMissingError) as exc_info:
            list(iter_file_candidates(DirectoryTree(tmp_path / "nope")))
        assert exc_info.value.path == tmp_path / "nope"

    def test_root_that_is_a_file_raises(self, tmp_path):
        path = tmp_path / "requirements"
        path.write_bytes(b"not a dir")
        with pytest.raises(StagingSourceMissingError):
            list(iter_file_candidates(DirectoryTree(path)))

    def test_dangling_symlink_raises_read_error(self, make_tree):
        root = make_tree("requirements", {"six.py": b"six"})
        os.symlink(root / "gone.py", root / "link.py")
        with pytest.raises(FileReadError):
            list(iter_file_candidates(DirectoryTree(root)))


# ---------------------------------------------------------------------------
# PrebuiltBundle
# ---------------------------------------------------------------------------

class TestPrebuiltBundle:
    def test_single_candidate_with_reserved_name(self, tmp_path):
        bundle = tmp_path / ".requirements.zip"
        bundle.write_bytes(b"PK\x05\x06" + b"\x00" * 18)
        bundle.chmod(0o640)

        candidates = list(enumerate_candidates(PrebuiltBundle(bundle)))
        assert len(candidates) == 1
        assert candidates[0].logical_path == BUNDLE_ENTRY_NAME
        assert candidates[0].source_path == bundle
        assert candidates[0].permission_bits & 0o777 == 0o640
        assert not candidates[0].is_directory

    def test_missing_bundle_raises(self, tmp_path):
        with pytest.raises(StagingSourceMissingError):
            list(enumerate_candidates(PrebuiltBundle(tmp_path / ".requirements.zip")))

    def test_unknown_source_type_raises(self):
        with pytest.raises(TypeError):
            list(enumerate_candidates("not-a-source"))
