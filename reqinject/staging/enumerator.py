"""Source enumerator: walks a staging source and yields candidate entries.

Directory traversal is depth-first with names sorted at every level, so the
same directory contents always enumerate in the same order. Dotfiles are
included. Permission bits are taken from os.stat (symlinks followed), the
same way the file contents will be read later.
"""

import logging
import os
from pathlib import Path, PurePosixPath
from typing import Iterator

from reqinject.errors import FileReadError, StagingSourceMissingError
from reqinject.staging.types import (
    BUNDLE_ENTRY_NAME,
    CandidateEntry,
    DirectoryTree,
    PrebuiltBundle,
    StagingSource,
)

logger = logging.getLogger(__name__)


def enumerate_candidates(source: StagingSource) -> Iterator[CandidateEntry]:
    """Yield every entry of the staging source, directories included.

    Raises:
        StagingSourceMissingError: If the staging root or bundle is absent.
    """
    if isinstance(source, PrebuiltBundle):
        yield _bundle_candidate(source)
        return
    if isinstance(source, DirectoryTree):
        yield from _walk_tree(source.root)
        return
    raise TypeError(f"Unsupported staging source: {source!r}")


def iter_file_candidates(source: StagingSource) -> Iterator[CandidateEntry]:
    """Yield only the leaf-file candidates of the staging source."""
    for candidate in enumerate_candidates(source):
        if not candidate.is_directory:
            yield candidate


def _bundle_candidate(bundle: PrebuiltBundle) -> CandidateEntry:
    path = Path(bundle.path)
    if not path.is_file():
        raise StagingSourceMissingError(
            f"Pre-zipped requirements bundle not found: {path}", path
        )
    return CandidateEntry(
        logical_path=BUNDLE_ENTRY_NAME,
        source_path=path,
        permission_bits=_stat_mode(path),
    )


def _walk_tree(root: Path) -> Iterator[CandidateEntry]:
    root = Path(root)
    if not root.is_dir():
        raise StagingSourceMissingError(
            f"Requirements staging directory not found: {root}", root
        )

    def on_error(exc: OSError) -> None:
        raise FileReadError(f"Could not list staging directory: {exc}", exc.filename) from exc

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        # Sorting in place also fixes the order os.walk descends in
        dirnames.sort()
        filenames.sort()
        current = Path(dirpath)

        for name in dirnames:
            path = current / name
            yield CandidateEntry(
                logical_path=_relative(path, root),
                source_path=path,
                permission_bits=_stat_mode(path),
                is_directory=True,
            )
        for name in filenames:
            path = current / name
            yield CandidateEntry(
                logical_path=_relative(path, root),
                source_path=path,
                permission_bits=_stat_mode(path),
            )


def _relative(path: Path, root: Path) -> str:
    return PurePosixPath(*path.relative_to(root).parts).as_posix()


def _stat_mode(path: Path) -> int:
    try:
        return os.stat(path).st_mode
    except OSError as exc:
        raise FileReadError(f"Could not stat {path}: {exc}", path) from exc
