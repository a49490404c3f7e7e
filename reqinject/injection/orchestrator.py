"""Injection orchestrator: one staging source into one artifact.

Pipeline (no retry, every step fatal on failure):
1. Read the target archive and parse it into memory.
2. Enumerate the staging source; in directory mode, apply the exclusion filter.
3. Read each surviving file, one at a time, in enumeration order.
4. Merge the entries into the archive (later writes win).
5. Serialize to a sibling temp file and atomically replace the target.

The target path only changes at the final rename, so any failure, including
one mid-write, leaves the original archive intact.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import AbstractSet, Union
from uuid import uuid4

from reqinject.archive.mutator import DEFAULT_COMPRESS_LEVEL, ArchiveBuffer
from reqinject.archive.types import ArchiveEntry
from reqinject.errors import (
    ArchiveWriteError,
    ArtifactNotFoundError,
    FileReadError,
)
from reqinject.exclusion.filter import filter_candidates
from reqinject.injection.types import InjectionOutcome
from reqinject.planner.types import PlanEntry
from reqinject.staging.enumerator import iter_file_candidates
from reqinject.staging.types import CandidateEntry, DirectoryTree, PrebuiltBundle, StagingSource

logger = logging.getLogger(__name__)


def inject(
    source: StagingSource,
    exclusions: AbstractSet[str],
    target_artifact: Union[str, Path],
    compress_level: int = DEFAULT_COMPRESS_LEVEL,
) -> InjectionOutcome:
    """Inject the staging source into the archive at target_artifact, in place.

    Raises:
        ArtifactNotFoundError: If target_artifact does not exist.
        StagingSourceMissingError: If the staging dir or bundle does not exist.
        ArchiveCorruptError: If the target is not a readable zip archive.
        FileReadError: If a staged file cannot be read.
        ArchiveWriteError: If the patched archive cannot be written.
    """
    target = Path(target_artifact)
    if not target.is_file():
        raise ArtifactNotFoundError(f"Deployment artifact not found: {target}", target)

    archive = ArchiveBuffer.from_bytes(_read_bytes(target), compress_level)
    outcome = InjectionOutcome(target_artifact=target)

    if isinstance(source, PrebuiltBundle):
        # The bundle is opaque: no exclusion rules apply to it
        candidates = list(iter_file_candidates(source))
    elif isinstance(source, DirectoryTree):
        filtered = filter_candidates(iter_file_candidates(source), exclusions)
        candidates = filtered.kept
        outcome.excluded = filtered.excluded
    else:
        raise TypeError(f"Unsupported staging source: {source!r}")

    archive.extend(_read_candidate(candidate) for candidate in candidates)
    outcome.injected_count = len(candidates)

    _write_bytes(target, archive.to_bytes())

    logger.info(
        "Injected %d file(s) from %s into %s (%d excluded)",
        outcome.injected_count,
        source.describe(),
        target,
        outcome.excluded_count,
    )
    return outcome


def inject_one_artifact(
    entry: PlanEntry,
    compress_level: int = DEFAULT_COMPRESS_LEVEL,
) -> InjectionOutcome:
    """Run inject() for a single plan entry."""
    outcome = inject(entry.source, entry.exclusions, entry.target_artifact, compress_level)
    outcome.function_name = entry.function_name
    return outcome


def _read_candidate(candidate: CandidateEntry) -> ArchiveEntry:
    return ArchiveEntry(
        logical_path=candidate.logical_path,
        content=_read_bytes(candidate.source_path),
        permission_bits=candidate.permission_bits,
    )


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise FileReadError(f"Could not read {path}: {exc}", path) from exc


def _write_bytes(path: Path, data: bytes) -> None:
    """Replace path with data atomically; on failure the original is untouched."""
    temp_path = path.parent / f".{path.name}.{uuid4().hex}.tmp"
    try:
        temp_path.write_bytes(data)
        shutil.copymode(path, temp_path)
        os.replace(temp_path, path)
    except OSError as exc:
        raise ArchiveWriteError(f"Could not write {path}: {exc}", path) from exc
    finally:
        if temp_path.exists():
            temp_path.unlink()
