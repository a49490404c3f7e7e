"""Staging module: enumerates dependency files prepared by the build step.

Public API:
    enumerate_candidates(source) -> Iterator[CandidateEntry]
    iter_file_candidates(source) -> Iterator[CandidateEntry]
"""

from reqinject.staging.enumerator import enumerate_candidates, iter_file_candidates
from reqinject.staging.types import (
    BUNDLE_ENTRY_NAME,
    CandidateEntry,
    DirectoryTree,
    PrebuiltBundle,
    StagingSource,
)

__all__ = [
    "BUNDLE_ENTRY_NAME",
    "CandidateEntry",
    "DirectoryTree",
    "PrebuiltBundle",
    "StagingSource",
    "enumerate_candidates",
    "iter_file_candidates",
]
