"""Exclusion filter for directory-mode injection.

A candidate is dropped when either holds:
  - its logical path starts with a top-level __pycache__ directory, or
  - its top-level component is in the configured exclusion set.

The top-level component is the text before the first path separator,
hyphen, trailing ".py" or trailing ".pyc". The hyphen split lets an
exclusion of "boto3" also catch "boto3-1.0.dist-info/". Matching is
literal and case-sensitive: an exclusion containing a separator (e.g.
"a/b") can never match, because splitting always stops at "a".

Filtering is pure: no I/O, and the surviving set does not depend on
candidate order.
"""

import re
from dataclasses import dataclass, field
from typing import AbstractSet, Iterable

from reqinject.staging.types import CandidateEntry

_PYCACHE_RE = re.compile(r"^__pycache__[\\/]")
_TOP_LEVEL_SPLIT_RE = re.compile(r"[-\\/]|\.py$|\.pyc$")


@dataclass
class FilterResult:
    """Candidates that survived filtering plus the paths that did not."""

    kept: list[CandidateEntry] = field(default_factory=list)
    excluded: list[str] = field(default_factory=list)

    @property
    def excluded_count(self) -> int:
        return len(self.excluded)


def top_level_component(logical_path: str) -> str:
    return _TOP_LEVEL_SPLIT_RE.split(logical_path, maxsplit=1)[0]


def is_excluded(logical_path: str, exclusions: AbstractSet[str]) -> bool:
    if _PYCACHE_RE.match(logical_path):
        return True
    return top_level_component(logical_path) in exclusions


def filter_candidates(
    candidates: Iterable[CandidateEntry],
    exclusions: AbstractSet[str],
) -> FilterResult:
    """Split candidates into kept and excluded, preserving input order."""
    result = FilterResult()
    for candidate in candidates:
        if is_excluded(candidate.logical_path, exclusions):
            result.excluded.append(candidate.logical_path)
        else:
            result.kept.append(candidate)
    return result
