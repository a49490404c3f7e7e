"""Exclusion module: decides which staged files must never be injected.

Public API:
    top_level_component(logical_path) -> str
    is_excluded(logical_path, exclusions) -> bool
    filter_candidates(candidates, exclusions) -> FilterResult
"""

from reqinject.exclusion.filter import (
    FilterResult,
    filter_candidates,
    is_excluded,
    top_level_component,
)

__all__ = ["FilterResult", "filter_candidates", "is_excluded", "top_level_component"]
