"""Injection module: patches one deployment archive with staged requirements.

Public API:
    inject(source, exclusions, target_artifact) -> InjectionOutcome
    inject_one_artifact(entry) -> InjectionOutcome
"""

from reqinject.injection.orchestrator import inject, inject_one_artifact
from reqinject.injection.types import InjectionOutcome

__all__ = ["InjectionOutcome", "inject", "inject_one_artifact"]
