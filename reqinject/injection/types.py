"""Types for the injection module."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class InjectionOutcome:
    """Result of patching one artifact.

    An outcome with an error means the artifact was left as it was on disk:
    the patched archive is only written once it is fully built.
    """

    target_artifact: Path
    function_name: Optional[str] = None
    injected_count: int = 0
    excluded: list[str] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def excluded_count(self) -> int:
        return len(self.excluded)

    def to_dict(self) -> dict:
        return {
            "target_artifact": str(self.target_artifact),
            "function_name": self.function_name,
            "injected_count": self.injected_count,
            "excluded_count": self.excluded_count,
            "is_success": self.is_success,
            "error": None if self.error is None else f"{type(self.error).__name__}: {self.error}",
        }
