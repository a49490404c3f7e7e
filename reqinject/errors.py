"""Error taxonomy for requirements injection.

Every error is fatal to the plan entry that raised it and to nothing else.
Nothing in this package retries; callers decide whether a failed entry
should fail the whole run (see runner.raise_for_failures).
"""

from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]


class InjectionError(Exception):
    """Base class for all injection failures.

    Carries the filesystem path the failure relates to, if any.
    """

    def __init__(self, message: str, path: Optional[PathLike] = None):
        self.path = Path(path) if path is not None else None
        super().__init__(message)


class InvalidConfigurationError(InjectionError):
    """Raised when a deployment configuration cannot produce a valid plan."""


class StagingSourceMissingError(InjectionError):
    """Raised when the staging directory or pre-zipped bundle is absent."""


class ArtifactNotFoundError(InjectionError):
    """Raised when the target deployment archive does not exist."""


class ArchiveCorruptError(InjectionError):
    """Raised when the target archive bytes cannot be parsed as a zip."""


class FileReadError(InjectionError):
    """Raised when a candidate file vanished or became unreadable after enumeration."""


class ArchiveWriteError(InjectionError):
    """Raised when the patched archive could not be persisted."""


class InjectionFailedError(InjectionError):
    """Aggregate error for callers that treat a run as all-or-nothing."""

    def __init__(self, failures: list[tuple[str, BaseException]]):
        self.failures = failures
        lines = [f"{artifact}: {exc}" for artifact, exc in failures]
        super().__init__(
            f"Requirements injection failed for {len(failures)} artifact(s):\n"
            + "\n".join(lines)
        )
