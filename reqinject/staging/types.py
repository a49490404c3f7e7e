"""Types for the staging module.

A StagingSource is either a DirectoryTree, whose files become individual
archive entries, or a PrebuiltBundle, injected whole as a single entry.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Union

# Reserved archive name for a pre-zipped dependency bundle
BUNDLE_ENTRY_NAME = ".requirements.zip"

# Reserved sub-path of a staging directory holding unpacked dependencies
REQUIREMENTS_DIR_NAME = "requirements"


@dataclass(frozen=True)
class DirectoryTree:
    """A staging directory whose files are injected one by one."""

    root: Path

    def describe(self) -> str:
        return f"directory {self.root}"


@dataclass(frozen=True)
class PrebuiltBundle:
    """A pre-zipped dependency bundle injected as one opaque entry."""

    path: Path

    def describe(self) -> str:
        return f"bundle {self.path}"


StagingSource = Union[DirectoryTree, PrebuiltBundle]


@dataclass(frozen=True)
class CandidateEntry:
    """A filesystem entry that may be injected into an archive.

    logical_path is POSIX-style, relative to the staging root (or the
    reserved bundle name). source_path is where the bytes are read from.
    Directories are reported but never injected.
    """

    logical_path: str
    source_path: Path
    permission_bits: int
    is_directory: bool = False
