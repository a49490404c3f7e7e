"""Types for the archive module."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ArchiveEntry:
    """A single file destined for (or read from) a deployment archive.

    permission_bits is the full st_mode of the source file, stored verbatim
    in the upper half of the zip external attributes.
    """

    logical_path: str
    content: bytes
    permission_bits: int
