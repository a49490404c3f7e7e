"""Archive module: in-memory zip rewriting with permission fidelity.

Public API:
    ArchiveBuffer.from_bytes(archive_bytes) -> ArchiveBuffer
    apply_entries(archive_bytes, entries) -> bytes
    read_entries(archive_bytes) -> list[ArchiveEntry]
"""

from reqinject.archive.mutator import ArchiveBuffer, apply_entries, read_entries
from reqinject.archive.types import ArchiveEntry

__all__ = ["ArchiveBuffer", "ArchiveEntry", "apply_entries", "read_entries"]
