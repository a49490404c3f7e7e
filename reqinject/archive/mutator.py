"""Archive mutator: merges new entries into an existing zip archive.

The zip format has no in-place update, so the archive is rebuilt:
1. Every existing member is read into memory, keyed by name.
2. Each new entry replaces or appends to that mapping (last write wins).
3. A fresh archive is written to a buffer and returned as bytes.

Replaced members keep their original position; new members are appended.
Parent directory records are never synthesized for injected paths.
An ArchiveBuffer is not safe for concurrent writers; each injection run
owns its own instance.
"""

import copy
import io
import logging
import zipfile
import zlib
from typing import Iterable, Optional

from reqinject.archive.types import ArchiveEntry
from reqinject.errors import ArchiveCorruptError

logger = logging.getLogger(__name__)

# Injected entries share one timestamp so identical inputs give identical bytes.
# 1980-01-01 is the earliest date a zip header can represent.
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)

# Unix "made by" host system in the zip central directory
_UNIX_CREATE_SYSTEM = 3

DEFAULT_COMPRESS_LEVEL = 9

# (info, data, compress level); existing members keep their own settings
_Member = tuple[zipfile.ZipInfo, bytes, Optional[int]]


class ArchiveBuffer:
    """A fully loaded zip archive that accepts overwriting writes."""

    def __init__(
        self,
        members: dict[str, _Member],
        comment: bytes = b"",
        compress_level: int = DEFAULT_COMPRESS_LEVEL,
    ):
        self._members = members
        self._comment = comment
        self._compress_level = compress_level
        self.writes = 0

    @classmethod
    def from_bytes(
        cls,
        archive_bytes: bytes,
        compress_level: int = DEFAULT_COMPRESS_LEVEL,
    ) -> "ArchiveBuffer":
        """Parse archive bytes into memory.

        Raises:
            ArchiveCorruptError: If archive_bytes is not a readable zip archive.
        """
        members: dict[str, _Member] = {}
        try:
            with zipfile.ZipFile(io.BytesIO(archive_bytes), "r") as source:
                for info in source.infolist():
                    # Copy so the rewrite never mutates the reader's bookkeeping
                    members[info.filename] = (copy.copy(info), source.read(info), None)
                comment = source.comment
        # zipfile raises NotImplementedError for unsupported compression
        # methods and RuntimeError for encrypted members
        except (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, RuntimeError) as exc:
            raise ArchiveCorruptError(f"Archive could not be parsed: {exc}") from exc
        return cls(members, comment, compress_level)

    def __len__(self) -> int:
        return len(self._members)

    def write(self, entry: ArchiveEntry) -> None:
        """Add or overwrite one entry. No parent directory records are created."""
        info = zipfile.ZipInfo(filename=entry.logical_path, date_time=ZIP_EPOCH)
        info.create_system = _UNIX_CREATE_SYSTEM
        info.external_attr = (entry.permission_bits & 0xFFFF) << 16
        info.compress_type = zipfile.ZIP_DEFLATED
        self._members[entry.logical_path] = (info, entry.content, self._compress_level)
        self.writes += 1

    def extend(self, entries: Iterable[ArchiveEntry]) -> None:
        for entry in entries:
            self.write(entry)

    def entries(self) -> list[ArchiveEntry]:
        return [
            ArchiveEntry(
                logical_path=info.filename,
                content=data,
                permission_bits=info.external_attr >> 16,
            )
            for info, data, _level in self._members.values()
        ]

    def to_bytes(self) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as out:
            out.comment = self._comment
            for info, data, level in self._members.values():
                out.writestr(info, data, compresslevel=level)
        return buffer.getvalue()


def apply_entries(
    archive_bytes: bytes,
    entries: Iterable[ArchiveEntry],
    compress_level: int = DEFAULT_COMPRESS_LEVEL,
) -> bytes:
    """Return a new archive holding the existing members plus ``entries``.

    Entries are applied in order; when two share a logical path the later
    one wins, content and permission bits both.

    Raises:
        ArchiveCorruptError: If archive_bytes is not a readable zip archive.
    """
    archive = ArchiveBuffer.from_bytes(archive_bytes, compress_level)
    existing = len(archive)
    archive.extend(entries)

    logger.debug(
        "Rebuilt archive: %d existing member(s), %d injected write(s), %d final member(s)",
        existing,
        archive.writes,
        len(archive),
    )
    return archive.to_bytes()


def read_entries(archive_bytes: bytes) -> list[ArchiveEntry]:
    """List an archive's members in central-directory order.

    Raises:
        ArchiveCorruptError: If archive_bytes is not a readable zip archive.
    """
    return ArchiveBuffer.from_bytes(archive_bytes).entries()
