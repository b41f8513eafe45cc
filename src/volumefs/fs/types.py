"""FileInfo — stat and directory entry metadata."""

from __future__ import annotations

import stat as stat_module
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import os


@dataclass
class FileInfo:
    """File/directory metadata returned by ``stat`` and directory listings."""

    name: str
    is_directory: bool
    size_bytes: int | None = None
    mode: int = 0
    updated_at: datetime | None = None

    @classmethod
    def from_stat(cls, name: str, st: os.stat_result) -> FileInfo:
        is_dir = stat_module.S_ISDIR(st.st_mode)
        return cls(
            name=name,
            is_directory=is_dir,
            size_bytes=st.st_size if not is_dir else None,
            mode=st.st_mode,
            updated_at=datetime.fromtimestamp(st.st_mtime, tz=UTC),
        )

    @classmethod
    def directory(cls, name: str) -> FileInfo:
        """A synthetic directory entry with no size and no modification time."""
        return cls(name=name, is_directory=True, mode=stat_module.S_IFDIR)

    @property
    def writable(self) -> bool:
        """True when the owner-write permission bit is set."""
        return bool(self.mode & stat_module.S_IWUSR)
