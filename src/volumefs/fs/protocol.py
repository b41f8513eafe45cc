"""Operation contracts — runtime-checkable interfaces.

Split into a base traversal contract and opt-in per-operation contracts so
that a backend can implement only what its storage supports.  A backend
satisfying none of the optional contracts is still browsable read-only.

Probing is done with ``isinstance`` against these protocols; see
``capabilities.CAPABILITY_PROBES`` and ``volume.VolumeAdapter``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, BinaryIO, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from .capabilities import Capability
    from .types import FileInfo


@runtime_checkable
class FileSystem(Protocol):
    """Core interface every backend must implement: read and traverse."""

    async def open(self, path: str) -> BinaryIO:
        """Open *path* for binary reading."""
        ...

    async def read_dir(self, path: str) -> list[FileInfo]:
        """List the entries of directory *path*, sorted by name."""
        ...


@runtime_checkable
class SupportsStat(Protocol):
    """Opt-in: metadata lookup."""

    async def stat(self, path: str) -> FileInfo: ...


@runtime_checkable
class SupportsOpenWriter(Protocol):
    """Opt-in: open a file for writing with ``os.O_*`` flags."""

    async def open_writer(self, path: str, flags: int) -> BinaryIO: ...


@runtime_checkable
class SupportsRemove(Protocol):
    """Opt-in: remove a file or an empty directory."""

    async def remove(self, path: str) -> None: ...


@runtime_checkable
class SupportsRename(Protocol):
    """Opt-in: rename a file or directory."""

    async def rename(self, path: str, new_path: str) -> None: ...


@runtime_checkable
class SupportsMkdir(Protocol):
    """Opt-in: create a directory."""

    async def mkdir(self, path: str, mode: int = 0o777) -> None: ...


@runtime_checkable
class SupportsOpenDir(Protocol):
    """Opt-in: stream directory entries instead of listing them at once.

    Preferred over ``FileSystem.read_dir`` when present.
    """

    def open_dir(self, path: str) -> AsyncIterator[FileInfo]: ...


@runtime_checkable
class SupportsTruncate(Protocol):
    """Opt-in: truncate a file to a given size."""

    async def truncate(self, path: str, size: int) -> None: ...


@runtime_checkable
class SupportsRealPath(Protocol):
    """Opt-in: map a relative path to a host path external tools can read."""

    def real_path(self, path: str) -> str: ...


@runtime_checkable
class SupportsCapabilities(Protocol):
    """Opt-in: the backend reports its own capability set."""

    def capabilities(self) -> Capability: ...


@runtime_checkable
class Volume(
    FileSystem,
    SupportsStat,
    SupportsOpenWriter,
    SupportsRemove,
    SupportsRename,
    SupportsMkdir,
    SupportsTruncate,
    Protocol,
):
    """The uniform operation surface handed to higher layers."""
