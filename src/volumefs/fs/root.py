"""Root backends — the whole host namespace behind one uniform interface.

Two strategies share the same contract:

- ``SingleRootBackend``: hosts with one tree rooted at ``/``.  A single
  unnamed volume.
- ``MultiVolumeBackend``: hosts with independent drives (``C:``, ``D:`` ...).
  The synthetic root lists one directory per volume; every other path is
  routed by its volume prefix to that volume's ``LocalDiskBackend``.

``new_root_backend()`` picks the strategy for the running platform.
"""

from __future__ import annotations

import asyncio
import logging
import string
import sys
from typing import TYPE_CHECKING, BinaryIO, Protocol, runtime_checkable

from .exceptions import CrossVolumeError
from .local_disk import LocalDiskBackend
from .protocol import Volume
from .types import FileInfo
from .utils import is_root_name, split_volume

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

logger = logging.getLogger(__name__)


def drives_from_bitmask(mask: int) -> list[str]:
    """Decode a ``GetLogicalDrives`` bitmask into drive names.

    Examples:
        drives_from_bitmask(0b1100) -> ["C:", "D:"]
    """
    return [f"{letter}:" for i, letter in enumerate(string.ascii_uppercase) if (mask >> i) & 1]


def volume_names() -> list[str]:
    """Volumes available on this host.  ``[""]`` on single-root hosts."""
    if sys.platform != "win32":
        return [""]

    import ctypes

    mask = ctypes.windll.kernel32.GetLogicalDrives()  # type: ignore[attr-defined]
    if mask == 0:
        raise ctypes.WinError()  # type: ignore[attr-defined]
    return drives_from_bitmask(mask)


def default_volume_root(volume: str) -> str:
    """Host directory for a volume name, e.g. ``"C:" -> "C:/"``."""
    return volume + "/"


@runtime_checkable
class RootBackend(Volume, Protocol):
    """A ``Volume`` that also enumerates the volumes it spans."""

    async def volumes(self) -> list[str]: ...


class SingleRootBackend(LocalDiskBackend):
    """The host tree under ``/`` as one unnamed volume."""

    def __init__(self, root: str = "/") -> None:
        super().__init__(root)

    async def volumes(self) -> list[str]:
        return [""]


class MultiVolumeBackend:
    """Fans out to one ``LocalDiskBackend`` per volume.

    Paths look like ``C:/Users/me`` (``\\`` separators are accepted).  The
    names ``""``, ``"."`` and ``"/"`` denote the synthetic root listing
    all volumes.
    """

    def __init__(
        self,
        volume_lister: Callable[[], list[str]] = volume_names,
        volume_root: Callable[[str], str] = default_volume_root,
    ) -> None:
        self._volume_lister = volume_lister
        self._volume_root = volume_root
        self._backends: dict[str, LocalDiskBackend] = {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(volumes={sorted(self._backends)})"

    async def volumes(self) -> list[str]:
        return await asyncio.to_thread(self._volume_lister)

    # =========================================================================
    # Routing
    # =========================================================================

    def backend_for(self, volume: str) -> LocalDiskBackend:
        """The backend owning *volume*, created on first use."""
        backend = self._backends.get(volume)
        if backend is None:
            backend = LocalDiskBackend(self._volume_root(volume))
            self._backends[volume] = backend
        return backend

    def resolve(self, path: str) -> tuple[LocalDiskBackend, str]:
        """Resolve *path* to its owning backend and backend-relative path."""
        volume, rest = split_volume(path)
        return self.backend_for(volume), rest

    def real_path(self, path: str) -> str:
        backend, rel = self.resolve(path)
        return backend.real_path(rel)

    # =========================================================================
    # Read Operations
    # =========================================================================

    async def open(self, path: str) -> BinaryIO:
        backend, rel = self.resolve(path)
        return await backend.open(rel)

    async def stat(self, path: str) -> FileInfo:
        if is_root_name(path):
            return FileInfo.directory(path)
        backend, rel = self.resolve(path)
        return await backend.stat(rel)

    async def read_dir(self, path: str) -> list[FileInfo]:
        if is_root_name(path):
            return [FileInfo.directory(v) for v in await self.volumes()]
        backend, rel = self.resolve(path)
        return await backend.read_dir(rel)

    async def open_dir(self, path: str) -> AsyncIterator[FileInfo]:
        if is_root_name(path):
            for volume in await self.volumes():
                yield FileInfo.directory(volume)
            return
        backend, rel = self.resolve(path)
        async for entry in backend.open_dir(rel):
            yield entry

    # =========================================================================
    # Write Operations
    # =========================================================================

    async def open_writer(self, path: str, flags: int) -> BinaryIO:
        backend, rel = self.resolve(path)
        return await backend.open_writer(rel, flags)

    async def truncate(self, path: str, size: int) -> None:
        backend, rel = self.resolve(path)
        await backend.truncate(rel, size)

    async def remove(self, path: str) -> None:
        backend, rel = self.resolve(path)
        await backend.remove(rel)

    async def mkdir(self, path: str, mode: int = 0o777) -> None:
        backend, rel = self.resolve(path)
        await backend.mkdir(rel, mode)

    async def rename(self, path: str, new_path: str) -> None:
        """Rename within one volume.  Cross-volume moves are rejected."""
        volume, rel = split_volume(path)
        new_volume, new_rel = split_volume(new_path)
        if volume != new_volume:
            raise CrossVolumeError(path, new_path)
        await self.backend_for(volume).rename(rel, new_rel)


def new_root_backend(platform: str | None = None) -> RootBackend:
    """Build the root backend for *platform* (default: the running host)."""
    platform = platform or sys.platform
    if platform == "win32":
        logger.debug("Using multi-volume root backend")
        return MultiVolumeBackend()
    logger.debug("Using single-root backend")
    return SingleRootBackend()
