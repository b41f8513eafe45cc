"""Volume adapter — a uniform operation surface over partial backends."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, BinaryIO

from .capabilities import OPTIONAL_CONTRACTS, Capability
from .exceptions import UnsupportedOperationError
from .protocol import SupportsCapabilities, Volume

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Collection

    from .protocol import FileSystem
    from .types import FileInfo

# Operations that survive in a read-only view.
READ_ONLY_OPERATIONS = frozenset({"stat", "open_dir", "real_path"})


def wrap_volume(fs: FileSystem) -> Volume:
    """Return *fs* as a ``Volume``.

    Backends that already satisfy the full contract are returned unchanged;
    anything else is wrapped in a ``VolumeAdapter``.
    """
    if isinstance(fs, Volume):
        return fs
    return VolumeAdapter(fs)


def read_only(fs: FileSystem) -> VolumeAdapter:
    """A view of *fs* that exposes only stat, read and directory listing."""
    if isinstance(fs, VolumeAdapter):
        return fs.readonly()
    return VolumeAdapter(fs).readonly()


class VolumeAdapter:
    """Wraps any backend and exposes the full ``Volume`` surface.

    Each optional contract is checked once at construction; the bound
    implementation (or ``None``) is kept per operation.  Calling an
    operation the backend lacks raises ``UnsupportedOperationError``.
    """

    def __init__(self, fs: FileSystem, *, operations: Collection[str] | None = None) -> None:
        self._fs = fs
        self._ops: dict[str, Callable[..., Any] | None] = {}
        for name, contract, _flag in OPTIONAL_CONTRACTS:
            allowed = operations is None or name in operations
            self._ops[name] = getattr(fs, name) if allowed and isinstance(fs, contract) else None
        # Upper bound on a self-reported set when the view is restricted
        self._ceiling: Capability | None = None
        if operations is not None:
            self._ceiling = Capability.READ
            for name, _contract, flag in OPTIONAL_CONTRACTS:
                if name in operations:
                    self._ceiling |= flag
        self._caps: Capability | None = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._fs!r}, caps={self.capabilities()})"

    @property
    def backend(self) -> FileSystem:
        """The wrapped backend."""
        return self._fs

    def supports(self, op: str) -> bool:
        """True when operation *op* was discovered on the backend."""
        return self._ops.get(op) is not None

    def _require(self, op: str, path: str) -> Callable[..., Any]:
        impl = self._ops.get(op)
        if impl is None:
            raise UnsupportedOperationError(op, path)
        return impl

    # ------------------------------------------------------------------
    # Capabilities
    # ------------------------------------------------------------------

    def capabilities(self) -> Capability:
        """Capability set of this view, computed at most once.

        A backend that reports its own set is taken at its word, clipped to
        the operations this view exposes.  Otherwise the set is built from
        the operations discovered at construction.
        """
        if self._caps is not None:
            return self._caps

        if isinstance(self._fs, SupportsCapabilities):
            caps = self._fs.capabilities()
            if self._ceiling is not None:
                caps &= self._ceiling
        else:
            caps = Capability.READ
            for name, _contract, flag in OPTIONAL_CONTRACTS:
                if self._ops.get(name) is not None:
                    caps |= flag
        self._caps = caps
        return caps

    def readonly(self) -> VolumeAdapter:
        """A view that discards every mutating operation."""
        return VolumeAdapter(self._fs, operations=READ_ONLY_OPERATIONS)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def open(self, path: str) -> BinaryIO:
        return await self._fs.open(path)

    async def stat(self, path: str) -> FileInfo:
        return await self._require("stat", path)(path)

    async def read_dir(self, path: str) -> list[FileInfo]:
        """List *path*, preferring the backend's streaming ``open_dir``."""
        open_dir = self._ops.get("open_dir")
        if open_dir is None:
            return await self._fs.read_dir(path)
        entries = [entry async for entry in open_dir(path)]
        entries.sort(key=lambda e: e.name)
        return entries

    def open_dir(self, path: str) -> AsyncIterator[FileInfo]:
        return self._require("open_dir", path)(path)

    def real_path(self, path: str) -> str:
        return self._require("real_path", path)(path)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def open_writer(self, path: str, flags: int) -> BinaryIO:
        return await self._require("open_writer", path)(path, flags)

    async def remove(self, path: str) -> None:
        await self._require("remove", path)(path)

    async def rename(self, path: str, new_path: str) -> None:
        await self._require("rename", path)(path, new_path)

    async def mkdir(self, path: str, mode: int = 0o777) -> None:
        await self._require("mkdir", path)(path, mode)

    async def truncate(self, path: str, size: int) -> None:
        await self._require("truncate", path)(path, size)

