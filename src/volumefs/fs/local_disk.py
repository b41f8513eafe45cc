"""LocalDiskBackend — a writable backend rooted at a host directory."""

from __future__ import annotations

import asyncio
import os
from typing import TYPE_CHECKING, BinaryIO

from .exceptions import InvalidPathError
from .types import FileInfo
from .utils import join_host, valid_path

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path

# Entries pulled from os.scandir per worker-thread round trip
SCAN_BATCH_SIZE = 256


def _file_mode(flags: int) -> str:
    """Map ``os.O_*`` access flags to a binary file-object mode."""
    if flags & os.O_RDWR:
        return "r+b"
    if flags & os.O_APPEND:
        return "ab"
    return "wb"


class LocalDiskBackend:
    """Direct host filesystem access under a single root directory.

    Satisfies every optional contract in ``protocol``.  Each operation
    validates its relative path first and raises ``InvalidPathError``
    before touching the host; everything else surfaces the host
    ``OSError`` unchanged.  Holds no locks.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = os.path.abspath(root)

        if not os.path.exists(self.root):
            raise FileNotFoundError(f"Root directory does not exist: {self.root}")
        if not os.path.isdir(self.root):
            raise NotADirectoryError(f"Root path is not a directory: {self.root}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.root!r})"

    # =========================================================================
    # Path Resolution
    # =========================================================================

    def _resolve(self, op: str, path: str) -> str:
        if not valid_path(path):
            raise InvalidPathError(op, path)
        return join_host(self.root, path)

    def real_path(self, path: str) -> str:
        """Host path for *path*, for tools that need a real file name."""
        return self._resolve("realpath", path)

    # =========================================================================
    # Read Operations
    # =========================================================================

    async def open(self, path: str) -> BinaryIO:
        host = self._resolve("open", path)
        return await asyncio.to_thread(open, host, "rb")

    async def stat(self, path: str) -> FileInfo:
        host = self._resolve("stat", path)
        st = await asyncio.to_thread(os.stat, host)
        name = os.path.basename(host.rstrip("/\\")) or path
        return FileInfo.from_stat(name, st)

    async def read_dir(self, path: str) -> list[FileInfo]:
        host = self._resolve("readdir", path)

        def _scan() -> list[FileInfo]:
            with os.scandir(host) as it:
                return [info for entry in it if (info := _entry_info(entry)) is not None]

        entries = await asyncio.to_thread(_scan)
        entries.sort(key=lambda e: e.name)
        return entries

    async def open_dir(self, path: str) -> AsyncIterator[FileInfo]:
        """Stream the entries of *path* in host order."""
        host = self._resolve("opendir", path)
        it = await asyncio.to_thread(os.scandir, host)
        try:
            while True:
                batch = await asyncio.to_thread(_next_batch, it, SCAN_BATCH_SIZE)
                if not batch:
                    return
                for info in batch:
                    yield info
        finally:
            it.close()

    # =========================================================================
    # Write Operations
    # =========================================================================

    async def open_writer(self, path: str, flags: int) -> BinaryIO:
        """Open *path* with caller-specified ``os.O_*`` flags."""
        host = self._resolve("open", path)

        def _open() -> BinaryIO:
            fd = os.open(host, flags | getattr(os, "O_BINARY", 0), 0o777)
            try:
                return os.fdopen(fd, _file_mode(flags))
            except BaseException:
                os.close(fd)
                raise

        return await asyncio.to_thread(_open)

    async def truncate(self, path: str, size: int) -> None:
        host = self._resolve("truncate", path)
        await asyncio.to_thread(os.truncate, host, size)

    async def remove(self, path: str) -> None:
        """Remove a file or an empty directory."""
        host = self._resolve("remove", path)

        def _remove() -> None:
            if os.path.isdir(host) and not os.path.islink(host):
                os.rmdir(host)
            else:
                os.remove(host)

        await asyncio.to_thread(_remove)

    async def mkdir(self, path: str, mode: int = 0o777) -> None:
        host = self._resolve("mkdir", path)
        await asyncio.to_thread(os.mkdir, host, mode)

    async def rename(self, path: str, new_path: str) -> None:
        if not valid_path(new_path):
            raise InvalidPathError("rename", new_path)
        src = self._resolve("rename", path)
        dst = join_host(self.root, new_path)
        await asyncio.to_thread(os.replace, src, dst)


def _entry_info(entry: os.DirEntry[str]) -> FileInfo | None:
    try:
        return FileInfo.from_stat(entry.name, entry.stat())
    except OSError:
        # Vanished or unreadable entries still list, without metadata
        try:
            is_dir = entry.is_dir()
        except OSError:
            return None
        return FileInfo(name=entry.name, is_directory=is_dir)


def _next_batch(it: os.ScandirIterator[str], size: int) -> list[FileInfo]:
    batch: list[FileInfo] = []
    for entry in it:
        info = _entry_info(entry)
        if info is not None:
            batch.append(info)
        if len(batch) >= size:
            break
    return batch
