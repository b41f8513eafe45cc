"""ThumbnailService — cache-checked, dispatcher-driven thumbnail generation."""

from __future__ import annotations

import asyncio
import hashlib
import logging
import os
from typing import TYPE_CHECKING

from volumefs.fs.exceptions import VolumeError
from volumefs.fs.protocol import SupportsRealPath
from volumefs.tasks.dispatcher import Dispatcher

from .config import (
    JOB_TIMEOUT,
    PIPELINE_QUEUE_SIZE,
    PIPELINE_WORKERS,
    REQUEST_TIMEOUT,
    SUPPORTED_KINDS,
    ThumbnailConfig,
    cache_file_exists,
)
from .exceptions import ThumbnailError
from .image import make_image_thumbnail
from .video import make_video_thumbnail

if TYPE_CHECKING:
    from volumefs.fs.protocol import FileSystem
    from volumefs.tasks.dispatcher import TaskState

logger = logging.getLogger(__name__)


def cache_id_for(path: str) -> str:
    """Deterministic cache id for a source path (not a content hash)."""
    return hashlib.md5(path.encode("utf-8"), usedforsecurity=False).hexdigest()


async def make_thumbnail(
    volume: FileSystem | None,
    kind: str,
    path: str,
    cache_path: str,
    config: ThumbnailConfig,
) -> None:
    """Render *path* into *cache_path*.  Raises on any failure.

    Without a volume only video sources work; *path* is then handed to
    ffmpeg as-is (a host path or an http(s) URL).
    """
    if volume is None:
        if kind == "video":
            await make_video_thumbnail(path, cache_path, config.ffmpeg_path)
            return
        raise ThumbnailError(f"No volume to read {kind} source {path}")

    logger.debug("Generating thumbnail for %s", path)
    if kind == "video":
        if not isinstance(volume, SupportsRealPath):
            raise ThumbnailError(f"Volume has no host paths for video source {path}")
        try:
            src = volume.real_path(path)
        except VolumeError as e:
            raise ThumbnailError(str(e)) from e
        await make_video_thumbnail(src, cache_path, config.ffmpeg_path)
        return

    f = await volume.open(path)

    def _render() -> None:
        with f:
            make_image_thumbnail(f, cache_path)

    await asyncio.to_thread(_render)


class ThumbnailService:
    """Generates and caches thumbnails through a bounded dispatcher.

    Requests for the same cache file share one job.  The service owns its
    dispatcher unless one is passed in.

    Usage::

        async with ThumbnailService(ThumbnailConfig(cache_dir="cache")) as thumbs:
            path = await thumbs.thumbnail(volume, "image", "photos/cat.png")
    """

    def __init__(
        self,
        config: ThumbnailConfig | None = None,
        dispatcher: Dispatcher | None = None,
    ) -> None:
        self.config = config or ThumbnailConfig()
        self._owns_dispatcher = dispatcher is None
        self._dispatcher = dispatcher or Dispatcher(PIPELINE_WORKERS, PIPELINE_QUEUE_SIZE)
        self._waiters: set[asyncio.Task[None]] = set()

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        if self._owns_dispatcher:
            await self._dispatcher.start()

    async def close(self) -> None:
        if self._owns_dispatcher:
            await self._dispatcher.shutdown()
        if self._waiters:
            await asyncio.gather(*self._waiters, return_exceptions=True)

    async def __aenter__(self) -> ThumbnailService:
        await self.start()
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def request(
        self,
        volume: FileSystem | None,
        kind: str,
        path: str,
        cache_id: str = "",
    ) -> asyncio.Future[str | None]:
        """Ask for the thumbnail of *path*.

        The returned future resolves exactly once, to the cache file path or
        to ``None`` when there is no thumbnail (unsupported kind, failed
        generation, or a full queue: retry later).  Must be called from a
        running event loop.
        The cache lookup is synchronous so that hits resolve immediately;
        the check after a job runs in a worker thread.
        """
        result: asyncio.Future[str | None] = asyncio.get_running_loop().create_future()

        cache_id = cache_id or cache_id_for(path)
        try:
            os.makedirs(self.config.cache_dir, exist_ok=True)
        except OSError as e:
            logger.warning("Cannot create thumbnail cache %s: %s", self.config.cache_dir, e)

        cache_path = self.config.cache_path(cache_id)
        if cache_file_exists(cache_path):
            result.set_result(cache_path)
            return result

        if kind not in SUPPORTED_KINDS:
            result.set_result(None)
            return result

        ts = self._dispatcher.try_add_with_id(
            lambda: self._generate(volume, kind, path, cache_path), cache_path
        )
        if ts is None:
            logger.info("Thumbnail queue busy: %s", cache_path)
            result.set_result(None)
            return result

        waiter = asyncio.create_task(self._deliver(ts, cache_path, result))
        self._waiters.add(waiter)
        waiter.add_done_callback(self._waiters.discard)
        return result

    async def thumbnail(
        self,
        volume: FileSystem | None,
        kind: str,
        path: str,
        cache_id: str = "",
        timeout: float = REQUEST_TIMEOUT,
    ) -> str | None:
        """``request()`` plus an outer wait limit; ``None`` on timeout."""
        try:
            return await asyncio.wait_for(self.request(volume, kind, path, cache_id), timeout)
        except TimeoutError:
            logger.info("Timed out waiting %.0fs for thumbnail of %s", timeout, path)
            return None

    async def _deliver(
        self, ts: TaskState, cache_path: str, result: asyncio.Future[str | None]
    ) -> None:
        found: str | None = None
        try:
            await ts.wait()
            if await asyncio.to_thread(cache_file_exists, cache_path):
                found = cache_path
        finally:
            if not result.done():
                result.set_result(found)

    async def _generate(
        self, volume: FileSystem | None, kind: str, path: str, cache_path: str
    ) -> None:
        try:
            async with asyncio.timeout(JOB_TIMEOUT):
                await make_thumbnail(volume, kind, path, cache_path, self.config)
        except TimeoutError:
            logger.warning("Thumbnail generation timed out after %.0fs: %s", JOB_TIMEOUT, path)
        except ThumbnailError as e:
            logger.warning("Failed to generate thumbnail for %s: %s", path, e)
        except Exception:
            logger.warning("Failed to generate thumbnail for %s", path, exc_info=True)
