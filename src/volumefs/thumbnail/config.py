"""ThumbnailConfig and pipeline constants."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

# Source kinds the pipeline can render
SUPPORTED_KINDS = frozenset({"image", "video", "archive"})

JOB_TIMEOUT = 10.0
"""Seconds a single generation job may run."""

REQUEST_TIMEOUT = 15.0
"""Default seconds a consumer waits for a requested thumbnail."""

PIPELINE_WORKERS = 8
PIPELINE_QUEUE_SIZE = 16

IMAGE_WIDTH = 160
VIDEO_WIDTH = 200
VIDEO_SEEK_SECONDS = 3

CACHE_SUFFIX = ".jpeg"
DEFAULT_CACHE_DIR = ".file_manager_cache"


@dataclass(frozen=True)
class ThumbnailConfig:
    """Where thumbnails are cached and how videos are decoded."""

    cache_dir: Path | str = DEFAULT_CACHE_DIR
    """Directory holding ``<cache_id>.jpeg`` files.  Created on demand."""

    ffmpeg_path: str | None = None
    """Executable used for video frames.  Video thumbnails fail without it."""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ThumbnailConfig:
        """Build from a settings mapping (``cacheDir``/``ffmpegPath`` or snake_case)."""
        cache_dir = data.get("cache_dir", data.get("cacheDir", DEFAULT_CACHE_DIR))
        ffmpeg_path = data.get("ffmpeg_path", data.get("ffmpegPath")) or None
        return cls(cache_dir=cache_dir, ffmpeg_path=ffmpeg_path)

    def cache_path(self, cache_id: str) -> str:
        return str(Path(self.cache_dir) / (cache_id + CACHE_SUFFIX))


def cache_file_exists(path: str) -> bool:
    """True when *path* holds a non-empty file.  Zero-byte outputs count as absent."""
    try:
        return os.path.getsize(path) > 0
    except OSError:
        return False
