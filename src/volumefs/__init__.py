"""volumefs: capability-aware volumes and an on-demand thumbnail cache.

One uniform, async interface over local directories and multi-drive
roots, plus a bounded, deduplicating dispatcher that drives thumbnail
generation.
"""

__version__ = "0.1.0"

from volumefs.fs import (
    Capability,
    CrossVolumeError,
    FileInfo,
    FileSystem,
    InvalidPathError,
    LocalDiskBackend,
    MultiVolumeBackend,
    RootBackend,
    SingleRootBackend,
    UnsupportedOperationError,
    Volume,
    VolumeAdapter,
    VolumeError,
    derive_capabilities,
    new_root_backend,
    path_capabilities,
    read_only,
    wrap_volume,
)
from volumefs.tasks import Dispatcher, TaskState
from volumefs.thumbnail import ThumbnailConfig, ThumbnailError, ThumbnailService, cache_id_for

__all__ = [
    "Capability",
    "CrossVolumeError",
    "Dispatcher",
    "FileInfo",
    "FileSystem",
    "InvalidPathError",
    "LocalDiskBackend",
    "MultiVolumeBackend",
    "RootBackend",
    "SingleRootBackend",
    "TaskState",
    "ThumbnailConfig",
    "ThumbnailError",
    "ThumbnailService",
    "UnsupportedOperationError",
    "Volume",
    "VolumeAdapter",
    "VolumeError",
    "__version__",
    "cache_id_for",
    "derive_capabilities",
    "new_root_backend",
    "path_capabilities",
    "read_only",
    "wrap_volume",
]
