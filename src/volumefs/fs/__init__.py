"""Filesystem layer — capabilities, contracts, volumes, host backends."""

from volumefs.fs.capabilities import CAPABILITY_PROBES, Capability, derive_capabilities
from volumefs.fs.exceptions import (
    CrossVolumeError,
    InvalidPathError,
    UnsupportedOperationError,
    VolumeError,
)
from volumefs.fs.local_disk import LocalDiskBackend
from volumefs.fs.permissions import path_capabilities
from volumefs.fs.protocol import (
    FileSystem,
    SupportsCapabilities,
    SupportsMkdir,
    SupportsOpenDir,
    SupportsOpenWriter,
    SupportsRealPath,
    SupportsRemove,
    SupportsRename,
    SupportsStat,
    SupportsTruncate,
    Volume,
)
from volumefs.fs.root import (
    MultiVolumeBackend,
    RootBackend,
    SingleRootBackend,
    drives_from_bitmask,
    new_root_backend,
    volume_names,
)
from volumefs.fs.types import FileInfo
from volumefs.fs.utils import split_volume, valid_path
from volumefs.fs.volume import VolumeAdapter, read_only, wrap_volume

__all__ = [
    "CAPABILITY_PROBES",
    "Capability",
    "CrossVolumeError",
    "FileInfo",
    "FileSystem",
    "InvalidPathError",
    "LocalDiskBackend",
    "MultiVolumeBackend",
    "RootBackend",
    "SingleRootBackend",
    "SupportsCapabilities",
    "SupportsMkdir",
    "SupportsOpenDir",
    "SupportsOpenWriter",
    "SupportsRealPath",
    "SupportsRemove",
    "SupportsRename",
    "SupportsStat",
    "SupportsTruncate",
    "UnsupportedOperationError",
    "Volume",
    "VolumeAdapter",
    "VolumeError",
    "derive_capabilities",
    "drives_from_bitmask",
    "new_root_backend",
    "path_capabilities",
    "read_only",
    "split_volume",
    "valid_path",
    "volume_names",
    "wrap_volume",
]
