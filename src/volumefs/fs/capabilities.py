"""Capability flags and capability derivation for arbitrary backends."""

from __future__ import annotations

import enum
from typing import Any

from .protocol import (
    SupportsCapabilities,
    SupportsMkdir,
    SupportsOpenDir,
    SupportsOpenWriter,
    SupportsRealPath,
    SupportsRemove,
    SupportsRename,
    SupportsStat,
    SupportsTruncate,
)


class Capability(enum.IntFlag):
    """Operations a volume supports."""

    NONE = 0
    READ = 1
    WRITE = 2
    APPEND = 4
    TRUNCATE = 8
    CREATE = 16
    MKDIR = 32
    REMOVE = 64
    RENAME = 128
    STAT = 256

    READ_ONLY = READ | STAT

    def to_strings(self) -> list[str]:
        """Lowercase tokens for every set flag, in a stable order."""
        return [token for flag, token in _TOKENS if flag in self]

    def to_string(self) -> str:
        return ",".join(self.to_strings())

    def __str__(self) -> str:
        return self.to_string()


_TOKENS: tuple[tuple[Capability, str], ...] = (
    (Capability.READ, "read"),
    (Capability.WRITE, "write"),
    (Capability.APPEND, "append"),
    (Capability.TRUNCATE, "truncate"),
    (Capability.CREATE, "create"),
    (Capability.MKDIR, "mkdir"),
    (Capability.REMOVE, "remove"),
    (Capability.RENAME, "rename"),
    (Capability.STAT, "stat"),
)

# Optional contracts in probe order: operation name, protocol, capability flag.
# Operations mapped to NONE are discovered but add no capability.
OPTIONAL_CONTRACTS: tuple[tuple[str, type, Capability], ...] = (
    ("stat", SupportsStat, Capability.STAT),
    ("open_writer", SupportsOpenWriter, Capability.WRITE),
    ("remove", SupportsRemove, Capability.REMOVE),
    ("rename", SupportsRename, Capability.RENAME),
    ("mkdir", SupportsMkdir, Capability.MKDIR),
    ("open_dir", SupportsOpenDir, Capability.NONE),
    ("truncate", SupportsTruncate, Capability.TRUNCATE),
    ("real_path", SupportsRealPath, Capability.NONE),
)

# Evaluated in order against a backend that does not report its own set.
CAPABILITY_PROBES: tuple[tuple[Capability, type], ...] = tuple(
    (flag, contract) for _name, contract, flag in OPTIONAL_CONTRACTS if flag
)


def derive_capabilities(fs: Any) -> Capability:
    """Return the capability set of *fs*.

    A self-reported set is used verbatim.  Otherwise every backend can be
    traversed, so the result starts from ``READ`` and gains one flag per
    optional contract the backend satisfies.
    """
    if isinstance(fs, SupportsCapabilities):
        return fs.capabilities()

    caps = Capability.READ
    for flag, contract in CAPABILITY_PROBES:
        if isinstance(fs, contract):
            caps |= flag
    return caps
