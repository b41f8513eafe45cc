"""Per-path effective capabilities."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .capabilities import Capability, derive_capabilities
from .exceptions import VolumeError

if TYPE_CHECKING:
    from .protocol import FileSystem

logger = logging.getLogger(__name__)


async def path_capabilities(
    volume: FileSystem,
    path: str,
    caps: Capability | None = None,
) -> Capability:
    """Capabilities that apply to *path* on *volume*.

    Starts from the volume-wide set (*caps*, or derived from *volume*) and
    masks it down to ``Capability.READ_ONLY`` when *path* cannot be stat'ed
    or lacks the owner-write permission bit.
    """
    if caps is None:
        caps = derive_capabilities(volume)

    stat = getattr(volume, "stat", None)
    if stat is None:
        return caps & Capability.READ_ONLY

    try:
        info = await stat(path)
    except (OSError, VolumeError) as e:
        logger.debug("Cannot stat %s, treating as read-only: %s", path, e)
        return caps & Capability.READ_ONLY

    if not info.writable:
        logger.debug("Read-only path %s (mode %o)", path, info.mode)
        return caps & Capability.READ_ONLY
    return caps
