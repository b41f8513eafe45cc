"""Path utilities: relative path validation, volume prefixes, host joins."""

from __future__ import annotations

import os
import re

# Synthetic names for the top of a multi-volume namespace
ROOT_NAMES = frozenset({"", ".", "/"})

_DRIVE_RE = re.compile(r"^([A-Za-z]:)")


def valid_path(name: str) -> bool:
    """Report whether *name* is a well-formed, non-escaping relative path.

    Rules:
    - "." alone names the root itself
    - slash-separated, unrooted, no trailing slash
    - no empty, "." or ".." elements
    - no NUL bytes

    Examples:
        valid_path(".") -> True
        valid_path("a/b.txt") -> True
        valid_path("/etc") -> False
        valid_path("a/../../b") -> False
        valid_path("a//b") -> False
    """
    if name == ".":
        return True
    if not name or "\x00" in name:
        return False
    return all(elem not in ("", ".", "..") for elem in name.split("/"))


def join_host(root: str, name: str) -> str:
    """Join a validated relative path onto a host directory."""
    if name == ".":
        return root
    return os.path.join(root, *name.split("/"))


def split_volume(path: str) -> tuple[str, str]:
    """Split a leading drive-letter volume from *path*.

    The volume is upper-cased; the remainder has backslashes turned into
    slashes, leading slashes stripped, and defaults to ".".

    Examples:
        split_volume("C:/Users/me") -> ("C:", "Users/me")
        split_volume("d:") -> ("D:", ".")
        split_volume("/tmp") -> ("", "tmp")
    """
    volume = ""
    match = _DRIVE_RE.match(path)
    if match:
        volume = match.group(1).upper()
        path = path[len(volume):]
    rest = path.replace("\\", "/").lstrip("/")
    return volume, rest or "."


def is_root_name(path: str) -> bool:
    """True for the synthetic names of a namespace root."""
    return path in ROOT_NAMES
