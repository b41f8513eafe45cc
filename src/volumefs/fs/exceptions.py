"""Exception hierarchy for the volumefs filesystem layer."""

from __future__ import annotations


class VolumeError(Exception):
    """Base exception for all volumefs filesystem errors."""


class UnsupportedOperationError(VolumeError):
    """Raised when a backend does not provide the requested operation.

    This is an expected outcome for read-only or partial backends, not a
    programming error.  Never retried.
    """

    def __init__(self, op: str, path: str | None = None) -> None:
        self.op = op
        self.path = path
        if path is None:
            super().__init__(f"unsupported operation: {op}")
        else:
            super().__init__(f"unsupported operation: {op} {path}")


class InvalidPathError(VolumeError, ValueError):
    """Raised when a path is malformed or escapes its backend root."""

    def __init__(self, op: str, path: str, reason: str = "invalid argument") -> None:
        self.op = op
        self.path = path
        self.reason = reason
        super().__init__(f"{op} {path}: {reason}")


class CrossVolumeError(InvalidPathError):
    """Raised when a rename would move an entry between two volumes."""

    def __init__(self, path: str, new_path: str) -> None:
        self.new_path = new_path
        super().__init__("rename", path, f"cannot move across volumes to {new_path}")
