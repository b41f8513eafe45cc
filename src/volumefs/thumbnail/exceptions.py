"""Thumbnail generation errors."""

from __future__ import annotations


class ThumbnailError(Exception):
    """Raised when a thumbnail cannot be produced.

    Always handled inside the pipeline: it is logged and the request
    resolves to no result.
    """
