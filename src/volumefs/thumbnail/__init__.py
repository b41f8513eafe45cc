"""Thumbnail pipeline — on-demand, cached image and video thumbnails."""

from volumefs.thumbnail.config import SUPPORTED_KINDS, ThumbnailConfig
from volumefs.thumbnail.exceptions import ThumbnailError
from volumefs.thumbnail.service import ThumbnailService, cache_id_for, make_thumbnail

__all__ = [
    "SUPPORTED_KINDS",
    "ThumbnailConfig",
    "ThumbnailError",
    "ThumbnailService",
    "cache_id_for",
    "make_thumbnail",
]
