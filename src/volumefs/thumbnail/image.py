"""Image thumbnails: decode with Pillow, resize, encode JPEG."""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from pathlib import Path
from typing import BinaryIO

from PIL import Image, ImageOps

from .config import IMAGE_WIDTH

logger = logging.getLogger(__name__)

JPEG_QUALITY = 85


def scaled_size(width: int, height: int, target_width: int) -> tuple[int, int]:
    """Size for *target_width* keeping the aspect ratio of (width, height)."""
    return target_width, max(1, round(height * target_width / width))


def make_image_thumbnail(src: BinaryIO, out: str, width: int = IMAGE_WIDTH) -> None:
    """Decode *src*, scale it to *width* pixels wide and write a JPEG to *out*.

    Blocking; run it in a worker thread.
    """
    with Image.open(src) as img:
        img = ImageOps.exif_transpose(img)
        # Convert to RGB if necessary
        if img.mode not in ("RGB", "L"):
            img = img.convert("RGB")
        thumb = img.resize(scaled_size(img.width, img.height, width), Image.Resampling.LANCZOS)

    write_jpeg(thumb, out)
    logger.debug("Generated thumbnail: %s (%dx%d)", out, thumb.width, thumb.height)


def write_jpeg(img: Image.Image, out: str) -> None:
    """Save *img* as JPEG. Atomic via tempfile + replace."""
    fd, tmp_path = tempfile.mkstemp(dir=str(Path(out).parent), suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            img.save(f, "JPEG", quality=JPEG_QUALITY)
        Path(tmp_path).replace(out)
    except Exception:
        with contextlib.suppress(OSError):
            Path(tmp_path).unlink()
        raise
