"""Shared fixtures for volumefs tests."""

from __future__ import annotations

import ast
import io
import stat
import sys
import textwrap
from typing import TYPE_CHECKING

import pytest
from PIL import Image

from volumefs.fs.local_disk import LocalDiskBackend

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


def _image_bytes(size: tuple[int, int] = (640, 480), fmt: str = "PNG") -> bytes:
    """Encode a solid-color test image."""
    buf = io.BytesIO()
    mode = "RGBA" if fmt == "PNG" else "RGB"
    Image.new(mode, size, (200, 40, 40)).save(buf, fmt)
    return buf.getvalue()


@pytest.fixture
def root_dir(tmp_path: Path) -> Path:
    """A backend root with a sibling file outside it."""
    root = tmp_path / "root"
    root.mkdir()
    (tmp_path / "outside.txt").write_text("do not touch")
    return root


@pytest.fixture
def disk(root_dir: Path) -> LocalDiskBackend:
    """LocalDiskBackend rooted at a temporary directory."""
    return LocalDiskBackend(root_dir)


@pytest.fixture
def sample_jpeg(tmp_path: Path) -> Path:
    """A small JPEG standing in for an extracted video frame."""
    path = tmp_path / "frame.jpeg"
    path.write_bytes(_image_bytes((200, 112), "JPEG"))
    return path


@pytest.fixture
def fake_ffmpeg(tmp_path: Path, sample_jpeg: Path) -> Callable[..., tuple[Path, Path]]:
    """Factory for an executable that records its arguments and behaves like ffmpeg.

    Modes:
        ok      copy a JPEG to the last argument
        noseek  like ok, but write nothing when "-ss" is given
        fail    exit with status 1
    """
    if sys.platform == "win32":
        pytest.skip("fake ffmpeg needs a POSIX shell")

    def _make(mode: str = "ok", delay: float = 0.0) -> tuple[Path, Path]:
        log = tmp_path / f"ffmpeg-{mode}.log"
        script = tmp_path / f"ffmpeg_{mode}.py"
        script.write_text(
            textwrap.dedent(
                f"""
                import shutil
                import sys
                import time

                args = sys.argv[1:]
                with open({str(log)!r}, "a") as f:
                    f.write(repr(args) + "\\n")
                time.sleep({delay!r})
                if {mode!r} == "fail":
                    sys.exit(1)
                if {mode!r} == "noseek" and "-ss" in args:
                    sys.exit(0)
                shutil.copyfile({str(sample_jpeg)!r}, args[-1])
                """
            )
        )
        exe = tmp_path / f"ffmpeg-{mode}"
        exe.write_text(f'#!/bin/sh\nexec "{sys.executable}" "{script}" "$@"\n')
        exe.chmod(exe.stat().st_mode | stat.S_IXUSR)
        return exe, log

    return _make


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    """Encoder for solid-color test images: ``make_image(size, fmt)``."""
    return _image_bytes


def read_invocations(log: Path) -> list[list[str]]:
    """Argument lists recorded by a fake ffmpeg."""
    if not log.exists():
        return []
    return [ast.literal_eval(line) for line in log.read_text().splitlines() if line]


@pytest.fixture
def invocations() -> Callable[[Path], list[list[str]]]:
    return read_invocations
