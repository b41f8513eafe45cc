"""Tests for per-path capability masking."""

from __future__ import annotations

import sys

import pytest

from volumefs.fs.capabilities import Capability, derive_capabilities
from volumefs.fs.permissions import path_capabilities
from volumefs.fs.volume import read_only


class OpenOnly:
    async def open(self, path):
        raise FileNotFoundError(path)

    async def read_dir(self, path):
        return []


class TestPathCapabilities:
    async def test_writable_file_keeps_volume_caps(self, disk, root_dir):
        (root_dir / "f.txt").write_text("x")
        caps = await path_capabilities(disk, "f.txt")
        assert caps == derive_capabilities(disk)

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permission bits")
    async def test_read_only_file(self, disk, root_dir):
        d = root_dir / "locked"
        d.mkdir()
        d.chmod(0o555)
        try:
            caps = await path_capabilities(disk, "locked")
        finally:
            d.chmod(0o755)
        assert caps == Capability.READ_ONLY

    async def test_missing_path_is_read_only(self, disk):
        assert await path_capabilities(disk, "missing") == Capability.READ_ONLY

    async def test_invalid_path_is_read_only(self, disk):
        assert await path_capabilities(disk, "../outside.txt") == Capability.READ_ONLY

    async def test_explicit_caps_are_masked(self, disk, root_dir):
        (root_dir / "f.txt").write_text("x")
        given = Capability.READ | Capability.WRITE
        assert await path_capabilities(disk, "f.txt", given) == given
        assert await path_capabilities(disk, "missing", given) == Capability.READ

    async def test_backend_without_stat(self):
        assert await path_capabilities(OpenOnly(), "x") == Capability.READ

    async def test_read_only_view_never_gains(self, disk, root_dir):
        (root_dir / "f.txt").write_text("x")
        caps = await path_capabilities(read_only(disk), "f.txt")
        assert caps == Capability.READ_ONLY
