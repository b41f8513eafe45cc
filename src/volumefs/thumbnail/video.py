"""Video thumbnails: extract a single frame with an external ffmpeg."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import socket
from urllib.parse import urlsplit, urlunsplit

from .config import VIDEO_SEEK_SECONDS, VIDEO_WIDTH, cache_file_exists
from .exceptions import ThumbnailError

logger = logging.getLogger(__name__)

REMOTE_SCHEMES = ("http://", "https://")


def frame_args(src: str, out: str, *, seek: bool = True) -> list[str]:
    """ffmpeg arguments writing one ``VIDEO_WIDTH`` wide MJPEG frame of *src* to *out*."""
    args = ["-y"]
    if seek:
        args += ["-ss", str(VIDEO_SEEK_SECONDS)]
    args += [
        "-i", src,
        "-vframes", "1",
        "-vcodec", "mjpeg",
        "-an",
        "-vf", f"scale={VIDEO_WIDTH}:-1",
        out,
    ]
    return args


async def lookup_host(host: str) -> str:
    """First address *host* resolves to."""
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(host, None, type=socket.SOCK_STREAM)
    if not infos:
        raise OSError(f"No address for {host}")
    return infos[0][4][0]


async def pin_remote_host(src: str) -> tuple[str, str | None]:
    """Rewrite an http(s) URL to a literal address.

    Returns ``(url, host_header_value)``; the header value is ``None`` when
    *src* is not remote or cannot be resolved, in which case *src* is
    returned unchanged.  ffmpeg then never has to resolve the name itself.
    """
    if not src.startswith(REMOTE_SCHEMES):
        return src, None

    parts = urlsplit(src)
    if not parts.hostname:
        return src, None

    logger.debug("Resolving hostname %s", parts.hostname)
    try:
        addr = await lookup_host(parts.hostname)
    except OSError as e:
        logger.warning("Cannot resolve %s, passing URL through: %s", parts.hostname, e)
        return src, None

    userinfo, _, host_port = parts.netloc.rpartition("@")
    if ":" in addr:
        addr = f"[{addr}]"
    netloc = addr if parts.port is None else f"{addr}:{parts.port}"
    if userinfo:
        netloc = f"{userinfo}@{netloc}"
    return urlunsplit(parts._replace(netloc=netloc)), host_port


async def run_ffmpeg(ffmpeg: str, args: list[str]) -> int:
    """Run ffmpeg to completion and return its exit status.

    Cancellation (e.g. the job deadline) kills the process.
    """
    try:
        process = await asyncio.create_subprocess_exec(
            ffmpeg,
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise ThumbnailError(f"Cannot start {ffmpeg}: {e}") from e

    try:
        _, stderr = await process.communicate()
    except asyncio.CancelledError:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        await process.wait()
        raise

    if process.returncode != 0:
        tail = stderr.decode(errors="replace").strip().splitlines()[-3:]
        logger.debug("ffmpeg exited with %d: %s", process.returncode, " | ".join(tail))
    return process.returncode or 0


async def make_video_thumbnail(src: str, out: str, ffmpeg_path: str | None) -> None:
    """Extract a frame of *src* (host path or http(s) URL) into *out*.

    When ffmpeg succeeds without producing *out*, the extraction is retried
    once without seeking and without the pinned host.
    """
    if not ffmpeg_path:
        raise ThumbnailError("ffmpeg path is not configured")

    url, host = await pin_remote_host(src)
    args = frame_args(url, out)
    if host is not None:
        args = ["-headers", f"Host: {host}\r\n", *args]

    status = await run_ffmpeg(ffmpeg_path, args)
    if status == 0 and not cache_file_exists(out):
        logger.info("Retrying frame extraction without seek: %s", src)
        status = await run_ffmpeg(ffmpeg_path, frame_args(src, out, seek=False))

    if status != 0:
        raise ThumbnailError(f"ffmpeg exited with status {status} for {src}")
