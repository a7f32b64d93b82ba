"""
Media tool backed by FFprobe/FFmpeg.

Two operations, both on files already staged to local disk:
1. Probe the first stream's width/height (for aspect classification)
2. Remux to fast start: copy streams unchanged and move the moov atom to
   the front so playback can begin before the download finishes

Why shell out instead of a Python container library:
- FFmpeg handles every container a user might upload
- Remuxing with -c copy never touches the codec data
- Available everywhere (including Docker images)

subprocess.run is blocking, so every call is pushed onto a worker thread
with asyncio.to_thread. No timeout is applied here; a request-level
deadline belongs to the server.
"""

import asyncio
import json
import logging
import shutil
import subprocess
from pathlib import Path
from typing import Union

from ...core.media.errors import (
    MalformedOutput,
    NoStreamData,
    ProbeUnavailable,
    RemuxFailed,
)
from ...core.media.models import Geometry
from ...core.media.ports import MediaTool

logger = logging.getLogger(__name__)

REMUX_SUFFIX = ".processing"
STDERR_TAIL_CHARS = 500


def parse_probe_output(stdout: Union[str, bytes]) -> Geometry:
    """
    Parse `ffprobe -print_format json -show_streams` output.

    Accepts raw bytes as captured from the process. Bytes that are not
    valid UTF-8 (common in container metadata tags) are replaced rather
    than rejected, since only the numeric width/height matter here.

    Only the first reported stream is used. For the MP4 uploads we accept
    that's the video track; an audio-first file has no width and is
    rejected as malformed.
    """
    if isinstance(stdout, bytes):
        stdout = stdout.decode("utf-8", errors="replace")

    try:
        info = json.loads(stdout)
    except (ValueError, TypeError) as e:
        raise MalformedOutput(f"FFprobe output is not valid JSON: {e}") from e

    if not isinstance(info, dict):
        raise MalformedOutput("FFprobe output is not a JSON object")

    streams = info.get("streams") or []
    if not isinstance(streams, list):
        raise MalformedOutput("FFprobe 'streams' is not a list")
    if not streams:
        raise NoStreamData("FFprobe reported no streams")

    first = streams[0]
    if not isinstance(first, dict):
        raise MalformedOutput("FFprobe stream entry is not an object")

    width = first.get("width")
    height = first.get("height")

    # bool is an int subclass; reject it explicitly
    for name, value in (("width", width), ("height", height)):
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            raise MalformedOutput(f"FFprobe stream has invalid {name}: {value!r}")

    return Geometry(width=width, height=height)


def stderr_tail(stderr: bytes) -> str:
    """Last STDERR_TAIL_CHARS of a tool's stderr, decoded for logs and messages."""
    return stderr.decode("utf-8", errors="replace")[-STDERR_TAIL_CHARS:]


def remux_output_path(path: Path) -> Path:
    """Output path for the fast-start copy: the input path plus a suffix."""
    return Path(f"{path}{REMUX_SUFFIX}")


class FFmpegMediaTool:
    """
    Media tool using the ffprobe and ffmpeg binaries.

    The binaries are looked up on PATH unless explicit paths are given.
    Unlike construction of most clients, nothing is checked up front:
    a missing binary surfaces as ProbeUnavailable/RemuxFailed on the
    request that needed it, and check_available() reports it to the
    readiness endpoint.
    """

    def __init__(self, ffmpeg_path: str = "ffmpeg", ffprobe_path: str = "ffprobe"):
        self._ffmpeg = ffmpeg_path
        self._ffprobe = ffprobe_path

    def check_available(self) -> list[str]:
        """Return the binaries that are missing or not working."""
        missing = []
        for binary in (self._ffprobe, self._ffmpeg):
            try:
                result = subprocess.run(
                    [binary, "-version"],
                    capture_output=True,
                    timeout=5,
                )
                if result.returncode != 0:
                    missing.append(binary)
            except (OSError, subprocess.TimeoutExpired):
                missing.append(binary)
        return missing

    async def probe(self, path: Path) -> Geometry:
        """Run ffprobe on path and return the first stream's geometry."""
        cmd = [
            self._ffprobe,
            "-v", "error",
            "-print_format", "json",
            "-show_streams",
            str(path),
        ]

        # bytes, not text: metadata tags are not guaranteed to be UTF-8
        try:
            result = await asyncio.to_thread(
                subprocess.run,
                cmd,
                capture_output=True,
            )
        except OSError as e:
            logger.error("Could not run ffprobe", extra={"error": str(e)})
            raise ProbeUnavailable(f"FFprobe could not be run: {e}") from e

        if result.returncode != 0:
            stderr = stderr_tail(result.stderr)
            logger.error(
                "FFprobe failed",
                extra={"returncode": result.returncode, "stderr": stderr}
            )
            raise ProbeUnavailable(
                f"FFprobe exited with status {result.returncode}: {stderr.strip()}"
            )

        geometry = parse_probe_output(result.stdout)

        logger.debug(
            "Probed video",
            extra={"path": str(path), "width": geometry.width, "height": geometry.height}
        )

        return geometry

    async def remux_fast_start(self, path: Path) -> Path:
        """
        Copy path into an MP4 with its index moved to the front.

        -c copy keeps every stream as-is, -movflags faststart relocates the
        moov atom. The output is a new file; the input is left for the
        caller to release. If this method raises, no output file is left
        behind.
        """
        output_path = remux_output_path(path)

        cmd = [
            self._ffmpeg,
            "-y",  # overwrite
            "-i", str(path),
            "-c", "copy",
            "-movflags", "faststart",
            "-f", "mp4",
            str(output_path),
        ]

        try:
            result = await asyncio.to_thread(
                subprocess.run,
                cmd,
                capture_output=True,
            )
        except OSError as e:
            output_path.unlink(missing_ok=True)
            logger.error("Could not run ffmpeg", extra={"error": str(e)})
            raise RemuxFailed(f"FFmpeg could not be run: {e}") from e
        except BaseException:
            output_path.unlink(missing_ok=True)
            raise

        if result.returncode != 0:
            output_path.unlink(missing_ok=True)
            stderr = stderr_tail(result.stderr)
            logger.error(
                "FFmpeg fast-start remux failed",
                extra={"returncode": result.returncode, "stderr": stderr}
            )
            raise RemuxFailed(
                f"FFmpeg exited with status {result.returncode}: {stderr.strip()}"
            )

        logger.info("Remuxed video for fast start", extra={"output": str(output_path)})

        return output_path


class MockMediaTool:
    """
    Media tool for local development without FFmpeg.

    Reports a fixed geometry and "remuxes" by copying the file, so the
    rest of the pipeline (keys, upload, presign) runs unchanged.
    """

    def __init__(self, width: int = 1920, height: int = 1080):
        self._geometry = Geometry(width=width, height=height)
        logger.info("Initialized mock media tool")

    def check_available(self) -> list[str]:
        return []

    async def probe(self, path: Path) -> Geometry:
        return self._geometry

    async def remux_fast_start(self, path: Path) -> Path:
        output_path = remux_output_path(path)
        await asyncio.to_thread(shutil.copyfile, path, output_path)
        return output_path


def create_media_tool(
    mock_mode: bool = False,
    ffmpeg_path: str = "ffmpeg",
    ffprobe_path: str = "ffprobe",
) -> MediaTool:
    """
    Factory function for the media tool.

    Args:
        mock_mode: If True, return mock tool (no FFmpeg required)
        ffmpeg_path: ffmpeg binary for the real tool
        ffprobe_path: ffprobe binary for the real tool
    """
    if mock_mode:
        return MockMediaTool()

    return FFmpegMediaTool(ffmpeg_path=ffmpeg_path, ffprobe_path=ffprobe_path)
