"""
Scratch-file staging for uploads.

FFprobe and FFmpeg want file paths, and boto3 wants something seekable,
so an upload is first copied to a local scratch file. The copy is wrapped
in an async context manager: the scratch file is removed when the scope
exits, whether the request succeeded, failed at any stage, or was
cancelled mid-copy.

Usage:
    async with stage_stream(upload, max_bytes=limit, suffix=".mp4") as staged:
        geometry = await media_tool.probe(staged.path)
"""

import inspect
import logging
import os
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, BinaryIO, Optional, Union

from .errors import IOFailure, SizeExceeded

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
SCRATCH_PREFIX = "tubely-upload-"


def discard(path: Union[str, Path]) -> None:
    """
    Delete a scratch file if it still exists.

    Failures are logged, not raised, so the error that ended the request
    stays the one that surfaces.
    """
    try:
        Path(path).unlink(missing_ok=True)
    except OSError as e:
        logger.error(
            "Failed to remove scratch file",
            extra={"path": str(path), "error": str(e)}
        )


class StagedFile:
    """
    Exclusive handle to a local scratch file.

    The handle owns the file: release() closes it and deletes it from
    disk. release() is idempotent, so a StagedFile can be released both
    explicitly and by an enclosing scope without double-delete errors.
    """

    def __init__(self, path: Union[str, Path], handle: BinaryIO) -> None:
        self._path = Path(path)
        self._handle = handle
        self._released = False

    @classmethod
    def adopt(cls, path: Union[str, Path]) -> "StagedFile":
        """Take ownership of an existing scratch file (e.g. remux output)."""
        try:
            handle = open(path, "rb")
        except OSError as e:
            raise IOFailure(f"Could not open staged file {path}: {e}") from e
        return cls(path, handle)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def file(self) -> BinaryIO:
        return self._handle

    @property
    def released(self) -> bool:
        return self._released

    @property
    def size_bytes(self) -> int:
        return os.path.getsize(self._path)

    def tell(self) -> int:
        return self._handle.tell()

    def rewind(self) -> BinaryIO:
        """Seek back to offset 0 and return the underlying file object."""
        self._handle.flush()
        self._handle.seek(0)
        return self._handle

    def release(self) -> None:
        if self._released:
            return
        self._released = True

        try:
            self._handle.close()
        finally:
            discard(self._path)

        logger.debug("Released staged file", extra={"path": str(self._path)})

    def __repr__(self) -> str:
        state = "released" if self._released else "open"
        return f"StagedFile({str(self._path)!r}, {state})"


def _create_scratch(suffix: str, directory: Optional[str]) -> StagedFile:
    try:
        handle = tempfile.NamedTemporaryFile(
            mode="w+b",
            prefix=SCRATCH_PREFIX,
            suffix=suffix,
            dir=directory,
            delete=False,
        )
    except OSError as e:
        raise IOFailure(f"Could not create scratch file: {e}") from e
    return StagedFile(handle.name, handle)


async def _read_chunk(source, size: int) -> bytes:
    # accepts Starlette's UploadFile (async read) and plain binary files
    data = source.read(size)
    if inspect.isawaitable(data):
        data = await data
    return data


async def _iter_bounded(
    source,
    max_bytes: int,
    chunk_size: int,
) -> AsyncIterator[bytes]:
    total = 0

    while True:
        try:
            chunk = await _read_chunk(source, chunk_size)
        except OSError as e:
            raise IOFailure(f"Failed reading upload: {e}") from e

        if not chunk:
            return

        total += len(chunk)
        if total > max_bytes:
            raise SizeExceeded(
                f"Upload exceeds maximum size of {max_bytes} bytes"
            )
        yield chunk


async def _copy_into(
    source,
    staged: StagedFile,
    max_bytes: int,
    chunk_size: int,
) -> int:
    written = 0
    handle = staged.file

    async for chunk in _iter_bounded(source, max_bytes, chunk_size):
        try:
            handle.write(chunk)
        except OSError as e:
            raise IOFailure(f"Failed writing scratch file: {e}") from e
        written += len(chunk)

    return written


@asynccontextmanager
async def stage_stream(
    source,
    max_bytes: int,
    *,
    suffix: str = "",
    chunk_size: int = CHUNK_SIZE,
    directory: Optional[str] = None,
) -> AsyncIterator[StagedFile]:
    """
    Copy source into a fresh scratch file and yield it at offset 0.

    Raises SizeExceeded as soon as more than max_bytes have been read
    (exactly max_bytes is accepted) and IOFailure for read/write errors.
    The scratch file is deleted on scope exit in every case.
    """
    staged = _create_scratch(suffix, directory)

    try:
        written = await _copy_into(source, staged, max_bytes, chunk_size)
        staged.rewind()

        logger.info(
            "Staged upload",
            extra={"path": str(staged.path), "size_bytes": written}
        )

        yield staged
    finally:
        staged.release()


async def read_bounded(source, max_bytes: int, chunk_size: int = CHUNK_SIZE) -> bytes:
    """
    Read all of source into memory, failing with SizeExceeded past max_bytes.

    For small uploads (thumbnails) that are written straight to their final
    location and never need a scratch file.
    """
    chunks = [chunk async for chunk in _iter_bounded(source, max_bytes, chunk_size)]
    return b"".join(chunks)
