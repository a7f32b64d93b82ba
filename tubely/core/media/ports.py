"""
Interfaces the ingestion pipeline depends on.

The pipeline only sees these protocols. Real implementations live in
tubely.infrastructure (FFmpeg, boto3, local disk, in-memory record store)
and tests substitute fakes.
"""

from pathlib import Path
from typing import BinaryIO, Protocol, Union
from uuid import UUID

from .models import Geometry, StoredObjectRef, VideoRecord


class MediaTool(Protocol):
    """Inspect and repackage media files without re-encoding them."""

    def check_available(self) -> list[str]:
        """Names of required binaries that are missing or broken."""
        ...

    async def probe(self, path: Path) -> Geometry:
        """Return the first stream's width/height."""
        ...

    async def remux_fast_start(self, path: Path) -> Path:
        """Write a metadata-first copy next to path and return its path."""
        ...


class ObjectStore(Protocol):
    """Durable object storage with presigned retrieval."""

    @property
    def bucket(self) -> str:
        ...

    async def upload_file(
        self,
        fileobj: BinaryIO,
        key: str,
        content_type: str,
    ) -> StoredObjectRef:
        """Stream fileobj (from its current offset) to key."""
        ...

    async def get_presigned_url(
        self,
        ref: StoredObjectRef,
        expiry_seconds: int = 3600,
    ) -> str:
        """Issue a time-bounded GET URL for a single object."""
        ...


class AssetStore(Protocol):
    """Local static asset storage (thumbnails)."""

    async def write(
        self,
        relative_path: str,
        source: Union[bytes, BinaryIO],
    ) -> str:
        """Persist bytes and return the public URL."""
        ...


class VideoRepository(Protocol):
    """Video metadata record store."""

    def get_video(self, video_id: UUID) -> VideoRecord:
        """Raises VideoNotFound if there is no such record."""
        ...

    def update_video(self, video: VideoRecord) -> None:
        ...
