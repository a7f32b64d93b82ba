"""
Media ingestion pipeline.

Video uploads go through a fixed sequence of stages:

    ownership check -> allowlist -> stage -> probe -> remux -> key -> upload
    -> record update -> presign

Each stage fails fast. Nothing is written to the video record until the
object store has accepted the upload, so a failed request never leaves a
dangling reference behind. Scratch files for both the staged upload and
the remuxed output are released by one AsyncExitStack, whichever stage
fails.

Thumbnails skip staging and object storage: they're validated, named and
written straight into the local asset store.

Collaborators (record store, media tool, object store, asset store) are
passed in explicitly so tests can run pipelines in isolation.
"""

import logging
from contextlib import AsyncExitStack
from typing import Optional
from uuid import UUID

from .errors import Unauthorized, UnsupportedMediaType
from .geometry import classify_geometry
from .keys import thumbnail_key, video_key
from .models import VideoRecord
from .ports import AssetStore, MediaTool, ObjectStore, VideoRepository
from .references import DEFAULT_URL_TTL_SECONDS, sign_video_record
from .staging import StagedFile, discard, read_bounded, stage_stream

logger = logging.getLogger(__name__)

VIDEO_CONTENT_TYPES = frozenset({"video/mp4"})
THUMBNAIL_CONTENT_TYPES = frozenset({"image/jpeg", "image/png"})


def parse_media_type(content_type: Optional[str]) -> str:
    """Strip parameters and normalise case: 'Video/MP4; codecs=x' -> 'video/mp4'."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def require_media_type(content_type: Optional[str], allowed: frozenset) -> str:
    media_type = parse_media_type(content_type)
    if media_type not in allowed:
        raise UnsupportedMediaType(
            f"Unsupported media type {content_type!r}. "
            f"Allowed: {', '.join(sorted(allowed))}"
        )
    return media_type


def require_owner(
    repository: VideoRepository,
    video_id: UUID,
    user_id: UUID,
) -> VideoRecord:
    """Load the record and check the caller owns it."""
    video = repository.get_video(video_id)
    if not video.is_owned_by(user_id):
        logger.warning(
            "Upload rejected: caller does not own video",
            extra={"video_id": str(video_id), "user_id": str(user_id)}
        )
        raise Unauthorized("Video is not owned by the authenticated user")
    return video


class VideoIngestPipeline:
    """
    Stage, probe, remux and upload one video for one request.

    Stages run strictly one after another. The instance holds no
    per-request state, so it can be shared across concurrent requests.
    """

    def __init__(
        self,
        *,
        repository: VideoRepository,
        media_tool: MediaTool,
        object_store: ObjectStore,
        max_bytes: int,
        url_ttl_seconds: int = DEFAULT_URL_TTL_SECONDS,
        scratch_dir: Optional[str] = None,
    ) -> None:
        self._repository = repository
        self._media_tool = media_tool
        self._object_store = object_store
        self._max_bytes = max_bytes
        self._url_ttl_seconds = url_ttl_seconds
        self._scratch_dir = scratch_dir

    async def ingest(
        self,
        video_id: UUID,
        user_id: UUID,
        source,
        content_type: Optional[str],
    ) -> VideoRecord:
        """
        Run the full pipeline and return the updated record, presigned.

        source is anything with a read(size) method, sync or async.
        """
        video = require_owner(self._repository, video_id, user_id)
        media_type = require_media_type(content_type, VIDEO_CONTENT_TYPES)

        logger.info(
            "Video upload started",
            extra={"video_id": str(video_id), "user_id": str(user_id)}
        )

        async with AsyncExitStack() as scope:
            staged = await scope.enter_async_context(
                stage_stream(
                    source,
                    self._max_bytes,
                    suffix=".mp4",
                    directory=self._scratch_dir,
                )
            )

            geometry = await self._media_tool.probe(staged.path)
            aspect_class = classify_geometry(geometry)

            logger.info(
                "Video probed",
                extra={
                    "video_id": str(video_id),
                    "resolution": f"{geometry.width}x{geometry.height}",
                    "aspect_class": aspect_class.value,
                }
            )

            processed_path = await self._media_tool.remux_fast_start(staged.path)
            scope.callback(discard, processed_path)
            processed = StagedFile.adopt(processed_path)
            scope.callback(processed.release)

            key = video_key(aspect_class)
            ref = await self._object_store.upload_file(
                processed.rewind(),
                key,
                media_type,
            )

        updated = video.with_video_url(ref.serialize())
        self._repository.update_video(updated)

        logger.info(
            "Video stored",
            extra={"video_id": str(video_id), "bucket": ref.bucket, "key": ref.key}
        )

        return await sign_video_record(
            updated,
            self._object_store,
            expiry_seconds=self._url_ttl_seconds,
        )


class ThumbnailIngest:
    """Validate a thumbnail, write it to the asset store, point the record at it."""

    def __init__(
        self,
        *,
        repository: VideoRepository,
        asset_store: AssetStore,
        max_bytes: int,
    ) -> None:
        self._repository = repository
        self._asset_store = asset_store
        self._max_bytes = max_bytes

    async def ingest(
        self,
        video_id: UUID,
        user_id: UUID,
        source,
        content_type: Optional[str],
    ) -> VideoRecord:
        video = require_owner(self._repository, video_id, user_id)
        media_type = require_media_type(content_type, THUMBNAIL_CONTENT_TYPES)

        data = await read_bounded(source, self._max_bytes)
        asset_path = thumbnail_key(media_type)
        thumbnail_url = await self._asset_store.write(asset_path, data)

        updated = video.with_thumbnail_url(thumbnail_url)
        self._repository.update_video(updated)

        logger.info(
            "Thumbnail stored",
            extra={
                "video_id": str(video_id),
                "asset_path": asset_path,
                "size_bytes": len(data),
            }
        )

        return updated
