"""
Video API endpoints.

Creating a video record and attaching media to it are separate steps:
1. POST /api/videos creates an empty record owned by the caller
2. POST /api/video_upload/{id} runs the ingestion pipeline for the file
3. POST /api/thumbnail_upload/{id} stores a thumbnail for the record

Every response that includes a video carries a freshly presigned URL. The
record itself only stores "<bucket>,<key>", so links never go stale in
the database.
"""

import logging
from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, File, UploadFile, status
from pydantic import BaseModel, Field

from ...core.media.errors import InvalidInput
from ...core.media.models import VideoRecord
from ...core.media.pipeline import require_owner
from ...core.media.references import sign_video_record
from ..dependencies import (
    CurrentUserId,
    ServicesDep,
    SettingsDep,
    ThumbnailIngestDep,
    VideoPipelineDep,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class CreateVideoRequest(BaseModel):
    """Request to create a new (empty) video record."""
    title: str = Field(min_length=1, max_length=200, description="Video title")
    description: str = Field(default="", max_length=5000, description="Video description")


class VideoResponse(BaseModel):
    """A video record as returned to clients."""
    id: UUID = Field(description="Video identifier")
    user_id: UUID = Field(description="Owning user")
    title: str
    description: str
    created_at: datetime
    updated_at: datetime
    thumbnail_url: Optional[str] = Field(None, description="Static thumbnail URL")
    video_url: Optional[str] = Field(
        None,
        description="Presigned video URL, valid for a limited time",
    )

    @classmethod
    def from_record(cls, video: VideoRecord) -> "VideoResponse":
        return cls(
            id=video.id,
            user_id=video.user_id,
            title=video.title,
            description=video.description,
            created_at=video.created_at,
            updated_at=video.updated_at,
            thumbnail_url=video.thumbnail_url,
            video_url=video.video_url,
        )


# ---------------------------------------------------------------------------
# Helper Functions
# ---------------------------------------------------------------------------

def parse_video_id(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as e:
        raise InvalidInput(f"Invalid video ID: {value!r}") from e


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/videos",
    response_model=VideoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create video record",
)
async def create_video(
    request: CreateVideoRequest,
    user_id: CurrentUserId,
    services: ServicesDep,
) -> VideoResponse:
    video = services.repository.create_video(
        user_id=user_id,
        title=request.title,
        description=request.description,
    )
    return VideoResponse.from_record(video)


@router.get(
    "/videos",
    response_model=list[VideoResponse],
    summary="List the caller's videos",
)
async def list_videos(
    user_id: CurrentUserId,
    services: ServicesDep,
    settings: SettingsDep,
) -> list[VideoResponse]:
    videos = services.repository.list_videos(user_id)
    signed = [
        await sign_video_record(
            video,
            services.object_store,
            expiry_seconds=settings.presigned_url_ttl_seconds,
        )
        for video in videos
    ]
    return [VideoResponse.from_record(video) for video in signed]


@router.get(
    "/videos/{video_id}",
    response_model=VideoResponse,
    summary="Get a video with a fresh retrieval URL",
)
async def get_video(
    video_id: str,
    user_id: CurrentUserId,
    services: ServicesDep,
    settings: SettingsDep,
) -> VideoResponse:
    video = require_owner(services.repository, parse_video_id(video_id), user_id)
    signed = await sign_video_record(
        video,
        services.object_store,
        expiry_seconds=settings.presigned_url_ttl_seconds,
    )
    return VideoResponse.from_record(signed)


@router.post(
    "/video_upload/{video_id}",
    response_model=VideoResponse,
    summary="Upload video file",
    description="Probe, remux for fast start and store an MP4 for an existing video record",
)
async def upload_video(
    video_id: str,
    video: Annotated[UploadFile, File(description="MP4 video")],
    user_id: CurrentUserId,
    pipeline: VideoPipelineDep,
) -> VideoResponse:
    """
    Run the ingestion pipeline for an uploaded video.

    The record is updated only after the object store accepted the file.
    Any failure (bad type, too large, probe/remux/upload error) leaves it
    untouched.
    """
    try:
        updated = await pipeline.ingest(
            video_id=parse_video_id(video_id),
            user_id=user_id,
            source=video,
            content_type=video.content_type,
        )
    finally:
        await video.close()

    return VideoResponse.from_record(updated)


@router.post(
    "/thumbnail_upload/{video_id}",
    response_model=VideoResponse,
    summary="Upload thumbnail image",
    description="Store a JPEG or PNG thumbnail for an existing video record",
)
async def upload_thumbnail(
    video_id: str,
    thumbnail: Annotated[UploadFile, File(description="JPEG or PNG image")],
    user_id: CurrentUserId,
    ingest: ThumbnailIngestDep,
    services: ServicesDep,
    settings: SettingsDep,
) -> VideoResponse:
    try:
        updated = await ingest.ingest(
            video_id=parse_video_id(video_id),
            user_id=user_id,
            source=thumbnail,
            content_type=thumbnail.content_type,
        )
    finally:
        await thumbnail.close()

    # the record may also hold a video reference; resolve it like any read
    signed = await sign_video_record(
        updated,
        services.object_store,
        expiry_seconds=settings.presigned_url_ttl_seconds,
    )
    return VideoResponse.from_record(signed)
