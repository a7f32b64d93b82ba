"""
Video metadata record store.

The ingestion pipeline reads a record for the ownership check and writes
back one URL field once the upload has landed. This in-memory
implementation backs local development and tests; a database-backed
repository only has to provide the same four methods.

Records are copied on the way in and out, so a caller holding a
VideoRecord can't change stored state without going through
update_video.
"""

import logging
import threading
from dataclasses import replace
from uuid import UUID

from ...core.media.errors import VideoNotFound
from ...core.media.models import VideoRecord

logger = logging.getLogger(__name__)


class InMemoryVideoRepository:
    """Thread-safe dict of video records keyed by id."""

    def __init__(self) -> None:
        self._videos: dict[UUID, VideoRecord] = {}
        self._lock = threading.Lock()
        logger.info("Initialized in-memory video repository")

    def create_video(
        self,
        user_id: UUID,
        title: str,
        description: str = "",
    ) -> VideoRecord:
        video = VideoRecord(user_id=user_id, title=title, description=description)
        with self._lock:
            self._videos[video.id] = replace(video)

        logger.info(
            "Created video record",
            extra={"video_id": str(video.id), "user_id": str(user_id)}
        )

        return video

    def get_video(self, video_id: UUID) -> VideoRecord:
        with self._lock:
            video = self._videos.get(video_id)
        if video is None:
            raise VideoNotFound(f"Video {video_id} not found")
        return replace(video)

    def update_video(self, video: VideoRecord) -> None:
        with self._lock:
            if video.id not in self._videos:
                raise VideoNotFound(f"Video {video.id} not found")
            self._videos[video.id] = replace(video)

    def list_videos(self, user_id: UUID) -> list[VideoRecord]:
        """All videos owned by user_id, oldest first."""
        with self._lock:
            videos = [replace(v) for v in self._videos.values() if v.user_id == user_id]
        return sorted(videos, key=lambda v: v.created_at)
