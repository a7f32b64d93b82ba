"""
Turning stored object references into retrieval URLs.

Video records persist "<bucket>,<key>" rather than a URL. Every time a
record is returned to a client, the reference is exchanged for a freshly
presigned URL. Nothing here caches: a presigned URL is only valid for its
expiry window, so caching would eventually hand out dead links.
"""

import logging
from dataclasses import replace

from .models import StoredObjectRef, VideoRecord
from .ports import ObjectStore

logger = logging.getLogger(__name__)

DEFAULT_URL_TTL_SECONDS = 3600


async def sign_video_record(
    video: VideoRecord,
    store: ObjectStore,
    expiry_seconds: int = DEFAULT_URL_TTL_SECONDS,
) -> VideoRecord:
    """
    Return a copy of video with video_url replaced by a presigned URL.

    Records without a video, or whose video_url is already a resolved URL,
    are returned unchanged. The stored record itself is never modified.
    """
    if not video.video_url or not StoredObjectRef.looks_like_ref(video.video_url):
        return video

    ref = StoredObjectRef.parse(video.video_url)
    presigned_url = await store.get_presigned_url(ref, expiry_seconds=expiry_seconds)

    logger.debug(
        "Issued retrieval URL",
        extra={"video_id": str(video.id), "key": ref.key, "expiry_seconds": expiry_seconds}
    )

    return replace(video, video_url=presigned_url)
