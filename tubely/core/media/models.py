"""
Domain models for media ingestion.

These models have no dependencies on FastAPI, boto3 or the filesystem.
The video record belongs to the metadata store; the pipeline reads it for
the ownership check and writes back a single URL field on success.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from .errors import InvalidInput


class AspectClass(Enum):
    """
    Coarse orientation bucket for a video.

    The value doubles as the object key prefix, so renaming a member
    changes where new uploads land in the bucket.
    """
    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"
    OTHER = "other"


@dataclass(frozen=True)
class Geometry:
    """Display dimensions of the first stream reported by the prober."""
    width: int
    height: int

    @property
    def ratio(self) -> float:
        return self.width / self.height


@dataclass(frozen=True)
class StoredObjectRef:
    """
    Location of a durable object: (bucket, key).

    Persisted on the video record as "<bucket>,<key>" rather than as a URL,
    because presigned URLs expire and must be issued fresh on every read.
    """
    bucket: str
    key: str

    SEPARATOR = ","

    def serialize(self) -> str:
        return f"{self.bucket}{self.SEPARATOR}{self.key}"

    @classmethod
    def parse(cls, value: str) -> "StoredObjectRef":
        bucket, sep, key = value.partition(cls.SEPARATOR)
        if not sep or not bucket or not key:
            raise InvalidInput(f"Not a stored object reference: {value!r}")
        return cls(bucket=bucket, key=key)

    @classmethod
    def looks_like_ref(cls, value: str) -> bool:
        """True if value is a bucket,key pair rather than a resolved URL."""
        if "://" in value:
            return False
        bucket, sep, key = value.partition(cls.SEPARATOR)
        return bool(sep and bucket and key)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class VideoRecord:
    """
    Metadata for one video, owned by a single user.

    video_url holds a StoredObjectRef serialization once a video has been
    uploaded; thumbnail_url holds a resolved static URL.
    """
    user_id: UUID
    title: str
    description: str = ""
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    thumbnail_url: Optional[str] = None
    video_url: Optional[str] = None

    def is_owned_by(self, user_id: UUID) -> bool:
        return self.user_id == user_id

    def with_video_url(self, video_url: str) -> "VideoRecord":
        return replace(self, video_url=video_url, updated_at=_utcnow())

    def with_thumbnail_url(self, thumbnail_url: str) -> "VideoRecord":
        return replace(self, thumbnail_url=thumbnail_url, updated_at=_utcnow())
