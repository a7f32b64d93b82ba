"""
Media ingestion: aspect classification, key derivation and the upload pipeline.
"""

from .errors import (
    IngestError,
    InvalidInput,
    IOFailure,
    MalformedOutput,
    NoStreamData,
    ProbeUnavailable,
    RemuxFailed,
    SigningFailed,
    SigningFailure,
    SizeExceeded,
    StorageFailure,
    ToolFailure,
    Unauthorized,
    UnsupportedMediaType,
    UploadFailed,
    VideoNotFound,
)
from .geometry import classify_aspect, classify_geometry
from .keys import thumbnail_key, video_key
from .models import AspectClass, Geometry, StoredObjectRef, VideoRecord
from .pipeline import ThumbnailIngest, VideoIngestPipeline
from .references import sign_video_record

__all__ = [
    "IngestError",
    "InvalidInput",
    "IOFailure",
    "MalformedOutput",
    "NoStreamData",
    "ProbeUnavailable",
    "RemuxFailed",
    "SigningFailed",
    "SigningFailure",
    "SizeExceeded",
    "StorageFailure",
    "ToolFailure",
    "Unauthorized",
    "UnsupportedMediaType",
    "UploadFailed",
    "VideoNotFound",
    "classify_aspect",
    "classify_geometry",
    "thumbnail_key",
    "video_key",
    "AspectClass",
    "Geometry",
    "StoredObjectRef",
    "VideoRecord",
    "ThumbnailIngest",
    "VideoIngestPipeline",
    "sign_video_record",
]
