"""
Storage integrations.

- client: Object storage (S3/R2) for videos, with presigned retrieval
- assets: Local filesystem storage for thumbnails, served statically
"""

from .assets import LocalAssetStore
from .client import (
    MockObjectStore,
    S3ObjectStore,
    StorageConfig,
    create_object_store,
)

__all__ = [
    "LocalAssetStore",
    "MockObjectStore",
    "S3ObjectStore",
    "StorageConfig",
    "create_object_store",
]
