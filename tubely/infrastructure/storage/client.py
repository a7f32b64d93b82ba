"""
Object storage client for uploaded videos.

Supports AWS S3 and S3-compatible stores (Cloudflare R2, MinIO) through
boto3, with a mock mode for local development.

The store only ever sees remuxed, fast-start MP4s under keys like
"landscape/<id>.mp4". Objects are private; clients read them through
short-lived presigned URLs issued per request.

Mock mode keeps objects in memory, enabling API testing without
provisioning a bucket.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import BinaryIO, Optional

from ...core.media.errors import SigningFailed, UploadFailed
from ...core.media.models import StoredObjectRef
from ...core.media.ports import ObjectStore

logger = logging.getLogger(__name__)


@dataclass
class StorageConfig:
    """
    Configuration for S3/S3-compatible storage.

    Credentials are optional: when empty, boto3 falls back to its own
    credential chain (environment, shared config, instance role).
    """
    bucket_name: str
    region: str = "us-east-1"
    endpoint_url: Optional[str] = None
    access_key_id: str = ""
    secret_access_key: str = ""


class S3ObjectStore:
    """
    S3 object storage client.

    Uses boto3's managed transfer (upload_fileobj) so large videos are
    streamed from the staged file in parts instead of being read into
    memory. Retries are disabled: a failed transfer is reported to the
    caller straight away and the client re-uploads.

    boto3 is synchronous, so transfers run in a worker thread. The caller's
    request still waits for the whole transfer to finish.
    """

    def __init__(self, config: StorageConfig, client=None) -> None:
        """
        Initialize S3 client with boto3.

        A pre-built client can be passed in (tests, or a process-wide
        client shared between requests); otherwise one is built from config.
        """
        self._config = config

        if client is None:
            client = self._build_client(config)
        self._s3_client = client

        logger.info(
            "Initialized S3 storage client",
            extra={
                "bucket": config.bucket_name,
                "endpoint": config.endpoint_url or "aws",
            }
        )

    @staticmethod
    def _build_client(config: StorageConfig):
        try:
            import boto3
            from botocore.config import Config
        except ImportError:
            raise ImportError(
                "boto3 is required for S3 storage. Install with: pip install boto3"
            )

        boto_config = Config(
            signature_version="s3v4",
            retries={"total_max_attempts": 1},
        )

        kwargs = {
            "region_name": config.region,
            "config": boto_config,
        }
        if config.endpoint_url:
            kwargs["endpoint_url"] = config.endpoint_url
        if config.access_key_id and config.secret_access_key:
            kwargs["aws_access_key_id"] = config.access_key_id
            kwargs["aws_secret_access_key"] = config.secret_access_key

        return boto3.client("s3", **kwargs)

    @property
    def bucket(self) -> str:
        return self._config.bucket_name

    async def upload_file(
        self,
        fileobj: BinaryIO,
        key: str,
        content_type: str,
    ) -> StoredObjectRef:
        """
        Stream fileobj to the bucket under key.

        The object only becomes visible under key once the transfer has
        completed, so a failure never leaves a half-written object behind.
        """
        try:
            await asyncio.to_thread(
                self._s3_client.upload_fileobj,
                fileobj,
                self._config.bucket_name,
                key,
                ExtraArgs={"ContentType": content_type},
            )
        except Exception as e:
            logger.error(
                "Failed to upload object",
                extra={"bucket": self._config.bucket_name, "key": key, "error": str(e)}
            )
            raise UploadFailed(f"Upload failed: {e}") from e

        logger.info(
            "Uploaded object",
            extra={"bucket": self._config.bucket_name, "key": key, "content_type": content_type}
        )

        return StoredObjectRef(bucket=self._config.bucket_name, key=key)

    async def get_presigned_url(
        self,
        ref: StoredObjectRef,
        expiry_seconds: int = 3600,
    ) -> str:
        """
        Generate a temporary download URL for one object.

        Presigning is a local signing operation; no request is made to S3.
        The reference's own bucket is used, so records written before a
        bucket change still resolve.
        """
        try:
            return self._s3_client.generate_presigned_url(
                "get_object",
                Params={
                    "Bucket": ref.bucket,
                    "Key": ref.key,
                },
                ExpiresIn=expiry_seconds,
            )
        except Exception as e:
            logger.error(
                "Failed to generate presigned URL",
                extra={"bucket": ref.bucket, "key": ref.key, "error": str(e)}
            )
            raise SigningFailed(f"Presigned URL generation failed: {e}") from e


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

class MockObjectStore:
    """
    In-memory object store for local development and tests.

    Objects are kept in a dict keyed by (bucket, key) and "presigned URLs"
    are mock:// URIs carrying the requested expiry.
    """

    def __init__(self, bucket_name: str = "mock-bucket") -> None:
        self._bucket = bucket_name
        # {(bucket, key): (data, content_type)}
        self._objects: dict[tuple[str, str], tuple[bytes, str]] = {}
        logger.info("Initialized mock object store (in-memory)")

    @property
    def bucket(self) -> str:
        return self._bucket

    async def upload_file(
        self,
        fileobj: BinaryIO,
        key: str,
        content_type: str,
    ) -> StoredObjectRef:
        data = await asyncio.to_thread(fileobj.read)
        self._objects[(self._bucket, key)] = (data, content_type)

        logger.debug(
            "Stored object in mock storage",
            extra={"key": key, "size_bytes": len(data)}
        )

        return StoredObjectRef(bucket=self._bucket, key=key)

    async def get_presigned_url(
        self,
        ref: StoredObjectRef,
        expiry_seconds: int = 3600,
    ) -> str:
        if (ref.bucket, ref.key) not in self._objects:
            raise SigningFailed(f"Object not found: {ref.bucket}/{ref.key}")
        return f"mock://{ref.bucket}/{ref.key}?expires={expiry_seconds}"


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_object_store(
    config: Optional[StorageConfig] = None,
    mock_mode: bool = False,
) -> ObjectStore:
    """
    Create object store based on configuration.

    Args:
        config: Storage configuration (required if not mock_mode)
        mock_mode: If True, return in-memory store for testing

    Returns:
        ObjectStore implementation (S3 or Mock)
    """
    if mock_mode:
        bucket = config.bucket_name if config else "mock-bucket"
        return MockObjectStore(bucket_name=bucket)

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return S3ObjectStore(config)
