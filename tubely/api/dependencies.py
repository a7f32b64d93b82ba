"""
FastAPI dependency injection.

Dependencies provide instances of services, clients, and configuration
to route handlers. Using dependency injection means:
- Routes don't instantiate their own dependencies (easier to test)
- Dependencies can be swapped for fakes in tests
- Configuration is centralized

Long-lived collaborators (record store, media tool, object store, asset
store, credential validator) are built once by create_services() and
attached to app.state. Nothing is read from module-level globals, so two
apps in one process (e.g. parallel tests) never share state.
"""

import logging
from dataclasses import dataclass
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..config.settings import Settings, get_settings
from ..core.media.errors import Unauthorized
from ..core.media.pipeline import ThumbnailIngest, VideoIngestPipeline
from ..core.media.ports import MediaTool, ObjectStore
from ..infrastructure.auth.tokens import JWTCredentialValidator
from ..infrastructure.records.repository import InMemoryVideoRepository
from ..infrastructure.storage.assets import LocalAssetStore
from ..infrastructure.storage.client import StorageConfig, create_object_store
from ..infrastructure.video.processor import create_media_tool

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class Services:
    """Process-wide collaborators shared by all requests."""
    repository: InMemoryVideoRepository
    media_tool: MediaTool
    object_store: ObjectStore
    asset_store: LocalAssetStore
    credential_validator: JWTCredentialValidator


def create_services(settings: Settings) -> Services:
    """
    Build the collaborators described by settings.

    Mock modes swap in the in-memory object store and the fake media tool.
    """
    storage_config = StorageConfig(
        bucket_name=settings.s3_bucket,
        region=settings.s3_region,
        endpoint_url=settings.s3_endpoint_url,
        access_key_id=settings.s3_access_key_id,
        secret_access_key=settings.s3_secret_access_key,
    )

    return Services(
        repository=InMemoryVideoRepository(),
        media_tool=create_media_tool(
            mock_mode=settings.media_mock_mode,
            ffmpeg_path=settings.ffmpeg_path,
            ffprobe_path=settings.ffprobe_path,
        ),
        object_store=create_object_store(
            config=storage_config,
            mock_mode=settings.s3_mock_mode,
        ),
        asset_store=LocalAssetStore(
            root=settings.assets_root,
            base_url=settings.base_url,
        ),
        credential_validator=JWTCredentialValidator(settings.jwt_secret),
    )


# ---------------------------------------------------------------------------
# Service Dependencies
# ---------------------------------------------------------------------------

def get_services(request: Request) -> Services:
    return request.app.state.services


def get_app_settings(request: Request) -> Settings:
    """Settings the app was created with (falls back to the environment)."""
    settings = getattr(request.app.state, "settings", None)
    return settings or get_settings()


ServicesDep = Annotated[Services, Depends(get_services)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

async def get_current_user_id(
    services: ServicesDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> UUID:
    """
    Validate the bearer token and return the caller's user id.

    Raises Unauthorized (401) if the header is missing or the token
    doesn't validate.
    """
    if credentials is None or not credentials.credentials:
        logger.warning("Request missing bearer token")
        raise Unauthorized("Bearer token required. Provide an Authorization header.")

    return services.credential_validator.validate(credentials.credentials)


def get_video_pipeline(
    services: ServicesDep,
    settings: SettingsDep,
) -> VideoIngestPipeline:
    return VideoIngestPipeline(
        repository=services.repository,
        media_tool=services.media_tool,
        object_store=services.object_store,
        max_bytes=settings.max_video_bytes,
        url_ttl_seconds=settings.presigned_url_ttl_seconds,
        scratch_dir=settings.scratch_dir,
    )


def get_thumbnail_ingest(
    services: ServicesDep,
    settings: SettingsDep,
) -> ThumbnailIngest:
    return ThumbnailIngest(
        repository=services.repository,
        asset_store=services.asset_store,
        max_bytes=settings.max_thumbnail_bytes,
    )


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
CurrentUserId = Annotated[UUID, Depends(get_current_user_id)]
VideoPipelineDep = Annotated[VideoIngestPipeline, Depends(get_video_pipeline)]
ThumbnailIngestDep = Annotated[ThumbnailIngest, Depends(get_thumbnail_ingest)]
