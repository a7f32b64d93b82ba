"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

Mock modes enable local development without S3 or FFmpeg.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like cors_origins), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "Tubely API"
    api_version: str = "v1"
    platform: str = Field(
        default="localhost",
        description="Public host name used in asset URLs"
    )
    port: int = Field(
        default=8091,
        description="Port the API is served on; also used in asset URLs"
    )

    # Authentication
    jwt_secret: str = Field(
        default="",
        description="HS256 secret for bearer access tokens. Required."
    )

    # Local assets (thumbnails)
    assets_root: str = Field(
        default="./assets",
        description="Directory thumbnails are written to and served from"
    )

    # S3 Storage Configuration
    s3_bucket: str = Field(
        default="tubely-videos",
        description="Bucket for processed videos"
    )
    s3_region: str = Field(
        default="us-east-1",
        description="Bucket region"
    )
    s3_endpoint_url: Optional[str] = Field(
        default=None,
        description="Endpoint for S3-compatible stores (R2, MinIO). Empty for AWS."
    )
    s3_access_key_id: str = Field(
        default="",
        description="Access key. Empty to use boto3's default credential chain."
    )
    s3_secret_access_key: str = Field(
        default="",
        description="Secret key. Empty to use boto3's default credential chain."
    )
    s3_mock_mode: bool = Field(
        default=False,
        description="Use in-memory object store instead of S3. Enables local dev without a bucket."
    )

    # Media tools
    ffmpeg_path: str = Field(default="ffmpeg", description="ffmpeg binary")
    ffprobe_path: str = Field(default="ffprobe", description="ffprobe binary")
    media_mock_mode: bool = Field(
        default=False,
        description="Use a fake media tool instead of FFmpeg. Every video probes as 1920x1080."
    )
    scratch_dir: Optional[str] = Field(
        default=None,
        description="Directory for upload scratch files. Defaults to the system temp dir."
    )

    # Upload limits
    max_video_size_mb: int = Field(
        default=1024,
        description="Maximum video upload size in MB (1 GB)."
    )
    max_thumbnail_size_mb: int = Field(
        default=10,
        description="Maximum thumbnail upload size in MB."
    )
    presigned_url_ttl_seconds: int = Field(
        default=3600,
        description="Validity of video retrieval URLs. Issued fresh on every read."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins. Use * for development only."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def base_url(self) -> str:
        """Public origin used to build asset URLs."""
        return f"http://{self.platform}:{self.port}"

    @property
    def max_video_bytes(self) -> int:
        return self.max_video_size_mb * 1024 * 1024

    @property
    def max_thumbnail_bytes(self) -> int:
        return self.max_thumbnail_size_mb * 1024 * 1024

    def validate_required_fields(self) -> list[str]:
        """
        Validate that required fields are set based on mock mode settings.

        Returns list of missing required fields. S3 credentials aren't
        checked: boto3 can find them through its own credential chain.
        """
        missing = []

        if not self.jwt_secret:
            missing.append("JWT_SECRET")

        if not self.s3_mock_mode and not self.s3_bucket:
            missing.append("S3_BUCKET")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache means we only load settings once per process.
    For tests, you can call get_settings.cache_clear() to reset, or
    override the dependency on the app.
    """
    return Settings()
