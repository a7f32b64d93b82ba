"""
FastAPI application entry point.

This module creates and configures the FastAPI application.
Using an application factory pattern (create_app function) because:
- Easier to test with different configurations
- Explicit about initialization order
- Tests can hand in their own collaborators

For local development:
    uvicorn tubely.main:app --reload --port 8091

For production:
    gunicorn tubely.main:app -w 4 -k uvicorn.workers.UvicornWorker
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .api.dependencies import Services, create_services
from .api.routes import health, videos
from .config.settings import Settings, get_settings
from .core.media.errors import IngestError
from .infrastructure.storage.assets import ASSETS_URL_PREFIX

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup validates configuration and makes sure the assets directory
    exists before the static mount is asked to serve from it.
    """
    settings: Settings = app.state.settings
    services: Services = app.state.services

    logger.info(
        "Tubely API starting",
        extra={
            "version": settings.api_version,
            "mock_mode": {
                "s3": settings.s3_mock_mode,
                "media": settings.media_mock_mode,
            }
        }
    )

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )

    services.asset_store.ensure_root()

    yield

    logger.info("Tubely API shutting down")


def create_app(
    settings: Optional[Settings] = None,
    services: Optional[Services] = None,
) -> FastAPI:
    """
    Application factory.

    settings and services default to the environment-derived ones; tests
    pass their own to run against fakes.
    """
    settings = settings or get_settings()
    services = services or create_services(settings)

    logging.getLogger().setLevel(settings.log_level.upper())

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="""
        Video hosting backend.

        ## Workflow

        1. **Create a video**: `POST /api/videos`
        2. **Upload the file**: `POST /api/video_upload/{video_id}` (MP4)
           - Probed for aspect ratio, remuxed for fast start, stored in S3
        3. **Upload a thumbnail**: `POST /api/thumbnail_upload/{video_id}` (JPEG/PNG)
        4. **Watch**: `GET /api/videos/{video_id}` returns a time-limited video URL

        ## Authentication

        All `/api` endpoints require `Authorization: Bearer <token>`.
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(
        videos.router,
        prefix="/api",
        tags=["Videos"],
    )

    # thumbnails are plain files; no auth, no signing
    app.mount(
        ASSETS_URL_PREFIX,
        StaticFiles(directory=settings.assets_root, check_dir=False),
        name="assets",
    )

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": "Tubely API",
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/health",
        }

    @app.exception_handler(IngestError)
    async def ingest_error_handler(request: Request, exc: IngestError):
        """
        Map pipeline failures to responses.

        Each error class carries its own status code and a stable
        classification string clients can switch on.
        """
        log = logger.warning if exc.status_code < 500 else logger.error
        log(
            "Request failed",
            extra={
                "path": request.url.path,
                "method": request.method,
                "classification": exc.classification,
                "error_type": type(exc).__name__,
                "error": exc.message,
            },
        )

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.classification,
                "detail": exc.message,
            }
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all exception handler.

        Prevents stack traces from leaking to clients. The full error is
        logged server-side.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error. Please contact support if this persists."
            }
        )

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": settings.api_version,
        }
    )

    return app


# Create the application instance
# This is what uvicorn/gunicorn will import
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "tubely.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower(),
    )
