"""
Tubely - video hosting backend with a media ingestion pipeline.

This package contains the complete application:
- core: Framework-agnostic ingestion logic (aspect classes, keys, pipeline)
- infrastructure: External tool and storage integrations
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
