"""
Infrastructure layer - external service integrations.

Each subdirectory wraps an external dependency:
- video: FFprobe/FFmpeg media tool
- storage: Object storage (S3/R2) and local thumbnail assets
- records: Video metadata record store
- auth: Bearer credential validation

These wrappers translate between external formats and our domain models.
"""
