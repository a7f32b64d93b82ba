"""
Error taxonomy for the ingestion pipeline.

Every failure the pipeline can surface is an IngestError subclass carrying
a stable HTTP status code and a machine-readable classification. The API
layer maps these to responses in one place instead of each route
translating exceptions by hand.
"""


class IngestError(Exception):
    """Base class for all ingestion failures."""

    status_code: int = 500
    classification: str = "ingest_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# ---------------------------------------------------------------------------
# Caller errors
# ---------------------------------------------------------------------------

class InvalidInput(IngestError):
    """Bad identifier, disallowed content type or malformed reference."""
    status_code = 400
    classification = "invalid_input"


class UnsupportedMediaType(InvalidInput):
    """Declared content type is not on the allowlist for this upload."""
    pass


class SizeExceeded(InvalidInput):
    """Upload is larger than the configured limit."""
    status_code = 413


class Unauthorized(IngestError):
    """Missing or invalid credential, or the caller doesn't own the video."""
    status_code = 401
    classification = "unauthorized"


class VideoNotFound(IngestError):
    """No video record exists for the requested id."""
    status_code = 404
    classification = "not_found"


# ---------------------------------------------------------------------------
# External tool errors
# ---------------------------------------------------------------------------

class ToolFailure(IngestError):
    """An external media tool (ffprobe/ffmpeg) failed."""
    classification = "tool_failure"


class ProbeUnavailable(ToolFailure):
    """The inspection tool could not be run."""
    pass


class NoStreamData(ToolFailure):
    """The inspection tool reported zero streams."""
    pass


class MalformedOutput(ToolFailure):
    """The inspection tool's output couldn't be parsed into a geometry."""
    pass


class RemuxFailed(ToolFailure):
    """The fast-start remux exited non-zero or couldn't be started."""
    pass


# ---------------------------------------------------------------------------
# Storage errors
# ---------------------------------------------------------------------------

class StorageFailure(IngestError):
    """Scratch disk, asset disk or object store I/O failed."""
    classification = "storage_failure"


class IOFailure(StorageFailure):
    """Local read/write failed (includes client disconnects while staging)."""
    pass


class UploadFailed(StorageFailure):
    """The object store rejected or failed the transfer."""
    pass


class SigningFailure(IngestError):
    """A retrieval URL couldn't be issued."""
    classification = "signing_failure"


class SigningFailed(SigningFailure):
    """The presign call on the object store client errored."""
    pass
