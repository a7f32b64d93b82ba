"""
Storage key derivation.

Keys are built from a cryptographically random identifier, never from the
uploaded filename. Two uploads of identical bytes get different keys, and
a client can't pick (or guess) where its object lands.

Layout:
    videos:     {landscape|portrait|other}/<id>.mp4
    thumbnails: <id>.<ext>
"""

import base64
import re
import secrets
from typing import Optional

from .models import AspectClass

KEY_BYTES = 32
VIDEO_EXTENSION = "mp4"
FALLBACK_EXTENSION = "png"

# subtype characters we're willing to put on disk as an extension
_SUBTYPE_PATTERN = re.compile(r"^[a-z0-9][a-z0-9.+-]*$")


def random_identifier(nbytes: int = KEY_BYTES) -> str:
    """Random URL-safe identifier (base64url, no padding)."""
    raw = secrets.token_bytes(nbytes)
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def extension_for_content_type(content_type: Optional[str]) -> str:
    """
    Derive a file extension from a declared content type's subtype.

    "image/png; charset=binary" -> "png". Anything we can't parse cleanly
    falls back to png.
    """
    if not content_type:
        return FALLBACK_EXTENSION

    media_type = content_type.split(";", 1)[0].strip().lower()
    parts = media_type.split("/")
    if len(parts) != 2 or not parts[0]:
        return FALLBACK_EXTENSION

    subtype = parts[1]
    if not _SUBTYPE_PATTERN.match(subtype):
        return FALLBACK_EXTENSION
    return subtype


def video_key(aspect_class: AspectClass) -> str:
    """Key for a video object, partitioned by aspect class."""
    return f"{aspect_class.value}/{random_identifier()}.{VIDEO_EXTENSION}"


def thumbnail_key(content_type: Optional[str]) -> str:
    """Key for a thumbnail asset; no class prefix."""
    return f"{random_identifier()}.{extension_for_content_type(content_type)}"
