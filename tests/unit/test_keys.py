"""
Unit tests for storage key derivation.
"""

import re

import pytest

from tubely.core.media.keys import (
    extension_for_content_type,
    random_identifier,
    thumbnail_key,
    video_key,
)
from tubely.core.media.models import AspectClass

IDENTIFIER = r"[A-Za-z0-9_-]+"


class TestRandomIdentifier:

    def test_is_url_safe_without_padding(self):
        identifier = random_identifier()
        assert re.fullmatch(IDENTIFIER, identifier)
        assert "=" not in identifier

    def test_encodes_32_random_bytes(self):
        # 32 bytes -> 43 base64 characters once padding is stripped
        assert len(random_identifier()) == 43

    def test_never_repeats(self):
        """Identical uploads must never map to the same key."""
        identifiers = {random_identifier() for _ in range(1000)}
        assert len(identifiers) == 1000


class TestVideoKey:

    def test_landscape_key_format(self):
        key = video_key(AspectClass.LANDSCAPE)
        assert re.fullmatch(rf"landscape/{IDENTIFIER}\.mp4", key)

    @pytest.mark.parametrize("aspect_class,prefix", [
        (AspectClass.LANDSCAPE, "landscape/"),
        (AspectClass.PORTRAIT, "portrait/"),
        (AspectClass.OTHER, "other/"),
    ])
    def test_prefix_follows_aspect_class(self, aspect_class, prefix):
        key = video_key(aspect_class)
        assert key.startswith(prefix)
        assert key.endswith(".mp4")
        assert key.count("/") == 1

    def test_keys_do_not_collide_across_repeated_uploads(self):
        keys = [video_key(AspectClass.LANDSCAPE) for _ in range(500)]
        assert len(set(keys)) == len(keys)


class TestThumbnailKey:

    @pytest.mark.parametrize("content_type,extension", [
        ("image/png", "png"),
        ("image/jpeg", "jpeg"),
        ("IMAGE/PNG", "png"),
        ("image/png; charset=binary", "png"),
    ])
    def test_extension_comes_from_subtype(self, content_type, extension):
        assert extension_for_content_type(content_type) == extension

    @pytest.mark.parametrize("content_type", [
        None,
        "",
        "png",
        "image/",
        "/png",
        "image/png/extra",
        "image/../../etc",
        "image/p ng",
    ])
    def test_malformed_content_type_falls_back_to_png(self, content_type):
        assert extension_for_content_type(content_type) == "png"

    def test_thumbnail_key_has_no_class_prefix(self):
        key = thumbnail_key("image/jpeg")
        assert re.fullmatch(rf"{IDENTIFIER}\.jpeg", key)

    def test_thumbnail_key_with_malformed_header(self):
        key = thumbnail_key("not a media type")
        assert key.endswith(".png")
        assert "/" not in key
