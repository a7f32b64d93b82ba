"""
Unit tests for aspect ratio classification.

The classifier is a fixed two-band heuristic around 16:9 and 9:16.
Everything outside the bands is OTHER, including common ratios like 4:3.
"""

import pytest

from tubely.core.media.errors import MalformedOutput
from tubely.core.media.geometry import classify_aspect, classify_geometry
from tubely.core.media.models import AspectClass, Geometry


class TestLandscapeBand:
    """Ratios within 0.05 of 16/9."""

    @pytest.mark.parametrize("width,height", [
        (1920, 1080),
        (1280, 720),
        (3840, 2160),
        (854, 480),    # 1.779
        (1800, 1000),  # 1.8, inside the band
    ])
    def test_common_landscape_sizes(self, width, height):
        assert classify_aspect(width, height) is AspectClass.LANDSCAPE

    def test_band_edges(self):
        """Just inside the tolerance is landscape, just outside isn't."""
        target = 16 / 9
        assert classify_aspect(int((target + 0.049) * 10000), 10000) is AspectClass.LANDSCAPE
        assert classify_aspect(int((target - 0.049) * 10000), 10000) is AspectClass.LANDSCAPE
        assert classify_aspect(int((target + 0.051) * 10000) + 1, 10000) is AspectClass.OTHER
        assert classify_aspect(int((target - 0.051) * 10000), 10000) is AspectClass.OTHER


class TestPortraitBand:
    """Ratios within 0.05 of 9/16."""

    @pytest.mark.parametrize("width,height", [
        (1080, 1920),
        (720, 1280),
        (2160, 3840),
        (600, 1000),  # 0.6, inside the band
    ])
    def test_common_portrait_sizes(self, width, height):
        assert classify_aspect(width, height) is AspectClass.PORTRAIT

    def test_band_edges(self):
        target = 9 / 16
        assert classify_aspect(int((target + 0.049) * 10000), 10000) is AspectClass.PORTRAIT
        assert classify_aspect(int((target - 0.051) * 10000), 10000) is AspectClass.OTHER


class TestOtherRatios:
    """Anything outside the two bands."""

    @pytest.mark.parametrize("width,height", [
        (640, 480),    # 4:3
        (1080, 1080),  # square
        (2560, 1080),  # ultra-wide
        (480, 640),    # 3:4
        (1, 1000),
    ])
    def test_falls_into_other(self, width, height):
        assert classify_aspect(width, height) is AspectClass.OTHER

    def test_four_by_three_is_not_landscape(self):
        """4:3 is about 1.33 - far from 1.78, so OTHER rather than LANDSCAPE."""
        assert classify_aspect(4, 3) is AspectClass.OTHER


class TestInvalidDimensions:

    @pytest.mark.parametrize("width,height", [(0, 1080), (1920, 0), (-1920, 1080)])
    def test_non_positive_dimensions_are_malformed(self, width, height):
        with pytest.raises(MalformedOutput):
            classify_aspect(width, height)


def test_classify_geometry_uses_width_over_height():
    assert classify_geometry(Geometry(width=1080, height=1920)) is AspectClass.PORTRAIT
    assert Geometry(width=1920, height=1080).ratio == pytest.approx(16 / 9)
