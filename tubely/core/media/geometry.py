"""
Aspect ratio classification.

A fixed two-band heuristic: a video is landscape if its ratio is within
0.05 of 16:9, portrait if within 0.05 of 9:16, and "other" otherwise.
4:3, square and ultra-wide videos all fall into OTHER, alongside anything
else outside the two bands.
"""

from .errors import MalformedOutput
from .models import AspectClass, Geometry

LANDSCAPE_RATIO = 16 / 9
PORTRAIT_RATIO = 9 / 16
RATIO_TOLERANCE = 0.05


def classify_aspect(width: int, height: int) -> AspectClass:
    """Classify width/height into an AspectClass."""
    if width <= 0 or height <= 0:
        raise MalformedOutput(f"Invalid dimensions {width}x{height}")

    ratio = width / height

    if abs(ratio - LANDSCAPE_RATIO) < RATIO_TOLERANCE:
        return AspectClass.LANDSCAPE
    if abs(ratio - PORTRAIT_RATIO) < RATIO_TOLERANCE:
        return AspectClass.PORTRAIT
    return AspectClass.OTHER


def classify_geometry(geometry: Geometry) -> AspectClass:
    return classify_aspect(geometry.width, geometry.height)
