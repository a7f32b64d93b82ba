"""
Video processing infrastructure.

Wraps FFprobe/FFmpeg behind the MediaTool protocol:
- Geometry probing for aspect classification
- Fast-start remuxing (stream copy, moov atom first)
"""

from .processor import (
    FFmpegMediaTool,
    MockMediaTool,
    create_media_tool,
    parse_probe_output,
)

__all__ = [
    "FFmpegMediaTool",
    "MockMediaTool",
    "create_media_tool",
    "parse_probe_output",
]
