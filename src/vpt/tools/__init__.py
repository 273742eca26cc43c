"""External tool probing and FFmpeg output parsing."""

from vpt.tools.detection import get_ffmpeg_version, parse_version_string
from vpt.tools.ffmpeg_progress import (
    ProgressEvent,
    ProgressTracker,
    parse_duration,
    parse_size,
    parse_speed,
    parse_time,
)

__all__ = [
    "ProgressEvent",
    "ProgressTracker",
    "get_ffmpeg_version",
    "parse_duration",
    "parse_size",
    "parse_speed",
    "parse_time",
    "parse_version_string",
]
