"""Encoder discovery and version probing."""

from __future__ import annotations

import logging
import re
import subprocess  # nosec B404 - only for TimeoutExpired
from pathlib import Path

from vpt.core.subprocess_utils import run_command

logger = logging.getLogger(__name__)

# Timeout for version detection commands (seconds)
DETECTION_TIMEOUT = 10

_VERSION_LINE = re.compile(r"^ffmpeg version (\S+)")


def parse_version_string(version_str: str) -> tuple[int, ...] | None:
    """Parse a version string into a comparable tuple.

    Handles "6.1.1" -> (6, 1, 1), "n6.1" -> (6, 1) and suffixed builds such as
    "7.0-full_build-www.gyan.dev" -> (7, 0).

    Returns:
        Tuple of version components, or None if parsing fails.
    """
    if not version_str:
        return None

    version_str = version_str.lstrip("nv")
    match = re.match(r"(\d+(?:\.\d+)*)", version_str)
    if not match:
        return None
    return tuple(int(p) for p in match.group(1).split("."))


def get_ffmpeg_version(ffmpeg_path: Path) -> tuple[str | None, str | None]:
    """Run "ffmpeg -version" and extract the version.

    Args:
        ffmpeg_path: Path to the ffmpeg executable.

    Returns:
        Tuple of (version, first_output_line). Both are None if the probe
        failed.
    """
    try:
        stdout, stderr, rc = run_command(
            [ffmpeg_path, "-hide_banner", "-version"], timeout=DETECTION_TIMEOUT
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning("Could not run %s -version: %s", ffmpeg_path, e)
        return None, None

    if rc != 0:
        logger.warning(
            "%s -version exited with %d: %s", ffmpeg_path, rc, stderr.strip()[:200]
        )
        return None, None

    first_line = stdout.strip().splitlines()[0] if stdout.strip() else ""
    match = _VERSION_LINE.match(first_line)
    return (match.group(1) if match else None), first_line or None
