"""FFmpeg progress parsing utilities.

This module parses FFmpeg's stderr diagnostics into progress events. A
stderr progress line looks like:

    frame= 1234 fps= 30 q=28.0 size=    5120kB time=00:01:23.45 bitrate=... speed=2.0x
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import timedelta

from vpt.core.formatting import format_decimal, format_duration, format_eta

# Regex patterns for FFmpeg stderr output
DURATION_PATTERN = re.compile(r"Duration:\s*(\d+):(\d+):(\d+(?:\.\d+)?)")
TIME_PATTERN = re.compile(r"time=\s*(\d+):(\d+):(\d+(?:\.\d+)?)")
SPEED_PATTERN = re.compile(r"speed=\s*(\d+(?:\.\d+)?)x")
SIZE_PATTERN = re.compile(
    r"size=\s*(\d+)\s*(KiB|MiB|GiB|kB|mB|MB|gB|GB|B)\b", re.IGNORECASE
)

# Progress while the encoder is still running never reaches 100
MAX_RUNNING_PERCENT = 99


@dataclass(frozen=True)
class ProgressEvent:
    """A progress update for one encode.

    percent stays within 0-99 while the encoder runs. 100 is reported only
    after a confirmed successful exit.
    """

    percent: int
    message: str
    speed: float | None = None
    eta: timedelta | None = None
    size: str | None = None


def _hms_to_seconds(match: re.Match[str]) -> float:
    hours, minutes, seconds = match.groups()
    return int(hours) * 3600 + int(minutes) * 60 + float(seconds)


def parse_duration(line: str) -> float | None:
    """Parse the source duration from an FFmpeg "Duration:" line.

    Returns:
        Duration in seconds, or None if the line has no duration.
    """
    match = DURATION_PATTERN.search(line)
    return _hms_to_seconds(match) if match else None


def parse_time(line: str) -> float | None:
    """Parse the current output position from a "time=" token, in seconds."""
    match = TIME_PATTERN.search(line)
    return _hms_to_seconds(match) if match else None


def parse_speed(line: str) -> float | None:
    """Parse the encode speed multiplier from a "speed=" token."""
    match = SPEED_PATTERN.search(line)
    return float(match.group(1)) if match else None


def parse_size(line: str) -> str | None:
    """Parse the output size token (e.g., "5120kB") from a progress line."""
    match = SIZE_PATTERN.search(line)
    return f"{match.group(1)}{match.group(2)}" if match else None


class ProgressTracker:
    """Turns FFmpeg stderr lines into monotonic progress events.

    The total duration is discovered from the first "Duration:" line unless
    known_duration is given. Trim bounds always override it: the effective
    total is (trim_end or total) minus (trim_start or 0), divided by the
    speed multiplier since "time=" counts output time.
    """

    def __init__(
        self,
        known_duration: float | None = None,
        trim_start: float | None = None,
        trim_end: float | None = None,
        speed: float = 1.0,
    ) -> None:
        self._known_duration = known_duration
        self._speed = speed if speed > 0 else 1.0
        self._trim_start = trim_start
        self._trim_end = trim_end
        self._discovered: float | None = known_duration
        self._percent = 0

    @property
    def percent(self) -> int:
        """Highest percent reported so far."""
        return self._percent

    @property
    def total_seconds(self) -> float | None:
        """Effective total duration of the output, or None while unknown."""
        end = self._trim_end if self._trim_end is not None else self._discovered
        if end is None:
            return None
        total = (end - (self._trim_start or 0.0)) / self._speed
        return total if total > 0 else None

    def feed(self, line: str) -> ProgressEvent | None:
        """Consume one stderr line.

        Args:
            line: A line from FFmpeg stderr.

        Returns:
            A ProgressEvent when the line carried a usable "time=" token and
            the total duration is known, otherwise None.
        """
        if self._discovered is None:
            duration = parse_duration(line)
            if duration is not None:
                self._discovered = duration

        current = parse_time(line)
        if current is None:
            return None

        total = self.total_seconds
        if total is None:
            return None

        speed = parse_speed(line)
        size = parse_size(line)

        pct = min(MAX_RUNNING_PERCENT, int(current / total * 100))
        self._percent = max(self._percent, pct)

        eta: timedelta | None = None
        if speed is not None and speed > 0.01 and 0 < current < total:
            eta = timedelta(seconds=(total - current) / speed)

        message = (
            f"Processing... {format_duration(current)} / {format_duration(total)}"
        )
        if speed is not None:
            message += f" ({format_decimal(speed, 3)}x)"
        if eta is not None:
            message += f" - ETA: {format_eta(eta)}"

        return ProgressEvent(
            percent=self._percent,
            message=message,
            speed=speed,
            eta=eta,
            size=size,
        )
