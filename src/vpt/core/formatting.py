"""Formatting utilities.

This module provides pure functions for formatting numbers and durations for
encoder arguments and for display.
"""

from datetime import timedelta


def format_decimal(value: float, max_decimals: int, min_decimals: int = 0) -> str:
    """Format a number in fixed-point notation without trailing zeros.

    Always uses "." as the decimal separator regardless of locale.

    Args:
        value: Number to format.
        max_decimals: Maximum number of fractional digits.
        min_decimals: Minimum number of fractional digits to keep.

    Returns:
        Formatted string (e.g., 0.5 -> "0.5", 2.0 -> "2", 1.0 with
        min_decimals=1 -> "1.0").
    """
    text = f"{value:.{max_decimals}f}"
    if "." in text:
        whole, frac = text.split(".")
        frac = frac.rstrip("0").ljust(min_decimals, "0")
        text = f"{whole}.{frac}" if frac else whole

    # Avoid "-0" after rounding tiny negatives
    if text.startswith("-") and float(text) == 0:
        text = text[1:]
    return text


def format_timestamp(seconds: float) -> str:
    """Format seconds as an encoder timestamp.

    Args:
        seconds: Non-negative offset in seconds.

    Returns:
        Timestamp formatted as HH:MM:SS.mmm (e.g., "00:01:05.250").
    """
    total_ms = max(0, round(seconds * 1000))
    hours, remainder = divmod(total_ms, 3_600_000)
    minutes, remainder = divmod(remainder, 60_000)
    secs, millis = divmod(remainder, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}.{millis:03d}"


def format_duration(seconds: float) -> str:
    """Format a duration for display.

    Args:
        seconds: Duration in seconds.

    Returns:
        "H:MM:SS" when at least one hour, otherwise "M:SS". Zero and
        negative durations return "0:00".
    """
    if seconds <= 0:
        return "0:00"

    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_eta(eta: timedelta) -> str:
    """Format a remaining-time estimate as HH:MM:SS."""
    total = max(0, int(eta.total_seconds()))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: File size in bytes.

    Returns:
        Formatted string (e.g., "4.2 GB", "128.0 MB", "1.5 KB").
    """
    if size_bytes >= 1024**3:
        return f"{size_bytes / (1024**3):.1f} GB"
    elif size_bytes >= 1024**2:
        return f"{size_bytes / (1024**2):.1f} MB"
    elif size_bytes >= 1024:
        return f"{size_bytes / 1024:.1f} KB"
    else:
        return f"{size_bytes} B"
