"""FFmpeg executor utilities.

Shared file helpers for encodes: output path planning, output validation
and temp/partial file cleanup.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

# Timestamp appended to generated output names
OUTPUT_TIMESTAMP_FORMAT = "%Y-%m-%d_%H.%M.%S"


def planned_output_path(
    input_path: Path,
    output_extension: str = "",
    now: datetime | None = None,
) -> Path:
    """Compute the default output path for an input file.

    Same directory and base name, suffixed with a local timestamp. The
    extension is kept unless output_extension overrides it.

    Args:
        input_path: Source media file.
        output_extension: Extension override without the dot ("" = keep).
        now: Timestamp to use (defaults to the current local time).

    Returns:
        e.g. /videos/clip_2024-05-01_14.03.59.mp4
    """
    stamp = (now or datetime.now()).strftime(OUTPUT_TIMESTAMP_FORMAT)
    ext = f".{output_extension}" if output_extension else input_path.suffix
    return input_path.with_name(f"{input_path.stem}_{stamp}{ext}")


def unique_output_path(path: Path) -> Path:
    """Return path, or the first free "<stem>_N<ext>" variant if it exists."""
    if not path.exists():
        return path
    counter = 1
    while True:
        candidate = path.with_name(f"{path.stem}_{counter}{path.suffix}")
        if not candidate.exists():
            return candidate
        counter += 1


def validate_output(output_path: Path) -> tuple[bool, str | None]:
    """Check that the encoder produced an output file.

    Returns:
        Tuple of (is_valid, error_message). error_message is None if valid.
    """
    if not output_path.exists():
        return False, f"Output file does not exist: {output_path}"

    try:
        output_size = output_path.stat().st_size
    except OSError as e:
        return False, f"Could not stat output file: {e}"

    if output_size == 0:
        logger.warning("Output file is empty: %s", output_path)

    return True, None


def cleanup_temp_file(path: Path) -> None:
    """Remove a temporary or partial file, logging failures.

    Args:
        path: Path to file to remove. Missing files are ignored.
    """
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove file %s: %s", path, e)
