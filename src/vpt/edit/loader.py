"""Batch job file loading.

A job file is a YAML mapping with a "jobs" list; each entry holds EditSpec
fields:

    jobs:
      - input_path: clips/intro.mp4
        scale: 720p
        mute: true
      - input_path: clips/outro.mov
        output_extension: mkv
        speed: 2.0

Relative paths are resolved against the job file's directory.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from vpt.edit.exceptions import JobFileError
from vpt.edit.models import EditSpec

logger = logging.getLogger(__name__)


def format_validation_error(error: ValidationError, prefix: str = "") -> str:
    """Format a Pydantic validation error as a one-line message."""
    errors = error.errors()
    if not errors:
        return f"{prefix}{error}"
    first = errors[0]
    loc = ".".join(str(x) for x in first.get("loc", ()))
    msg = first.get("msg", str(error))
    extra = f" (+{len(errors) - 1} more)" if len(errors) > 1 else ""
    if loc:
        return f"{prefix}{loc}: {msg}{extra}"
    return f"{prefix}{msg}{extra}"


def _resolve_paths(entry: dict[str, Any], base_dir: Path) -> dict[str, Any]:
    resolved = dict(entry)
    for key in ("input_path", "output_path"):
        value = resolved.get(key)
        if isinstance(value, str) and value:
            path = Path(value).expanduser()
            resolved[key] = path if path.is_absolute() else base_dir / path

    watermark = resolved.get("watermark")
    if isinstance(watermark, dict):
        image = watermark.get("image_path")
        if isinstance(image, str) and image:
            path = Path(image).expanduser()
            resolved["watermark"] = {
                **watermark,
                "image_path": path if path.is_absolute() else base_dir / path,
            }
    return resolved


def parse_job_data(data: Any, base_dir: Path) -> list[EditSpec]:
    """Validate parsed job file content.

    Args:
        data: Parsed YAML document.
        base_dir: Directory relative paths are resolved against.

    Returns:
        One EditSpec per job, in file order.

    Raises:
        JobFileError: If the structure or any job is invalid.
    """
    if not isinstance(data, dict):
        raise JobFileError("Job file must be a YAML mapping with a 'jobs' list")

    jobs = data.get("jobs")
    if not isinstance(jobs, list) or not jobs:
        raise JobFileError("Job file must contain a non-empty 'jobs' list")

    specs: list[EditSpec] = []
    for index, entry in enumerate(jobs):
        if not isinstance(entry, dict):
            raise JobFileError(f"jobs[{index}] must be a mapping")
        try:
            specs.append(EditSpec.model_validate(_resolve_paths(entry, base_dir)))
        except ValidationError as e:
            raise JobFileError(
                format_validation_error(e, prefix=f"jobs[{index}].")
            ) from e
    return specs


def load_job_file(path: Path) -> list[EditSpec]:
    """Load and validate a YAML job file.

    Raises:
        JobFileError: If the file cannot be read, parsed or validated.
    """
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise JobFileError(f"Cannot read job file {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise JobFileError(f"Job file is not valid UTF-8: {e}") from e
    except yaml.YAMLError as e:
        raise JobFileError(f"Invalid YAML syntax: {e}") from e

    specs = parse_job_data(data, path.resolve().parent)
    logger.debug("Loaded %d jobs from %s", len(specs), path)
    return specs
