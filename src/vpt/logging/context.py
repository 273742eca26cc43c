"""Job context for structured logging.

Provides context propagation for encode threads using contextvars, so every
record emitted while a job runs (including encoder diagnostic lines) carries
the job id and input path.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_job_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "job_id", default=None
)
_input_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "input_path", default=None
)


def set_job_context(job_id: str, input_path: Path | str | None = None) -> None:
    """Set the current job context.

    Args:
        job_id: Job identifier.
        input_path: Media file being processed, or None.
    """
    _job_id.set(job_id)
    _input_path.set(str(input_path) if input_path is not None else None)


def clear_job_context() -> None:
    """Clear the current job context."""
    _job_id.set(None)
    _input_path.set(None)


@contextmanager
def job_context(
    job_id: str,
    input_path: Path | str | None = None,
) -> Generator[None, None, None]:
    """Context manager for job processing context.

    Sets job context on entry and restores the previous one on exit.

    Example:
        with job_context("3f2a9c1e", "/videos/clip.mp4"):
            logger.info("Encoding")  # Automatically includes context
    """
    old_job_id = _job_id.get()
    old_input_path = _input_path.get()
    try:
        set_job_context(job_id, input_path)
        yield
    finally:
        _job_id.set(old_job_id)
        _input_path.set(old_input_path)


def get_job_context() -> tuple[str | None, str | None]:
    """Get current job context as (job_id, input_path)."""
    return _job_id.get(), _input_path.get()


class JobContextFilter(logging.Filter):
    """Logging filter that injects job context into log records.

    Adds job_id and input_path attributes, plus a compact job_tag such as
    "[3f2a9c1e:clip.mp4] " for the text format.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Inject job context into log record. Never filters anything out."""
        job_id, input_path = get_job_context()

        record.job_id = job_id
        record.input_path = input_path

        if job_id:
            if input_path:
                record.job_tag = f"[{job_id[:8]}:{Path(input_path).name}] "
            else:
                record.job_tag = f"[{job_id[:8]}] "
        else:
            record.job_tag = ""

        return True
