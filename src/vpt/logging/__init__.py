"""Structured logging module for VPT.

Provides configurable logging with JSON format support and file rotation,
plus per-job context injection.
"""

from vpt.logging.config import configure_logging
from vpt.logging.context import (
    JobContextFilter,
    clear_job_context,
    get_job_context,
    job_context,
    set_job_context,
)
from vpt.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "JobContextFilter",
    "clear_job_context",
    "configure_logging",
    "get_job_context",
    "job_context",
    "set_job_context",
]
