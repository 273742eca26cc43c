"""Core utilities package.

Pure helpers shared across the codebase: number and duration formatting and
a subprocess wrapper for short external tool calls.
"""

from vpt.core.formatting import (
    format_decimal,
    format_duration,
    format_eta,
    format_file_size,
    format_timestamp,
)
from vpt.core.subprocess_utils import run_command

__all__ = [
    "format_decimal",
    "format_duration",
    "format_eta",
    "format_file_size",
    "format_timestamp",
    "run_command",
]
