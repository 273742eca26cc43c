"""Encoder availability utilities."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from vpt.config.models import VPTConfig
from vpt.executor.exceptions import ToolNotFoundError

logger = logging.getLogger(__name__)


def find_tool(name: str, configured_path: Path | None = None) -> Path | None:
    """Find a tool executable.

    Args:
        name: Tool name (e.g., "ffmpeg").
        configured_path: Optional configured path override.

    Returns:
        Path to tool executable, or None if not found.
    """
    if configured_path:
        if configured_path.is_file():
            return configured_path
        logger.warning(
            "Configured path for %s is not a file: %s", name, configured_path
        )

    which_result = shutil.which(name)
    if which_result:
        return Path(which_result)

    return None


def require_tool(tool_name: str = "ffmpeg", config: VPTConfig | None = None) -> Path:
    """Get path to a required tool, raising if unavailable.

    Args:
        tool_name: Name of the tool.
        config: Configuration carrying an optional explicit path.

    Returns:
        Path to the tool executable.

    Raises:
        ToolNotFoundError: If the tool is not available.
    """
    configured = config.get_tool_path(tool_name) if config else None
    path = find_tool(tool_name, configured)
    if path is None:
        raise ToolNotFoundError(tool_name)
    return path
