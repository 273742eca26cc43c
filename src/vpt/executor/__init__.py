"""Execution layer for VPT.

- filters / watermark / command: compile an EditSpec into encoder arguments
- runner: run a compiled command with progress and cancellation
- interface: encoder resolution
- ffmpeg_utils: output path planning and file cleanup
"""

from vpt.executor import ffmpeg_utils
from vpt.executor.command import build_command, format_command
from vpt.executor.exceptions import ToolNotFoundError
from vpt.executor.filters import (
    build_audio_filters,
    build_video_filters,
    tempo_filter,
    tempo_stages,
)
from vpt.executor.interface import find_tool, require_tool
from vpt.executor.runner import ProcessRunner
from vpt.executor.types import (
    CompiledCommand,
    ComplexGraph,
    RunResult,
    RunState,
    SimpleChain,
)
from vpt.executor.watermark import (
    build_watermark_graph,
    rasterize_text_watermark,
    resolved_watermark,
)

__all__ = [
    # Compiler
    "build_audio_filters",
    "build_command",
    "build_video_filters",
    "build_watermark_graph",
    "format_command",
    "tempo_filter",
    "tempo_stages",
    # Types
    "CompiledCommand",
    "ComplexGraph",
    "RunResult",
    "RunState",
    "SimpleChain",
    # Runner
    "ProcessRunner",
    # Tools
    "ToolNotFoundError",
    "find_tool",
    "require_tool",
    # Watermark
    "rasterize_text_watermark",
    "resolved_watermark",
    # Utilities
    "ffmpeg_utils",
]
