"""Types produced by the command compiler and the process runner."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


@dataclass(frozen=True)
class SimpleChain:
    """Encoder command using plain -vf/-af filter chains.

    args excludes the encoder executable itself.
    """

    args: tuple[str, ...]
    output_path: Path
    video_filters: tuple[str, ...] = ()
    audio_filters: tuple[str, ...] = ()


@dataclass(frozen=True)
class ComplexGraph:
    """Encoder command using -filter_complex with a watermark as second input.

    args excludes the encoder executable itself.
    """

    args: tuple[str, ...]
    output_path: Path
    filter_graph: str
    watermark_path: Path
    audio_filters: tuple[str, ...] = ()


CompiledCommand = SimpleChain | ComplexGraph


class RunState(str, Enum):
    """Lifecycle of a single encoder run."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.SUCCEEDED, RunState.FAILED, RunState.CANCELLED)


@dataclass(frozen=True)
class RunResult:
    """Terminal outcome of an encoder run."""

    state: RunState
    """SUCCEEDED, FAILED or CANCELLED."""

    return_code: int | None = None
    """Process exit code; None when the process never started."""

    exit_reason: str = ""
    """Human-readable reason for a non-successful outcome."""

    stderr_tail: tuple[str, ...] = ()
    """Last diagnostic lines, for error reporting."""

    last_percent: int = 0
    """Highest progress percent reached while running."""

    @property
    def success(self) -> bool:
        return self.state is RunState.SUCCEEDED
