"""Transcode orchestration.

TranscodeOrchestrator drives one encode end to end: it resolves the output
path, checks preconditions, compiles the EditSpec, runs the encoder and
cleans up after cancellation. It is shared by single-file renders and the
batch queue.
"""

from __future__ import annotations

import logging
import tempfile
import threading
import uuid
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from vpt.config.models import VPTConfig
from vpt.edit.exceptions import EditSpecError
from vpt.edit.models import EditSpec
from vpt.executor.command import build_command
from vpt.executor.exceptions import ToolNotFoundError
from vpt.executor.ffmpeg_utils import (
    cleanup_temp_file,
    planned_output_path,
    unique_output_path,
)
from vpt.executor.interface import require_tool
from vpt.executor.runner import LogSink, ProcessRunner
from vpt.executor.types import CompiledCommand, RunResult, RunState
from vpt.executor.watermark import resolved_watermark
from vpt.jobs.cancellation import CancellationToken
from vpt.logging import job_context
from vpt.tools.ffmpeg_progress import ProgressEvent, ProgressTracker

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]


@dataclass(frozen=True)
class JobResult:
    """Outcome of one orchestrated encode."""

    success: bool
    """True only if the encoder exited 0 and wrote the output."""

    state: RunState | None = None
    """Runner state, or None when a precondition failed before spawning."""

    output_path: Path | None = None
    """Resolved output path (may not exist on failure)."""

    error_message: str | None = None
    """Reason for failure or cancellation."""

    @property
    def cancelled(self) -> bool:
        return self.state is RunState.CANCELLED


class TranscodeOrchestrator:
    """Runs EditSpecs through the compiler and the process runner.

    One orchestrator runs at most one encoder process at a time through
    submit(); run_job() and execute() run in the calling thread.

    Example:
        orchestrator = TranscodeOrchestrator(get_config())
        ok = orchestrator.run_job(EditSpec(input_path=Path("clip.mp4"), mute=True))
    """

    def __init__(
        self,
        config: VPTConfig | None = None,
        tool_path: Path | None = None,
        runner_factory: Callable[..., ProcessRunner] = ProcessRunner,
        log_sink: LogSink | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            config: Configuration (defaults to VPTConfig()).
            tool_path: Explicit encoder path; otherwise resolved from config
                and PATH on first use.
            runner_factory: Creates the runner for each encode.
            log_sink: Receives encoder stderr lines (default: vpt.encoder
                logger at DEBUG).
            clock: Source of the timestamp used in generated output names.
        """
        self._config = config or VPTConfig()
        self._tool_path = tool_path
        self._runner_factory = runner_factory
        self._log_sink = log_sink
        self._clock = clock
        self._executor: ThreadPoolExecutor | None = None
        self._executor_lock = threading.Lock()

    @property
    def config(self) -> VPTConfig:
        return self._config

    @property
    def tool_path(self) -> Path:
        """Get path to ffmpeg, verifying availability.

        Raises:
            ToolNotFoundError: If ffmpeg is not available.
        """
        if self._tool_path is None:
            self._tool_path = require_tool("ffmpeg", self._config)
        elif not self._tool_path.is_file():
            raise ToolNotFoundError(
                "ffmpeg", f"Encoder not found at {self._tool_path}"
            )
        return self._tool_path

    def prepare(self, spec: EditSpec) -> EditSpec:
        """Resolve the output path.

        An explicit output_path is kept as given. Otherwise the output goes
        next to the input with a timestamp suffix, plus "_1", "_2", ... if
        that name is already taken.

        Returns:
            A copy of spec with output_path set.
        """
        if spec.output_path is not None:
            return spec
        planned = planned_output_path(
            spec.input_path, spec.output_extension, now=self._clock()
        )
        return spec.model_copy(update={"output_path": unique_output_path(planned)})

    def plan(self, spec: EditSpec) -> CompiledCommand:
        """Compile without running (dry run).

        Text watermarks are not rasterized; the command refers to a
        placeholder PNG path instead.

        Raises:
            EditSpecError: If the edit spec cannot be compiled.
        """
        prepared = self.prepare(spec)
        watermark = prepared.watermark
        if watermark is not None and watermark.is_text:
            temp_dir = self._config.jobs.temp_directory or Path(tempfile.gettempdir())
            placeholder = watermark.model_copy(
                update={"image_path": temp_dir / "vpt_textwm_preview.png", "text": None}
            )
            prepared = prepared.model_copy(update={"watermark": placeholder})
        return build_command(prepared, self._config.encoding)

    def run_job(
        self,
        spec: EditSpec,
        on_progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> bool:
        """Run one encode and report success.

        Returns:
            True only on confirmed success. Expected failures never raise.
        """
        return self.execute(spec, on_progress, cancel).success

    def execute(
        self,
        spec: EditSpec,
        on_progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
        job_id: str | None = None,
    ) -> JobResult:
        """Run one encode and return its detailed result.

        Args:
            spec: Edit to perform.
            on_progress: Receives progress events, ending with a final
                event: (100, "done") on success, otherwise the last percent
                with "error" or "cancelled".
            cancel: Cancellation token polled while the encoder runs.
            job_id: Id for log context (generated when omitted).

        Returns:
            JobResult. Unexpected exceptions are logged and converted into a
            failed result.
        """
        job_id = job_id or uuid.uuid4().hex
        with job_context(job_id, spec.input_path):
            try:
                return self._execute(spec, on_progress, cancel)
            except Exception as e:
                logger.exception("Unexpected error processing %s", spec.input_path)
                _emit(on_progress, ProgressEvent(percent=0, message="error"))
                return JobResult(
                    success=False,
                    output_path=spec.output_path,
                    error_message=f"Unexpected error: {e}",
                )

    def submit(
        self,
        spec: EditSpec,
        on_progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> Future[bool]:
        """Run an encode on the orchestrator's worker thread.

        Submitted jobs run one at a time in submission order.
        """
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="vpt-encode"
                )
            return self._executor.submit(self.run_job, spec, on_progress, cancel)

    def shutdown(self, wait: bool = True) -> None:
        """Stop the worker thread used by submit()."""
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)

    def __enter__(self) -> TranscodeOrchestrator:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def _fail(
        self,
        on_progress: ProgressCallback | None,
        message: str,
        output_path: Path | None = None,
    ) -> JobResult:
        logger.error("%s", message)
        _emit(on_progress, ProgressEvent(percent=0, message="error"))
        return JobResult(success=False, output_path=output_path, error_message=message)

    def _check_preconditions(self, spec: EditSpec) -> str | None:
        if not spec.input_path.is_file():
            return f"Input file not found: {spec.input_path}"

        watermark = spec.watermark
        if watermark is not None and watermark.image_path is not None:
            if not watermark.image_path.is_file():
                return f"Watermark image not found: {watermark.image_path}"

        try:
            self.tool_path
        except ToolNotFoundError as e:
            return str(e)

        return None

    def _execute(
        self,
        spec: EditSpec,
        on_progress: ProgressCallback | None,
        cancel: CancellationToken | None,
    ) -> JobResult:
        problem = self._check_preconditions(spec)
        if problem:
            return self._fail(on_progress, problem, spec.output_path)

        prepared = self.prepare(spec)
        output_path = prepared.output_path
        assert output_path is not None

        logger.info(
            "Rendering %s -> %s",
            prepared.input_path.name,
            output_path.name,
            extra={"output_path": str(output_path)},
        )

        try:
            with resolved_watermark(
                prepared, self._config.jobs.temp_directory
            ) as ready:
                command = build_command(ready, self._config.encoding)
                _emit(on_progress, ProgressEvent(percent=0, message="Starting..."))
                result = self._run(ready, command, on_progress, cancel)
        except EditSpecError as e:
            return self._fail(on_progress, f"Invalid edit: {e}", output_path)
        except OSError as e:
            return self._fail(
                on_progress, f"Cannot prepare watermark: {e}", output_path
            )

        if result.state is RunState.CANCELLED:
            logger.info("Render cancelled: %s", output_path.name)
            if output_path.exists():
                cleanup_temp_file(output_path)
            _emit(
                on_progress,
                ProgressEvent(percent=result.last_percent, message="cancelled"),
            )
            return JobResult(
                success=False,
                state=result.state,
                output_path=output_path,
                error_message="Cancelled",
            )

        if result.success:
            logger.info("Render complete: %s", output_path)
            _emit(on_progress, ProgressEvent(percent=100, message="done"))
            return JobResult(success=True, state=result.state, output_path=output_path)

        logger.error("Render failed: %s", result.exit_reason)
        _emit(on_progress, ProgressEvent(percent=result.last_percent, message="error"))
        return JobResult(
            success=False,
            state=result.state,
            output_path=output_path,
            error_message=result.exit_reason,
        )

    def _run(
        self,
        spec: EditSpec,
        command: CompiledCommand,
        on_progress: ProgressCallback | None,
        cancel: CancellationToken | None,
    ) -> RunResult:
        """Create a runner for this encode and run it."""
        tracker = ProgressTracker(
            known_duration=spec.total_duration,
            trim_start=spec.trim_start.total_seconds() if spec.trim_start else None,
            trim_end=spec.trim_end.total_seconds() if spec.trim_end else None,
            speed=spec.speed if spec.has_speed_change else 1.0,
        )
        jobs = self._config.jobs
        runner = self._runner_factory(
            self.tool_path,
            poll_interval=jobs.poll_interval,
            timeout=jobs.timeout_seconds or None,
            log_sink=self._log_sink,
        )
        return runner.run(
            command,
            on_progress=on_progress,
            is_cancelled=cancel.is_cancelled if cancel is not None else None,
            tracker=tracker,
        )


def _emit(on_progress: ProgressCallback | None, event: ProgressEvent) -> None:
    if on_progress is None:
        return
    try:
        on_progress(event)
    except Exception as e:
        logger.warning("Progress callback error: %s", e)
