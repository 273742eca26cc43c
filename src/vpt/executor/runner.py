"""Encoder process runner.

ProcessRunner spawns one FFmpeg process, reads its stderr on a background
thread, converts progress lines to ProgressEvents and polls a cancellation
predicate until the process exits.
"""

from __future__ import annotations

import logging
import queue
import subprocess  # nosec B404 - subprocess is required for FFmpeg invocation
import threading
import time
from collections import deque
from collections.abc import Callable
from pathlib import Path

from vpt.executor.ffmpeg_utils import validate_output
from vpt.executor.types import CompiledCommand, RunResult, RunState
from vpt.tools.ffmpeg_progress import ProgressEvent, ProgressTracker

logger = logging.getLogger(__name__)

# Encoder diagnostic lines go here at DEBUG unless a log sink is given
encoder_logger = logging.getLogger("vpt.encoder")

ProgressCallback = Callable[[ProgressEvent], None]
CancelPredicate = Callable[[], bool]
LogSink = Callable[[str], None]


class ProcessRunner:
    """Runs a compiled encoder command exactly once.

    State machine: NOT_STARTED -> RUNNING -> SUCCEEDED | FAILED | CANCELLED.
    A second call to run() raises RuntimeError.

    Example:
        runner = ProcessRunner(Path("/usr/bin/ffmpeg"))
        result = runner.run(command, on_progress=print, is_cancelled=token.is_set)
    """

    STDERR_DRAIN_TIMEOUT: float = 5.0  # Timeout for draining stderr after exit
    READER_JOIN_TIMEOUT: float = 2.0  # Timeout for the reader after a kill
    STDERR_TAIL_LINES: int = 20

    def __init__(
        self,
        tool_path: Path,
        poll_interval: float = 0.1,
        timeout: float | None = None,
        log_sink: LogSink | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            tool_path: Path to the ffmpeg executable.
            poll_interval: Seconds between cancellation checks.
            timeout: Maximum run time in seconds. None = no limit.
            log_sink: Receives every stderr line. Defaults to the
                "vpt.encoder" logger at DEBUG.
        """
        self._tool_path = tool_path
        self._poll_interval = poll_interval
        self._timeout = timeout
        self._log_sink = log_sink
        self._state = RunState.NOT_STARTED
        self._lock = threading.Lock()

    @property
    def state(self) -> RunState:
        """Current run state."""
        return self._state

    def _log_line(self, line: str) -> None:
        if self._log_sink is not None:
            try:
                self._log_sink(line)
            except Exception as e:
                logger.warning("Log sink error: %s", e)
        else:
            encoder_logger.debug("%s", line)

    def run(
        self,
        command: CompiledCommand,
        on_progress: ProgressCallback | None = None,
        is_cancelled: CancelPredicate | None = None,
        tracker: ProgressTracker | None = None,
    ) -> RunResult:
        """Run the command to completion, cancellation or timeout.

        Args:
            command: Compiled encoder command.
            on_progress: Receives progress events (percent 0-99).
            is_cancelled: Polled every poll_interval; True kills the process.
            tracker: Progress tracker to use (defaults to discovering the
                duration from stderr).

        Returns:
            RunResult describing the terminal state. Spawn failures are
            returned as FAILED, never raised.

        Raises:
            RuntimeError: If this runner has already been used.
        """
        with self._lock:
            if self._state is not RunState.NOT_STARTED:
                raise RuntimeError(
                    f"ProcessRunner.run() called twice (state={self._state.value})"
                )
            self._state = RunState.RUNNING

        try:
            result = self._run(command, on_progress, is_cancelled, tracker)
        except Exception:
            self._state = RunState.FAILED
            raise
        self._state = result.state
        return result

    def _run(
        self,
        command: CompiledCommand,
        on_progress: ProgressCallback | None,
        is_cancelled: CancelPredicate | None,
        tracker: ProgressTracker | None,
    ) -> RunResult:
        tracker = tracker or ProgressTracker()
        cmd = [str(self._tool_path), *command.args]
        tail: deque[str] = deque(maxlen=self.STDERR_TAIL_LINES)

        logger.info("Starting encoder: %s", command.output_path.name)
        logger.debug("Command: %s", " ".join(cmd))

        try:
            process = subprocess.Popen(  # nosec B603 - args built by build_command
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except OSError as e:
            logger.error("Failed to start encoder %s: %s", self._tool_path, e)
            return RunResult(
                state=RunState.FAILED,
                exit_reason=f"Failed to start encoder: {e}",
            )

        stderr_queue: queue.Queue[str | None] = queue.Queue()
        stop_event = threading.Event()

        def read_stderr() -> None:
            """Read stderr lines and put them in the queue."""
            try:
                assert process.stderr is not None
                for line in process.stderr:
                    if stop_event.is_set():
                        break
                    stderr_queue.put(line)
            except (ValueError, OSError) as e:
                # Pipe closed or process terminated
                logger.debug("Stderr reader stopped: %s", e)
            finally:
                stderr_queue.put(None)  # Signal end of output

        reader_thread = threading.Thread(
            target=read_stderr, name="vpt-stderr", daemon=True
        )
        reader_thread.start()

        def handle_line(raw: str) -> None:
            line = raw.rstrip("\r\n")
            if not line.strip():
                return
            tail.append(line)
            self._log_line(line)
            try:
                event = tracker.feed(line)
            except (ValueError, ArithmeticError) as e:
                logger.debug("Failed to parse progress line: %s", e)
                return
            if event is not None and on_progress is not None:
                try:
                    on_progress(event)
                except Exception as e:
                    logger.warning("Progress callback error: %s", e)

        cancelled = False
        timed_out = False
        stream_ended = False
        start_time = time.monotonic()

        while True:
            if is_cancelled is not None and is_cancelled():
                cancelled = True
                break

            if self._timeout is not None:
                if time.monotonic() - start_time >= self._timeout:
                    timed_out = True
                    break

            if stream_ended:
                try:
                    process.wait(timeout=self._poll_interval)
                    break
                except subprocess.TimeoutExpired:
                    continue

            try:
                line = stderr_queue.get(timeout=self._poll_interval)
            except queue.Empty:
                if process.poll() is not None:
                    break
                continue

            if line is None:
                stream_ended = True
                continue
            handle_line(line)

        if cancelled or timed_out:
            stop_event.set()
            process.kill()
            # Close stderr to unblock reader thread
            if process.stderr:
                try:
                    process.stderr.close()
                except OSError as e:
                    logger.debug("Error closing stderr: %s", e)
            process.wait()
            reader_thread.join(timeout=self.READER_JOIN_TIMEOUT)
            if reader_thread.is_alive():
                logger.error(
                    "Stderr reader thread failed to terminate after kill. "
                    "Thread will be abandoned."
                )

            if cancelled:
                logger.info("Encoder cancelled: %s", command.output_path.name)
                return RunResult(
                    state=RunState.CANCELLED,
                    return_code=process.returncode,
                    exit_reason="Cancelled",
                    stderr_tail=tuple(tail),
                    last_percent=tracker.percent,
                )
            logger.warning("Encoder timed out after %s seconds", self._timeout)
            return RunResult(
                state=RunState.FAILED,
                return_code=process.returncode,
                exit_reason=f"Timed out after {self._timeout} seconds",
                stderr_tail=tuple(tail),
                last_percent=tracker.percent,
            )

        # Drain any remaining stderr output
        reader_thread.join(timeout=self.STDERR_DRAIN_TIMEOUT)
        while True:
            try:
                line = stderr_queue.get_nowait()
            except queue.Empty:
                break
            if line is None:
                break
            handle_line(line)

        return_code = process.wait()
        return self._classify(command.output_path, return_code, tail, tracker)

    def _classify(
        self,
        output_path: Path,
        return_code: int,
        tail: deque[str],
        tracker: ProgressTracker,
    ) -> RunResult:
        if return_code != 0:
            logger.error(
                "Encoder failed with exit code %d: %s",
                return_code,
                "\n".join(tail) or "(no output)",
            )
            return RunResult(
                state=RunState.FAILED,
                return_code=return_code,
                exit_reason=f"Encoder exited with code {return_code}",
                stderr_tail=tuple(tail),
                last_percent=tracker.percent,
            )

        is_valid, error = validate_output(output_path)
        if not is_valid:
            logger.error("Encoder exited cleanly but wrote no output: %s", error)
            return RunResult(
                state=RunState.FAILED,
                return_code=return_code,
                exit_reason=error or f"Output file was not created: {output_path}",
                stderr_tail=tuple(tail),
                last_percent=tracker.percent,
            )

        logger.info("Encoder finished: %s", output_path.name)
        return RunResult(
            state=RunState.SUCCEEDED,
            return_code=return_code,
            stderr_tail=tuple(tail),
            last_percent=tracker.percent,
        )
