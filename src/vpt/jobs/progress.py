"""Progress reporting for batch processing.

BatchProgressSink is the protocol the queue reports through. Events are
keyed by job id so a display can track several queued jobs.
"""

from __future__ import annotations

import logging
import sys
import threading
from typing import TYPE_CHECKING, Protocol, TextIO

from vpt.jobs.models import Job, JobStatus, QueueSummary

if TYPE_CHECKING:
    from vpt.tools.ffmpeg_progress import ProgressEvent

logger = logging.getLogger(__name__)


class BatchProgressSink(Protocol):
    """Protocol for receiving batch progress.

    Implementations provide context-specific progress display:
    - CLI: stderr progress line
    - Tests: null/silent or recording sinks
    """

    def on_queue_start(self, total: int) -> None:
        """Signal that the loop is starting with total pending jobs."""
        ...

    def on_job_start(self, job: Job) -> None:
        """Signal that a job is now processing."""
        ...

    def on_job_progress(self, job_id: str, event: ProgressEvent) -> None:
        """Forward an encoder progress event for a job."""
        ...

    def on_job_complete(self, job: Job) -> None:
        """Signal that a job reached done, error or cancelled."""
        ...

    def on_queue_complete(self, summary: QueueSummary) -> None:
        """Signal that the loop has finished."""
        ...


class NullProgressReporter:
    """Progress sink that discards everything."""

    def on_queue_start(self, total: int) -> None:
        pass

    def on_job_start(self, job: Job) -> None:
        pass

    def on_job_progress(self, job_id: str, event: ProgressEvent) -> None:
        pass

    def on_job_complete(self, job: Job) -> None:
        pass

    def on_queue_complete(self, summary: QueueSummary) -> None:
        pass


class StderrProgressReporter:
    """Progress sink that writes an in-place status line to stderr.

    Suitable for the CLI, where one encode runs at a time and the current
    line is rewritten on every progress event.
    """

    def __init__(self, enabled: bool = True, stream: TextIO | None = None) -> None:
        """Initialize stderr progress reporter.

        Args:
            enabled: If False, suppresses output.
            stream: Output stream (defaults to sys.stderr at write time).
        """
        self.enabled = enabled
        self._stream = stream
        self.total = 0
        self.index = 0
        self._names: dict[str, str] = {}
        self._lock = threading.Lock()

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stderr

    def on_queue_start(self, total: int) -> None:
        with self._lock:
            self.total = total
            self.index = 0

    def on_job_start(self, job: Job) -> None:
        with self._lock:
            self.index += 1
            self._names[job.id] = job.name
        self._write(f"{self._prefix(job.id)}starting", newline=False)

    def on_job_progress(self, job_id: str, event: ProgressEvent) -> None:
        self._write(
            f"{self._prefix(job_id)}{event.percent:3d}% {event.message}",
            newline=False,
        )

    def on_job_complete(self, job: Job) -> None:
        status = job.status.value
        if job.error_message and job.status is JobStatus.ERROR:
            status = f"error: {job.error_message}"
        self._write(f"{self._prefix(job.id)}{status}", newline=True)

    def on_queue_complete(self, summary: QueueSummary) -> None:
        self._write(
            f"Batch complete: {summary.done} done, {summary.failed} failed, "
            f"{summary.cancelled} cancelled, {summary.remaining} remaining",
            newline=True,
        )

    def _prefix(self, job_id: str) -> str:
        with self._lock:
            name = self._names.get(job_id, job_id)
            if self.total > 1:
                return f"[{self.index}/{self.total}] {name}: "
            return f"{name}: "

    def _write(self, text: str, newline: bool) -> None:
        if not self.enabled:
            return
        end = "\n" if newline else ""
        # \x1b[K clears the rest of the previous, possibly longer, line
        self.stream.write(f"\r{text}\x1b[K{end}")
        self.stream.flush()


class CompositeProgressReporter:
    """Fans events out to several sinks.

    A failing sink is logged and does not stop the others.
    """

    def __init__(self, *sinks: BatchProgressSink) -> None:
        self._sinks = list(sinks)

    def _each(self, method: str, *args: object) -> None:
        for sink in self._sinks:
            try:
                getattr(sink, method)(*args)
            except Exception as e:
                logger.warning("Progress sink %s.%s failed: %s", sink, method, e)

    def on_queue_start(self, total: int) -> None:
        self._each("on_queue_start", total)

    def on_job_start(self, job: Job) -> None:
        self._each("on_job_start", job)

    def on_job_progress(self, job_id: str, event: ProgressEvent) -> None:
        self._each("on_job_progress", job_id, event)

    def on_job_complete(self, job: Job) -> None:
        self._each("on_job_complete", job)

    def on_queue_complete(self, summary: QueueSummary) -> None:
        self._each("on_queue_complete", summary)
