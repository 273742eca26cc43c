"""Sequential batch queue.

Jobs are processed strictly one at a time in FIFO order. Each job gets its
own cancellation token, so cancelling the active job never affects the
jobs behind it.
"""

from __future__ import annotations

import logging
import threading

from vpt.edit.models import EditSpec
from vpt.executor.types import RunState
from vpt.jobs.exceptions import JobNotFoundError, QueueBusyError
from vpt.jobs.models import Job, JobStatus, QueueSummary
from vpt.jobs.orchestrator import TranscodeOrchestrator
from vpt.jobs.progress import BatchProgressSink, CompositeProgressReporter
from vpt.tools.ffmpeg_progress import ProgressEvent

logger = logging.getLogger(__name__)

__all__ = ["BatchQueue", "Job", "JobStatus", "QueueSummary"]


class BatchQueue:
    """Ordered queue of edits processed by a single loop.

    Example:
        queue = BatchQueue(TranscodeOrchestrator(config), sink=reporter)
        for spec in specs:
            queue.enqueue(spec)
        summary = queue.process()
    """

    def __init__(
        self,
        orchestrator: TranscodeOrchestrator | None = None,
        sink: BatchProgressSink | None = None,
    ) -> None:
        """Initialize the queue.

        Args:
            orchestrator: Runs each job (defaults to TranscodeOrchestrator()).
            sink: Receives progress keyed by job id. Sink errors are logged
                and never interrupt processing.
        """
        self._orchestrator = orchestrator or TranscodeOrchestrator()
        self._sink: BatchProgressSink | None = (
            CompositeProgressReporter(sink) if sink is not None else None
        )
        self._jobs: list[Job] = []
        self._lock = threading.RLock()
        self._running = False
        self._current: Job | None = None
        self._stop_requested = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def jobs(self) -> list[Job]:
        """Snapshot of all jobs in queue order."""
        with self._lock:
            return list(self._jobs)

    @property
    def current_job(self) -> Job | None:
        """The job being processed, if any."""
        with self._lock:
            return self._current

    @property
    def is_running(self) -> bool:
        """True while the processing loop is active."""
        with self._lock:
            return self._running

    def get(self, job_id: str) -> Job:
        """Look up a job by id.

        Raises:
            JobNotFoundError: If no job has that id.
        """
        with self._lock:
            for job in self._jobs:
                if job.id == job_id:
                    return job
        raise JobNotFoundError(job_id, "get")

    def enqueue(self, spec: EditSpec) -> Job:
        """Append a pending job for spec."""
        job = Job(spec=spec)
        with self._lock:
            self._jobs.append(job)
        logger.info(
            "Queued %s",
            spec.input_path.name,
            extra={"job_id": job.id, "queue_length": len(self._jobs)},
        )
        return job

    def remove(self, job_id: str) -> Job:
        """Remove a job that is not processing.

        Raises:
            JobNotFoundError: If no job has that id.
            QueueBusyError: If the job is currently processing.
        """
        with self._lock:
            for i, job in enumerate(self._jobs):
                if job.id != job_id:
                    continue
                if job.status is JobStatus.PROCESSING:
                    raise QueueBusyError(
                        job_id, f"Cannot remove job {job_id}: processing"
                    )
                del self._jobs[i]
                return job
        raise JobNotFoundError(job_id, "remove")

    def clear(self) -> int:
        """Remove every job that is not processing.

        Returns:
            Number of jobs removed.
        """
        with self._lock:
            kept = [j for j in self._jobs if j.status is JobStatus.PROCESSING]
            removed = len(self._jobs) - len(kept)
            self._jobs = kept
        return removed

    def cancel_current(self) -> bool:
        """Cancel the active job only; the loop moves on to the next job.

        Returns:
            True if a job was processing.
        """
        with self._lock:
            job = self._current
        if job is None:
            return False
        logger.info("Cancelling %s", job.name, extra={"job_id": job.id})
        job.cancel_token.cancel()
        return True

    def stop(self) -> None:
        """Cancel the active job and end the loop, leaving the rest pending.

        Safe to call from a signal handler running on the loop's own thread.
        """
        self._stop_requested.set()
        self.cancel_current()

    def start(self) -> bool:
        """Run the processing loop on a background thread.

        Returns:
            False (and does nothing) if the loop is already running.
        """
        with self._lock:
            if self._running:
                return False
            self._running = True
            self._stop_requested.clear()
        self._thread = threading.Thread(
            target=self._loop, name="vpt-batch", daemon=True
        )
        self._thread.start()
        return True

    def wait(self, timeout: float | None = None) -> bool:
        """Wait for a loop started by start() to finish.

        Returns:
            True if the loop is no longer running.
        """
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
        return not self.is_running

    def process(self) -> QueueSummary | None:
        """Run the processing loop in the calling thread.

        Returns:
            Summary of this pass, or None if a loop was already running.
        """
        with self._lock:
            if self._running:
                return None
            self._running = True
            self._stop_requested.clear()
        return self._loop()

    def _next_pending(self) -> Job | None:
        with self._lock:
            for job in self._jobs:
                if job.status is JobStatus.PENDING:
                    job.status = JobStatus.PROCESSING
                    self._current = job
                    return job
        return None

    def _loop(self) -> QueueSummary:
        done = failed = cancelled = 0
        try:
            with self._lock:
                pending = sum(1 for j in self._jobs if j.status is JobStatus.PENDING)
            self._notify("on_queue_start", pending)

            while not self._stop_requested.is_set():
                job = self._next_pending()
                if job is None:
                    break
                status = self._process_job(job)
                if status is JobStatus.DONE:
                    done += 1
                elif status is JobStatus.CANCELLED:
                    cancelled += 1
                else:
                    failed += 1

            with self._lock:
                remaining = sum(
                    1 for j in self._jobs if j.status is JobStatus.PENDING
                )
            summary = QueueSummary(
                done=done, failed=failed, cancelled=cancelled, remaining=remaining
            )
            logger.info(
                "Batch finished: %d done, %d failed, %d cancelled, %d remaining",
                done,
                failed,
                cancelled,
                remaining,
            )
            self._notify("on_queue_complete", summary)
            return summary
        finally:
            with self._lock:
                self._running = False
                self._current = None

    def _process_job(self, job: Job) -> JobStatus:
        self._notify("on_job_start", job)

        def forward(event: ProgressEvent) -> None:
            job.last_progress = event
            self._notify("on_job_progress", job.id, event)

        try:
            prepared = self._orchestrator.prepare(job.spec)
            job.output_path = prepared.output_path
            result = self._orchestrator.execute(
                prepared, on_progress=forward, cancel=job.cancel_token, job_id=job.id
            )
        except Exception as e:
            logger.exception("Job %s failed unexpectedly", job.id)
            status, error = JobStatus.ERROR, str(e)
        else:
            if result.success:
                status, error = JobStatus.DONE, None
            elif result.state is RunState.CANCELLED or job.cancel_token.is_cancelled():
                status, error = JobStatus.CANCELLED, result.error_message
            else:
                status, error = JobStatus.ERROR, result.error_message

        with self._lock:
            job.status = status
            job.error_message = error
            self._current = None

        self._notify("on_job_complete", job)
        return status

    def _notify(self, method: str, *args: object) -> None:
        if self._sink is not None:
            getattr(self._sink, method)(*args)
