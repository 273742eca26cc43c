"""Unit tests for BatchQueue."""

import threading
from pathlib import Path
from unittest.mock import patch

import pytest

from vpt.edit.models import EditSpec
from vpt.executor.types import RunState
from vpt.jobs.exceptions import JobNotFoundError, QueueBusyError
from vpt.jobs.orchestrator import JobResult, TranscodeOrchestrator
from vpt.jobs.progress import NullProgressReporter
from vpt.jobs.queue import BatchQueue, JobStatus, QueueSummary
from vpt.tools.ffmpeg_progress import ProgressEvent


class FakeOrchestrator:
    """Orchestrator stand-in with a scripted outcome per job.

    Outcomes: "done", "error", "raise", or "block" (waits for the job's
    cancellation token, then reports a cancelled run).
    """

    def __init__(self, outcomes: list[str]) -> None:
        self.outcomes = list(outcomes)
        self.calls: list[tuple[EditSpec, str | None]] = []
        self.blocking = threading.Event()

    def prepare(self, spec: EditSpec) -> EditSpec:
        if spec.output_path is not None:
            return spec
        return spec.model_copy(
            update={"output_path": spec.input_path.with_name("out.mp4")}
        )

    def execute(self, spec, on_progress=None, cancel=None, job_id=None):
        self.calls.append((spec, job_id))
        outcome = self.outcomes.pop(0)

        if outcome == "raise":
            raise RuntimeError("boom")

        if outcome == "block":
            on_progress(ProgressEvent(percent=10, message="Processing..."))
            self.blocking.set()
            cancel.wait(5)
            self.blocking.clear()
            on_progress(ProgressEvent(percent=10, message="cancelled"))
            return JobResult(
                success=False,
                state=RunState.CANCELLED,
                output_path=spec.output_path,
                error_message="Cancelled",
            )

        ok = outcome == "done"
        on_progress(
            ProgressEvent(percent=100, message="done")
            if ok
            else ProgressEvent(percent=0, message="error")
        )
        return JobResult(
            success=ok,
            state=RunState.SUCCEEDED if ok else RunState.FAILED,
            output_path=spec.output_path,
            error_message=None if ok else "Encoder exited with code 1",
        )


class RecordingSink(NullProgressReporter):
    """Sink that records every notification."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def on_queue_start(self, total):
        self.calls.append(("queue_start", total))

    def on_job_start(self, job):
        self.calls.append(("job_start", job.name))

    def on_job_progress(self, job_id, event):
        self.calls.append(("job_progress", job_id, event.percent))

    def on_job_complete(self, job):
        self.calls.append(("job_complete", job.name, job.status))

    def on_queue_complete(self, summary):
        self.calls.append(("queue_complete", summary))


def _specs(*names: str) -> list[EditSpec]:
    return [EditSpec(input_path=Path(f"/videos/{name}")) for name in names]


def _queue(outcomes: list[str], *names: str, sink=None):
    orchestrator = FakeOrchestrator(outcomes)
    queue = BatchQueue(orchestrator, sink=sink)
    jobs = [queue.enqueue(spec) for spec in _specs(*names)]
    return queue, orchestrator, jobs


def _start_and_wait_for_block(queue: BatchQueue, orchestrator: FakeOrchestrator):
    assert queue.start()
    assert orchestrator.blocking.wait(5), "job never started"


class TestProcess:
    """Tests for sequential processing."""

    def test_failure_does_not_halt_queue(self):
        queue, orchestrator, jobs = _queue(
            ["done", "error", "done"], "a.mp4", "b.mp4", "c.mp4"
        )

        summary = queue.process()

        assert summary == QueueSummary(done=2, failed=1, cancelled=0, remaining=0)
        assert [j.status for j in jobs] == [
            JobStatus.DONE,
            JobStatus.ERROR,
            JobStatus.DONE,
        ]
        assert jobs[1].error_message == "Encoder exited with code 1"
        assert [spec.input_path.name for spec, _ in orchestrator.calls] == [
            "a.mp4",
            "b.mp4",
            "c.mp4",
        ]

    def test_job_ids_and_output_recorded(self):
        queue, orchestrator, jobs = _queue(["done"], "a.mp4")

        queue.process()

        assert orchestrator.calls[0][1] == jobs[0].id
        assert jobs[0].output_path == Path("/videos/out.mp4")
        assert jobs[0].last_progress == ProgressEvent(percent=100, message="done")

    def test_exception_marks_error_and_continues(self):
        queue, _, jobs = _queue(["raise", "done"], "a.mp4", "b.mp4")

        summary = queue.process()

        assert jobs[0].status is JobStatus.ERROR
        assert jobs[0].error_message == "boom"
        assert jobs[1].status is JobStatus.DONE
        assert summary.failed == 1
        assert summary.done == 1

    def test_empty_queue(self):
        queue = BatchQueue(FakeOrchestrator([]))
        assert queue.process() == QueueSummary()
        assert not queue.is_running

    def test_finished_jobs_not_reprocessed(self):
        queue, orchestrator, _ = _queue(["done", "done"], "a.mp4")
        queue.process()
        queue.enqueue(_specs("b.mp4")[0])

        summary = queue.process()

        assert summary.done == 1
        assert len(orchestrator.calls) == 2

    def test_sink_notifications(self):
        sink = RecordingSink()
        queue, _, jobs = _queue(["done", "error"], "a.mp4", "b.mp4", sink=sink)

        queue.process()

        assert sink.calls[0] == ("queue_start", 2)
        assert sink.calls[1] == ("job_start", "a.mp4")
        assert sink.calls[2] == ("job_progress", jobs[0].id, 100)
        assert sink.calls[3] == ("job_complete", "a.mp4", JobStatus.DONE)
        assert sink.calls[6] == ("job_complete", "b.mp4", JobStatus.ERROR)
        assert sink.calls[-1][0] == "queue_complete"

    def test_failing_sink_does_not_stop_processing(self):
        class BrokenSink(NullProgressReporter):
            def on_job_start(self, job):
                raise RuntimeError("display broke")

        queue, _, jobs = _queue(["done"], "a.mp4", sink=BrokenSink())

        queue.process()

        assert jobs[0].status is JobStatus.DONE


class TestCancellation:
    """Tests for cancel_current() and stop()."""

    def test_cancel_current_moves_on(self):
        queue, orchestrator, jobs = _queue(["block", "done"], "a.mp4", "b.mp4")

        _start_and_wait_for_block(queue, orchestrator)
        assert queue.current_job is jobs[0]
        assert queue.cancel_current() is True
        assert queue.wait(5)

        assert jobs[0].status is JobStatus.CANCELLED
        assert jobs[1].status is JobStatus.DONE
        assert not jobs[1].cancel_token.is_cancelled()

    def test_stop_leaves_rest_pending(self):
        queue, orchestrator, jobs = _queue(
            ["block", "done", "done"], "a.mp4", "b.mp4", "c.mp4"
        )

        _start_and_wait_for_block(queue, orchestrator)
        queue.stop()
        assert queue.wait(5)

        assert [j.status for j in jobs] == [
            JobStatus.CANCELLED,
            JobStatus.PENDING,
            JobStatus.PENDING,
        ]
        assert len(orchestrator.calls) == 1
        assert queue.current_job is None

    def test_cancel_current_when_idle(self):
        queue = BatchQueue(FakeOrchestrator([]))
        assert queue.cancel_current() is False


class TestReentrancy:
    """Tests for a second loop while one is running."""

    def test_second_start_rejected(self):
        queue, orchestrator, _ = _queue(["block"], "a.mp4")

        _start_and_wait_for_block(queue, orchestrator)
        try:
            assert queue.is_running
            assert queue.start() is False
            assert queue.process() is None
        finally:
            queue.cancel_current()
            queue.wait(5)

        assert not queue.is_running


class TestQueueManagement:
    """Tests for get(), remove() and clear()."""

    def test_get(self):
        queue, _, jobs = _queue([], "a.mp4")
        assert queue.get(jobs[0].id) is jobs[0]

    def test_get_missing(self):
        queue = BatchQueue(FakeOrchestrator([]))
        with pytest.raises(JobNotFoundError):
            queue.get("nope")

    def test_remove_pending(self):
        queue, _, jobs = _queue([], "a.mp4", "b.mp4")

        assert queue.remove(jobs[0].id) is jobs[0]
        assert queue.jobs == [jobs[1]]

    def test_remove_missing(self):
        queue = BatchQueue(FakeOrchestrator([]))
        with pytest.raises(JobNotFoundError, match="Cannot remove job"):
            queue.remove("nope")

    def test_remove_processing_rejected(self):
        queue, orchestrator, jobs = _queue(["block"], "a.mp4")

        _start_and_wait_for_block(queue, orchestrator)
        try:
            with pytest.raises(QueueBusyError):
                queue.remove(jobs[0].id)
        finally:
            queue.cancel_current()
            queue.wait(5)

    def test_clear_keeps_processing_job(self):
        queue, orchestrator, jobs = _queue(["block"], "a.mp4", "b.mp4", "c.mp4")

        _start_and_wait_for_block(queue, orchestrator)
        try:
            assert queue.clear() == 2
            assert queue.jobs == [jobs[0]]
        finally:
            queue.stop()
            queue.wait(5)

    def test_clear_idle(self):
        queue, _, _ = _queue(["done"], "a.mp4", "b.mp4")
        assert queue.clear() == 2
        assert queue.jobs == []

    def test_stop_while_loop_holds_lock(self):
        queue, orchestrator, _ = _queue(["block"], "a.mp4")
        _start_and_wait_for_block(queue, orchestrator)

        # Interrupt arriving while the loop thread is inside a locked section
        def interrupt():
            with queue._lock:
                queue.stop()

        thread = threading.Thread(target=interrupt, daemon=True)
        thread.start()
        thread.join(2)

        assert not thread.is_alive(), "stop() blocked on the queue lock"
        assert queue.wait(5)


class TestWithOrchestrator:
    """Tests driving a real TranscodeOrchestrator."""

    def test_missing_input_fails_only_that_job(
        self, tmp_path, ffmpeg_path, ffmpeg_stderr, fake_process
    ):
        specs = []
        for name in ("a.mp4", "b.mp4", "c.mp4"):
            source = tmp_path / name
            if name != "b.mp4":
                source.write_bytes(b"")
            specs.append(
                EditSpec(
                    input_path=source,
                    output_path=tmp_path / f"{source.stem}_out.mp4",
                )
            )
        processes = [
            fake_process(ffmpeg_stderr, output_path=tmp_path / "a_out.mp4"),
            fake_process(ffmpeg_stderr, output_path=tmp_path / "c_out.mp4"),
        ]
        queue = BatchQueue(TranscodeOrchestrator(tool_path=ffmpeg_path))
        jobs = [queue.enqueue(spec) for spec in specs]

        with patch(
            "vpt.executor.runner.subprocess.Popen", side_effect=processes
        ) as mock_popen:
            summary = queue.process()

        assert [j.status for j in jobs] == [
            JobStatus.DONE,
            JobStatus.ERROR,
            JobStatus.DONE,
        ]
        assert mock_popen.call_count == 2
        assert "b.mp4" in jobs[1].error_message
        assert summary == QueueSummary(done=2, failed=1)
