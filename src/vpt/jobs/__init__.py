"""Job orchestration and batch processing.

- orchestrator: one encode end to end (TranscodeOrchestrator)
- queue: sequential batch processing (BatchQueue)
- progress: batch progress sinks
- cancellation: cooperative cancellation tokens
"""

from vpt.jobs.cancellation import CancellationToken
from vpt.jobs.exceptions import JobError, JobNotFoundError, QueueBusyError
from vpt.jobs.models import Job, JobStatus, QueueSummary
from vpt.jobs.orchestrator import JobResult, TranscodeOrchestrator
from vpt.jobs.progress import (
    BatchProgressSink,
    CompositeProgressReporter,
    NullProgressReporter,
    StderrProgressReporter,
)
from vpt.jobs.queue import BatchQueue

__all__ = [
    "BatchProgressSink",
    "BatchQueue",
    "CancellationToken",
    "CompositeProgressReporter",
    "Job",
    "JobError",
    "JobNotFoundError",
    "JobResult",
    "JobStatus",
    "NullProgressReporter",
    "QueueBusyError",
    "QueueSummary",
    "StderrProgressReporter",
    "TranscodeOrchestrator",
]
