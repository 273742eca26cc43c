"""Job records tracked by the batch queue."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from vpt.edit.models import EditSpec
from vpt.jobs.cancellation import CancellationToken
from vpt.tools.ffmpeg_progress import ProgressEvent


class JobStatus(str, Enum):
    """Lifecycle of a queued job."""

    PENDING = "pending"
    PROCESSING = "processing"
    DONE = "done"
    ERROR = "error"
    CANCELLED = "cancelled"

    @property
    def is_finished(self) -> bool:
        return self in (JobStatus.DONE, JobStatus.ERROR, JobStatus.CANCELLED)


@dataclass
class Job:
    """One queued edit.

    Mutated only by the queue's processing loop.
    """

    spec: EditSpec
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    status: JobStatus = JobStatus.PENDING
    last_progress: ProgressEvent | None = None
    output_path: Path | None = None
    error_message: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    cancel_token: CancellationToken = field(
        default_factory=CancellationToken, repr=False, compare=False
    )

    @property
    def name(self) -> str:
        """Input file name, for display."""
        return self.spec.input_path.name


@dataclass(frozen=True)
class QueueSummary:
    """Counts from one pass of the processing loop."""

    done: int = 0
    failed: int = 0
    cancelled: int = 0
    remaining: int = 0

    @property
    def processed(self) -> int:
        return self.done + self.failed + self.cancelled

    @property
    def success(self) -> bool:
        return self.failed == 0 and self.cancelled == 0
