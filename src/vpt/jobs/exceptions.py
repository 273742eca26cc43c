"""Custom exceptions for job processing.

All job-related exceptions inherit from JobError, so callers can catch every
queue error with a single except clause.
"""


class JobError(Exception):
    """Base exception for job processing errors."""


class JobNotFoundError(JobError):
    """Raised when a job id is not in the queue.

    Attributes:
        job_id: The ID of the job that was not found.
        operation: The operation that was attempted (e.g., "remove").
    """

    def __init__(self, job_id: str, operation: str) -> None:
        self.job_id = job_id
        self.operation = operation
        super().__init__(f"Cannot {operation} job {job_id}: not found")


class QueueBusyError(JobError):
    """Raised when an operation conflicts with the job currently processing.

    Attributes:
        job_id: The ID of the processing job.
    """

    def __init__(self, job_id: str, message: str | None = None) -> None:
        self.job_id = job_id
        super().__init__(message or f"Job {job_id} is currently processing")
