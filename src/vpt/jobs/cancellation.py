"""Cooperative cancellation for encodes."""

from __future__ import annotations

import threading


class CancellationToken:
    """A one-way cancellation flag shared between a caller and a job.

    The runner polls is_cancelled() while the encoder is running; once set a
    token stays set.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    def is_cancelled(self) -> bool:
        """Return True once cancel() has been called."""
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or timeout; returns is_cancelled()."""
        return self._event.wait(timeout)

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.is_cancelled()})"
