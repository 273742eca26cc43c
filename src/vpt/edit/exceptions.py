"""Exceptions raised for invalid edit requests."""


class EditSpecError(ValueError):
    """Raised when an edit request cannot be compiled into an encoder command.

    Pydantic validation rejects malformed requests at construction time; this
    error covers requests that are well-formed but not in a compilable state
    (e.g., no resolved output path, or a text watermark that was never
    rasterized).
    """


class JobFileError(ValueError):
    """Raised when a batch job file cannot be loaded or validated."""
