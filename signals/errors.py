"""
Exception hierarchy for signal extraction and job processing.
"""

from __future__ import annotations

import threading


class SignalExtractionError(Exception):
    """Base exception for failures while turning a file into signals."""


class SignalValidationError(SignalExtractionError):
    """Raised when the input file is structurally unusable. Never retried."""


class SchemaError(SignalValidationError):
    """Raised when headers or row presence fail the schema gate."""


class EmptyDatasetError(SignalValidationError):
    """Raised when a file passes the schema gate but yields no valid rows."""


class FileParseError(SignalValidationError):
    """Raised when the byte stream cannot be decoded into rows."""


class UnsupportedFormatError(SignalExtractionError):
    """Raised when no parser is registered for a file extension."""

    def __init__(self, extension: str) -> None:
        self.extension = extension
        label = extension or "<none>"
        super().__init__(f"File type '{label}' is not supported.")


class NotFoundError(LookupError):
    """Base for absent resources. Reported as absence, not as a job state."""


class SourceNotFoundError(NotFoundError):
    """Raised when the referenced source file does not exist."""

    def __init__(self, container: str, path: str) -> None:
        self.container = container
        self.path = path
        super().__init__(f"Source file '{path}' not found in container '{container}'.")


class JobNotFoundError(NotFoundError):
    """Raised when a job id is unknown."""

    def __init__(self, job_id: object) -> None:
        self.job_id = job_id
        super().__init__(f"Job '{job_id}' not found.")


class JobConflictError(Exception):
    """Raised when a job cannot change state; the persisted state is unchanged."""

    def __init__(self, job_id: object, message: str) -> None:
        self.job_id = job_id
        super().__init__(message)


class ProcessingCancelledError(SignalExtractionError):
    """Raised when the caller's cancellation signal fires mid-processing."""


def raise_if_cancelled(cancel_event: threading.Event | None, stage: str) -> None:
    """
    Abort the current step when the cancellation event has been set.
    """

    if cancel_event is not None and cancel_event.is_set():
        raise ProcessingCancelledError(f"Processing cancelled during {stage}.")
