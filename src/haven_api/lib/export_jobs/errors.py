"""Typed errors raised by the export job subsystem."""


class ExportError(Exception):
    """Base class for export errors."""


class ExportValidationError(ExportError, ValueError):
    """An export request was rejected before a job was created."""


class ExportNotFoundError(ExportError, LookupError):
    """No export job (or artifact) exists for the given identifier.

    Args:
        job_id: The identifier that was looked up.
        message: Optional override of the default message.
    """

    def __init__(self, job_id: str, message: str | None = None) -> None:
        self.job_id = job_id
        super().__init__(message or f"Export job not found: {job_id}")


class ExportNotReadyError(ExportError):
    """The export job exists but has not completed."""

    def __init__(self, job_id: str, status: str) -> None:
        self.job_id = job_id
        self.status = status
        super().__init__(f"Export {job_id} is not ready for download (status: {status})")


class ExportCancelledError(ExportError):
    """The running export noticed a cancellation request."""


class InvalidJobTransitionError(ExportError):
    """A mutation was attempted that the job state machine does not allow."""
