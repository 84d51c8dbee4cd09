"""Export job library — job entity, state machine, registry, and errors."""

from haven_api.lib.export_jobs.errors import (
    ExportCancelledError,
    ExportError,
    ExportNotFoundError,
    ExportNotReadyError,
    ExportValidationError,
    InvalidJobTransitionError,
)
from haven_api.lib.export_jobs.registry import JobRegistry
from haven_api.lib.export_jobs.types import ExportJob, ExportStatus, compute_progress

__all__ = [
    "ExportCancelledError",
    "ExportError",
    "ExportJob",
    "ExportNotFoundError",
    "ExportNotReadyError",
    "ExportStatus",
    "ExportValidationError",
    "InvalidJobTransitionError",
    "JobRegistry",
    "compute_progress",
]
