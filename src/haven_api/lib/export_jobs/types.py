"""Export job entity and its state machine."""

import copy
import enum
import math
from dataclasses import dataclass, field
from datetime import UTC, datetime

from haven_api.lib.content_extractor.filters import ExportFilters
from haven_api.lib.export_jobs.errors import InvalidJobTransitionError


class ExportStatus(enum.StrEnum):
    """Lifecycle status of an export job.

    ``PROCESSING`` is the only non-terminal state.
    """

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


def compute_progress(processed_items: int, total_items: int | None) -> int:
    """Percentage of processed items, rounded half up and capped at 100.

    Returns 0 while the total is unknown or zero.
    """
    if not total_items:
        return 0
    return min(100, math.floor(processed_items * 100 / total_items + 0.5))


@dataclass
class ExportJob:
    """One export request's full lifecycle record.

    Mutated only through the transition methods below, which enforce the
    state machine: progress never decreases, ``total_items`` is set once,
    ``file_path``/``file_size`` only exist on completed jobs and ``error``
    only on failed ones. Terminal jobs reject every mutation.
    """

    id: str
    content_types: list[str]
    format: str
    file_name: str
    filters: ExportFilters = field(default_factory=ExportFilters)
    include_media: bool = False
    compress: bool = False
    created_by: str | None = None
    status: ExportStatus = ExportStatus.PROCESSING
    progress: int = 0
    total_items: int | None = None
    processed_items: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None
    file_path: str | None = None
    file_size: int | None = None
    error: str | None = None
    cancel_requested: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.status is not ExportStatus.PROCESSING

    @property
    def download_available(self) -> bool:
        return self.status is ExportStatus.COMPLETED and self.file_path is not None

    def _ensure_processing(self, action: str) -> None:
        if self.is_terminal:
            msg = f"Cannot {action}: export {self.id} is already {self.status}"
            raise InvalidJobTransitionError(msg)

    def set_total(self, total_items: int) -> None:
        self._ensure_processing("set total")
        if self.total_items is not None:
            msg = f"Total items for export {self.id} already set to {self.total_items}"
            raise InvalidJobTransitionError(msg)
        if total_items < 0:
            msg = f"total_items must be non-negative, got {total_items}"
            raise InvalidJobTransitionError(msg)
        self.total_items = total_items

    def record_progress(self, processed_items: int) -> None:
        """Record the cumulative number of processed items."""
        self._ensure_processing("record progress")
        if processed_items < self.processed_items:
            msg = f"processed_items cannot decrease ({self.processed_items} -> {processed_items})"
            raise InvalidJobTransitionError(msg)
        self.processed_items = processed_items
        self.progress = max(self.progress, compute_progress(processed_items, self.total_items))

    def request_cancel(self) -> None:
        self._ensure_processing("cancel")
        self.cancel_requested = True

    def mark_completed(self, file_path: str, file_size: int) -> None:
        self._ensure_processing("complete")
        self.status = ExportStatus.COMPLETED
        self.progress = 100
        self.completed_at = datetime.now(UTC)
        self.file_path = file_path
        self.file_size = file_size

    def mark_failed(self, error: str) -> None:
        self._ensure_processing("fail")
        self.status = ExportStatus.FAILED
        self.error = error or "Export failed"

    def snapshot(self) -> "ExportJob":
        """Independent copy safe to hand to readers."""
        return copy.deepcopy(self)
