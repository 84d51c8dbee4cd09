"""In-memory job registry, the single authoritative store of export job state.

Records live for the lifetime of the process; history does not survive a
restart. Every operation runs under one asyncio lock, so a status poll
never observes a half-applied update and concurrent updates cannot lose
progress increments.
"""

import asyncio
import itertools
from collections.abc import Callable
from pathlib import Path

from loguru import logger

from haven_api.lib.export_jobs.errors import ExportNotFoundError
from haven_api.lib.export_jobs.types import ExportJob
from haven_api.lib.exporter.artifact import remove_artifact


class JobRegistry:
    """Lock-guarded map of job id -> ExportJob.

    Readers always receive snapshots; the stored objects never escape.
    """

    def __init__(self) -> None:
        self._jobs: dict[str, ExportJob] = {}
        self._order: dict[str, int] = {}
        self._sequence = itertools.count()
        self._lock = asyncio.Lock()

    async def insert(self, job: ExportJob) -> ExportJob:
        """Store a new job.

        Raises:
            ValueError: If a job with the same id already exists.
        """
        async with self._lock:
            if job.id in self._jobs:
                msg = f"Export job {job.id} already exists"
                raise ValueError(msg)
            self._jobs[job.id] = job.snapshot()
            self._order[job.id] = next(self._sequence)
            return job.snapshot()

    async def get(self, job_id: str) -> ExportJob | None:
        """Return a snapshot of the job, or None if unknown."""
        async with self._lock:
            job = self._jobs.get(job_id)
            return job.snapshot() if job is not None else None

    async def update(self, job_id: str, mutation: Callable[[ExportJob], None]) -> ExportJob:
        """Apply ``mutation`` to the job atomically.

        The mutation runs against a working copy that replaces the stored job
        only if it returns without raising.

        Returns:
            Snapshot of the updated job.

        Raises:
            ExportNotFoundError: If the job does not exist (e.g. was deleted).
        """
        async with self._lock:
            current = self._jobs.get(job_id)
            if current is None:
                raise ExportNotFoundError(job_id)
            working = current.snapshot()
            mutation(working)
            self._jobs[job_id] = working
            return working.snapshot()

    async def delete(self, job_id: str) -> str | None:
        """Remove the job's artifact file, then the job itself.

        A failure to remove the file does not keep the record alive; it is
        returned as a warning message instead.

        Returns:
            Warning message if the artifact could not be removed, else None.

        Raises:
            ExportNotFoundError: If the job does not exist.
        """
        async with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                raise ExportNotFoundError(job_id)

            warning: str | None = None
            if job.file_path:
                warning = await _remove_artifact(Path(job.file_path))

            del self._jobs[job_id]
            del self._order[job_id]
            return warning

    async def list(self, page: int = 1, page_size: int = 10) -> tuple[list[ExportJob], int]:
        """List jobs newest first.

        Args:
            page: 1-based page number.
            page_size: Items per page.

        Returns:
            Tuple of (job snapshots for the page, total job count).
        """
        page = max(page, 1)
        page_size = max(page_size, 1)
        async with self._lock:
            ordered = sorted(
                self._jobs.values(),
                key=lambda job: (job.created_at, self._order[job.id]),
                reverse=True,
            )
            offset = (page - 1) * page_size
            return [job.snapshot() for job in ordered[offset : offset + page_size]], len(ordered)

    async def count(self) -> int:
        async with self._lock:
            return len(self._jobs)


async def _remove_artifact(path: Path) -> str | None:
    try:
        removed = await remove_artifact(path)
    except OSError as exc:
        logger.warning(f"Could not remove export artifact {path}: {exc}")
        return f"Export artifact could not be removed: {exc}"
    if not removed:
        logger.debug(f"Export artifact already gone: {path}")
    return None
