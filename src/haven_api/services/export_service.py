"""Export service: orchestrates content export jobs.

``run_export_job`` drives one job from counting through the written
artifact; ``ExportService`` is the operation surface used by the API and
the CLI (create, status, download, history, cancel, delete).
"""

import asyncio
import functools
import re
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

import aiofiles.os
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from haven_api.core.background import BoundedTaskRunner
from haven_api.lib.content_extractor import (
    CONTENT_TYPES,
    DATE_RANGE_OPTIONS,
    STATUS_OPTIONS,
    ContentTypeInfo,
    DateRangePreset,
    ExportFilters,
    as_utc,
    get_extractor,
    get_supported_content_types,
    is_supported_content_type,
)
from haven_api.lib.export_jobs import (
    ExportCancelledError,
    ExportJob,
    ExportNotFoundError,
    ExportNotReadyError,
    ExportStatus,
    ExportValidationError,
    JobRegistry,
)
from haven_api.lib.exporter import (
    FORMAT_EXTENSIONS,
    FORMATS,
    SUPPORTED_FORMATS,
    FormatInfo,
    artifact_path,
    encode_export,
    needs_archive,
    remove_artifact,
    write_artifact,
)

BASE_ESTIMATE_SECONDS = 30
ESTIMATED_ITEMS_PER_TYPE = 100
ESTIMATED_SECONDS_PER_ITEM = 0.1

CANCELLED_MESSAGE = "Export cancelled"

_UNSAFE_FILE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def estimate_export_seconds(content_types: Iterable[str]) -> int:
    """Rough duration estimate returned to the requester."""
    estimated_items = len(list(content_types)) * ESTIMATED_ITEMS_PER_TYPE
    return round(BASE_ESTIMATE_SECONDS + estimated_items * ESTIMATED_SECONDS_PER_ITEM)


def default_file_name(prefix: str, today: date | None = None) -> str:
    """Date-stamped default artifact base name, e.g. ``prefix_2024-05-01``."""
    today = today or datetime.now(UTC).date()
    return f"{prefix}_{today.isoformat()}"


def sanitize_file_name(name: str | None) -> str | None:
    """Reduce a requested file name to ``[A-Za-z0-9._-]``.

    Returns None when nothing usable remains.
    """
    if not name:
        return None
    cleaned = _UNSAFE_FILE_NAME_CHARS.sub("_", name.strip()).strip("._")
    return cleaned[:100] or None


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


async def _raise_if_cancelled(registry: JobRegistry, job_id: str) -> None:
    job = await registry.get(job_id)
    if job is None:
        raise ExportNotFoundError(job_id)
    if job.cancel_requested:
        raise ExportCancelledError(CANCELLED_MESSAGE)


async def _discard_partial_artifact(path: Path) -> None:
    try:
        if await remove_artifact(path):
            logger.info(f"Removed unlinked export artifact {path}")
    except OSError as exc:
        logger.warning(f"Could not remove unlinked export artifact {path}: {exc}")


async def _run_pipeline(
    job: ExportJob,
    registry: JobRegistry,
    session_factory: async_sessionmaker[AsyncSession],
    export_dir: Path,
) -> ExportJob:
    extractors = [(content_type, get_extractor(content_type)) for content_type in job.content_types]
    result_map: dict[str, list[dict[str, Any]]] = {}

    async with session_factory() as session:
        total = 0
        for _content_type, extractor in extractors:
            total += await extractor.count(session, job.filters)
        await registry.update(job.id, lambda j: j.set_total(total))
        logger.debug(f"Export {job.id}: {total} item(s) across {len(extractors)} content type(s)")

        processed = 0
        for content_type, extractor in extractors:
            await _raise_if_cancelled(registry, job.id)
            records = await extractor.extract(session, job.filters, include_media=job.include_media)
            result_map[content_type] = records
            processed += len(records)
            await registry.update(job.id, functools.partial(ExportJob.record_progress, processed_items=processed))
            logger.debug(f"Export {job.id}: extracted {len(records)} {content_type} record(s)")

    payloads = await asyncio.to_thread(encode_export, result_map, job.format, file_name=job.file_name)
    await _raise_if_cancelled(registry, job.id)

    job_dir = export_dir / job.id
    output_path = artifact_path(
        job_dir,
        job.file_name,
        FORMAT_EXTENSIONS[job.format],
        archived=needs_archive(payloads, compress=job.compress),
    )
    try:
        artifact = await write_artifact(
            payloads,
            job_dir,
            job.file_name,
            FORMAT_EXTENSIONS[job.format],
            compress=job.compress,
        )
        return await registry.update(
            job.id,
            lambda j: j.mark_completed(str(artifact.output_path), artifact.file_size_bytes),
        )
    except BaseException:
        await _discard_partial_artifact(output_path)
        raise


async def _mark_failed(registry: JobRegistry, job_id: str, error: str) -> ExportJob | None:
    try:
        return await registry.update(job_id, lambda j: j.mark_failed(error))
    except ExportNotFoundError:
        logger.info(f"Export {job_id} was deleted before its failure could be recorded")
        return None


async def run_export_job(
    job_id: str,
    *,
    registry: JobRegistry,
    session_factory: async_sessionmaker[AsyncSession],
    export_dir: Path,
    timeout_seconds: float | None = None,
) -> ExportJob | None:
    """Run one export job to a terminal state.

    Counts the matching records, extracts each content type in selection
    order (updating progress after each), encodes, and writes the artifact
    to ``{export_dir}/{job_id}/``. Every failure is recorded on the job
    rather than raised; there are no retries.

    Args:
        job_id: Registry id of a ``processing`` job.
        registry: The job registry.
        session_factory: Factory for content store sessions.
        export_dir: Root directory for artifacts.
        timeout_seconds: Optional deadline for the whole pipeline.

    Returns:
        The final job snapshot, or None if the job no longer exists.
    """
    job = await registry.get(job_id)
    if job is None:
        logger.warning(f"Export {job_id} not found; nothing to run")
        return None

    logger.info(f"Starting export {job_id} (format={job.format}, types={','.join(job.content_types)})")
    try:
        async with asyncio.timeout(timeout_seconds):
            finished = await _run_pipeline(job, registry, session_factory, export_dir)
    except ExportNotFoundError:
        logger.info(f"Export {job_id} was deleted while running; stopped")
        return None
    except ExportCancelledError as exc:
        logger.info(f"Export {job_id} cancelled")
        return await _mark_failed(registry, job_id, str(exc))
    except TimeoutError:
        logger.warning(f"Export {job_id} timed out after {timeout_seconds}s")
        return await _mark_failed(registry, job_id, f"Export timed out after {timeout_seconds} seconds")
    except Exception as exc:
        logger.exception(f"Export {job_id} failed")
        return await _mark_failed(registry, job_id, str(exc) or type(exc).__name__)

    logger.info(f"Export {job_id} completed: {finished.processed_items} item(s), {finished.file_size} bytes")
    return finished


# ---------------------------------------------------------------------------
# Facade
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExportOptions:
    """Static catalog of what can be exported and how."""

    content_types: tuple[ContentTypeInfo, ...]
    formats: tuple[FormatInfo, ...]
    date_ranges: tuple[tuple[str, str], ...]
    statuses: tuple[tuple[str, str], ...]


class ExportService:
    """Operation surface for export jobs.

    Args:
        registry: Authoritative job store.
        runner: Bounded runner that executes the jobs.
        session_factory: Factory for content store sessions.
        export_dir: Root directory for artifacts.
        file_prefix: Stem of the default file name.
        timeout_seconds: Optional per-job deadline.
    """

    def __init__(
        self,
        registry: JobRegistry,
        runner: BoundedTaskRunner,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        export_dir: Path,
        file_prefix: str = "haven_word_church_export",
        timeout_seconds: float | None = None,
    ) -> None:
        self._registry = registry
        self._runner = runner
        self._session_factory = session_factory
        self._export_dir = Path(export_dir)
        self._file_prefix = file_prefix
        self._timeout_seconds = timeout_seconds

    @property
    def registry(self) -> JobRegistry:
        return self._registry

    @property
    def export_dir(self) -> Path:
        return self._export_dir

    def get_options(self) -> ExportOptions:
        return ExportOptions(
            content_types=CONTENT_TYPES,
            formats=FORMATS,
            date_ranges=DATE_RANGE_OPTIONS,
            statuses=STATUS_OPTIONS,
        )

    def _validate(self, content_types: list[str], output_format: str, filters: ExportFilters) -> list[str]:
        if not content_types:
            msg = "At least one content type must be selected"
            raise ExportValidationError(msg)
        unknown = [ct for ct in content_types if not is_supported_content_type(ct)]
        if unknown:
            msg = f"Unsupported content type(s): {', '.join(unknown)}. Supported: {get_supported_content_types()}"
            raise ExportValidationError(msg)
        if output_format not in SUPPORTED_FORMATS:
            msg = f"Unsupported format: {output_format}. Supported: {SUPPORTED_FORMATS}"
            raise ExportValidationError(msg)
        if (
            filters.date_range == DateRangePreset.CUSTOM
            and filters.custom_start_date is not None
            and filters.custom_end_date is not None
            and as_utc(filters.custom_start_date) > as_utc(filters.custom_end_date)
        ):
            msg = "custom_start_date must not be after custom_end_date"
            raise ExportValidationError(msg)
        # Duplicates collapse, selection order is kept
        return list(dict.fromkeys(content_types))

    async def create_export(
        self,
        content_types: list[str],
        output_format: str,
        *,
        filters: ExportFilters | Mapping[str, Any] | None = None,
        include_media: bool = False,
        compress: bool = False,
        custom_file_name: str | None = None,
        created_by: str | None = None,
    ) -> tuple[ExportJob, int]:
        """Validate a request, register the job, and submit it for processing.

        Returns without waiting for the export to run.

        Args:
            content_types: Content-type identifiers, in export order.
            output_format: One of json, csv, xml.
            filters: Filter criteria (dataclass or plain dict).
            include_media: Keep media/attachment fields.
            compress: Package the artifact as a zip.
            custom_file_name: Requested artifact base name.
            created_by: Identifier of the requesting principal.

        Returns:
            Tuple of (job snapshot, estimated seconds).

        Raises:
            ExportValidationError: If the request is invalid; no job is created.
        """
        if not isinstance(filters, ExportFilters):
            try:
                filters = ExportFilters.from_dict(dict(filters or {}))
            except (TypeError, ValueError) as exc:
                msg = f"Invalid filters: {exc}"
                raise ExportValidationError(msg) from exc

        selected = self._validate(list(content_types), output_format, filters)
        job = ExportJob(
            id=uuid.uuid4().hex,
            content_types=selected,
            format=output_format,
            file_name=sanitize_file_name(custom_file_name) or default_file_name(self._file_prefix),
            filters=filters,
            include_media=include_media,
            compress=compress,
            created_by=created_by,
        )
        job = await self._registry.insert(job)
        self._runner.submit_task(
            run_export_job(
                job.id,
                registry=self._registry,
                session_factory=self._session_factory,
                export_dir=self._export_dir,
                timeout_seconds=self._timeout_seconds,
            ),
            task_id=job.id,
        )
        logger.info(f"Created export job {job.id} (format={output_format}, types={','.join(selected)})")
        return job, estimate_export_seconds(selected)

    async def get_status(self, job_id: str) -> ExportJob:
        """Return a snapshot of the job.

        Raises:
            ExportNotFoundError: If the job does not exist.
        """
        job = await self._registry.get(job_id)
        if job is None:
            raise ExportNotFoundError(job_id)
        return job

    async def get_download(self, job_id: str) -> tuple[ExportJob, Path]:
        """Resolve the artifact of a completed job.

        Raises:
            ExportNotFoundError: If the job or its artifact file does not exist.
            ExportNotReadyError: If the job has not completed.
        """
        job = await self.get_status(job_id)
        if job.status is not ExportStatus.COMPLETED:
            raise ExportNotReadyError(job_id, job.status)
        if not job.file_path or not await aiofiles.os.path.exists(job.file_path):
            raise ExportNotFoundError(job_id, "Export file not found")
        return job, Path(job.file_path)

    async def list_history(self, page: int = 1, page_size: int = 10) -> tuple[list[ExportJob], int]:
        """List jobs newest first.

        Returns:
            Tuple of (jobs, total count).
        """
        return await self._registry.list(page=page, page_size=page_size)

    async def cancel_export(self, job_id: str) -> ExportJob:
        """Ask a running job to stop at its next content-type boundary.

        Terminal jobs are returned unchanged.

        Raises:
            ExportNotFoundError: If the job does not exist.
        """

        def _request_cancel(job: ExportJob) -> None:
            if not job.is_terminal:
                job.request_cancel()

        job = await self._registry.update(job_id, _request_cancel)
        if job.cancel_requested and not job.is_terminal:
            logger.info(f"Cancellation requested for export {job_id}")
        return job

    async def delete_export(self, job_id: str) -> str | None:
        """Remove the job's artifact and its registry entry.

        A running job stops at its next checkpoint once its record is gone.

        Returns:
            Warning message if the artifact could not be removed, else None.

        Raises:
            ExportNotFoundError: If the job does not exist.
        """
        warning = await self._registry.delete(job_id)
        logger.info(f"Deleted export job {job_id}")
        return warning
