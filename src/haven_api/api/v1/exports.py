"""Admin export endpoints: options, create, status, history, download, cancel, delete."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import FileResponse

from haven_api.core.config import Settings, get_settings
from haven_api.core.dependencies import get_export_service, require_role
from haven_api.lib.export_jobs import ExportJob, ExportNotFoundError, ExportNotReadyError, ExportValidationError
from haven_api.lib.exporter import ARCHIVE_EXTENSION, FORMAT_MEDIA_TYPES
from haven_api.models.user import User
from haven_api.schemas.common import PaginationMeta
from haven_api.schemas.export import (
    ExportCreatedResponse,
    ExportDeletedResponse,
    ExportJobStatusResponse,
    ExportJobSummary,
    ExportOptionsResponse,
    ExportRequest,
    PaginatedExportHistoryResponse,
)
from haven_api.services.export_service import ExportService

exports_router = APIRouter(prefix="/admin/export", tags=["exports"])


def _build_download_url(job_id: str, settings: Settings) -> str:
    """Build the download URL for a completed export."""
    return f"{settings.api_v1_prefix}/admin/export/{job_id}/download"


def _job_to_response(job: ExportJob, settings: Settings) -> ExportJobStatusResponse:
    """Convert an ExportJob to a status response with download URL."""
    response = ExportJobStatusResponse.model_validate(job)
    if job.download_available:
        response.download_url = _build_download_url(job.id, settings)
    return response


def _not_found(exc: ExportNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@exports_router.get(
    "/options",
    response_model=ExportOptionsResponse,
)
async def get_export_options(
    service: ExportService = Depends(get_export_service),
    _current_user: User = Depends(require_role("admin")),
) -> ExportOptionsResponse:
    """List exportable content types, formats, and filter presets (admin only)."""
    return ExportOptionsResponse.from_options(service.get_options())


@exports_router.post(
    "",
    response_model=ExportCreatedResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def request_export(
    request: ExportRequest,
    service: ExportService = Depends(get_export_service),
    current_user: User = Depends(require_role("admin")),
) -> ExportCreatedResponse:
    """Request a content export (admin only).

    The job runs in the background; poll the status endpoint for progress.
    """
    try:
        job, estimated_seconds = await service.create_export(
            request.content_types,
            request.format,
            filters=request.filters.to_filters(),
            include_media=request.include_media,
            compress=request.compress,
            custom_file_name=request.custom_file_name,
            created_by=str(current_user.id),
        )
    except ExportValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return ExportCreatedResponse(job_id=job.id, status=job.status, estimated_seconds=estimated_seconds)


@exports_router.get(
    "/history",
    response_model=PaginatedExportHistoryResponse,
)
async def list_export_history(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    service: ExportService = Depends(get_export_service),
    _current_user: User = Depends(require_role("admin")),
) -> PaginatedExportHistoryResponse:
    """List export jobs, newest first."""
    jobs, total = await service.list_history(page=page, page_size=page_size)
    return PaginatedExportHistoryResponse(
        items=[ExportJobSummary.model_validate(job) for job in jobs],
        pagination=PaginationMeta.build(total=total, page=page, page_size=page_size),
    )


@exports_router.get(
    "/{job_id}",
    response_model=ExportJobStatusResponse,
)
async def get_export_status(
    job_id: str,
    service: ExportService = Depends(get_export_service),
    _current_user: User = Depends(require_role("admin")),
    settings: Settings = Depends(get_settings),
) -> ExportJobStatusResponse:
    """Get export job status and progress."""
    try:
        job = await service.get_status(job_id)
    except ExportNotFoundError as exc:
        raise _not_found(exc) from exc
    return _job_to_response(job, settings)


@exports_router.get(
    "/{job_id}/download",
)
async def download_export(
    job_id: str,
    service: ExportService = Depends(get_export_service),
    _current_user: User = Depends(require_role("admin")),
) -> FileResponse:
    """Download a completed export artifact."""
    try:
        job, file_path = await service.get_download(job_id)
    except ExportNotFoundError as exc:
        raise _not_found(exc) from exc
    except ExportNotReadyError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    if file_path.suffix == ARCHIVE_EXTENSION:
        media_type = FORMAT_MEDIA_TYPES["zip"]
    else:
        media_type = FORMAT_MEDIA_TYPES.get(job.format, "application/octet-stream")

    return FileResponse(
        path=file_path,
        media_type=media_type,
        filename=file_path.name,
    )


@exports_router.post(
    "/{job_id}/cancel",
    response_model=ExportJobStatusResponse,
)
async def cancel_export(
    job_id: str,
    service: ExportService = Depends(get_export_service),
    _current_user: User = Depends(require_role("admin")),
    settings: Settings = Depends(get_settings),
) -> ExportJobStatusResponse:
    """Request cancellation of a running export."""
    try:
        job = await service.cancel_export(job_id)
    except ExportNotFoundError as exc:
        raise _not_found(exc) from exc
    return _job_to_response(job, settings)


@exports_router.delete(
    "/{job_id}",
    response_model=ExportDeletedResponse,
)
async def delete_export(
    job_id: str,
    service: ExportService = Depends(get_export_service),
    _current_user: User = Depends(require_role("admin")),
) -> ExportDeletedResponse:
    """Delete an export job and its artifact."""
    try:
        warning = await service.delete_export(job_id)
    except ExportNotFoundError as exc:
        raise _not_found(exc) from exc
    return ExportDeletedResponse(warning=warning)
