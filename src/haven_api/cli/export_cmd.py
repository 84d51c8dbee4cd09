"""Export CLI commands: run an export inline, list export options."""

import asyncio
from pathlib import Path

import typer

from haven_api.lib.export_jobs import ExportJob, ExportStatus

export_app = typer.Typer()


@export_app.command("run")
def export_run(
    content_types: list[str] = typer.Option(..., "--type", "-t", help="Content type to export (repeatable)"),
    output_format: str = typer.Option("json", "--format", help="Output format (json, csv, xml)"),
    date_range: str = typer.Option("all", "--date-range", help="Date range preset"),
    status_filter: str | None = typer.Option(None, "--status", help="Filter by content status"),
    include_media: bool = typer.Option(False, "--include-media", help="Keep media and attachment fields"),
    compress: bool = typer.Option(False, "--compress", help="Package the export as a zip"),
    file_name: str | None = typer.Option(None, "--name", help="Artifact base name"),
    output: Path | None = typer.Option(None, "--output", help="Output directory"),
) -> None:
    """Export content to a file without going through the API."""
    filters = {"date_range": date_range}
    if status_filter:
        filters["status"] = status_filter

    job = asyncio.run(
        _export_run(content_types, output_format, filters, include_media, compress, file_name, output),
    )
    typer.echo(f"\nExport {job.status}:")
    typer.echo(f"  Items:      {job.processed_items}/{job.total_items or 0}")
    typer.echo(f"  File size:  {job.file_size or 0} bytes")
    typer.echo(f"  File path:  {job.file_path or 'N/A'}")
    if job.status is not ExportStatus.COMPLETED:
        typer.echo(f"  Error:      {job.error}", err=True)
        raise typer.Exit(code=1)


async def _export_run(
    content_types: list[str],
    output_format: str,
    filters: dict,
    include_media: bool,
    compress: bool,
    file_name: str | None,
    output_dir: Path | None,
) -> ExportJob:
    """Async implementation of export run."""
    from haven_api.core.background import BoundedTaskRunner
    from haven_api.core.config import get_settings
    from haven_api.core.database import dispose_engine, get_session_factory, init_engine
    from haven_api.lib.export_jobs import ExportValidationError, JobRegistry
    from haven_api.services.export_service import ExportService

    settings = get_settings()
    init_engine(settings.database_url)

    runner = BoundedTaskRunner(max_concurrency=1)
    service = ExportService(
        JobRegistry(),
        runner,
        get_session_factory(),
        export_dir=output_dir or Path(settings.export_dir),
        file_prefix=settings.export_file_prefix,
        timeout_seconds=settings.export_job_timeout_seconds,
    )

    try:
        try:
            job, _estimate = await service.create_export(
                content_types,
                output_format,
                filters=filters,
                include_media=include_media,
                compress=compress,
                custom_file_name=file_name,
            )
        except ExportValidationError as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(code=1) from exc

        typer.echo(f"Export job created: {job.id}")
        typer.echo(f"Format: {output_format}")
        typer.echo("Processing...")
        await runner.wait_all()
        return await service.get_status(job.id)
    finally:
        await runner.shutdown()
        await dispose_engine()


@export_app.command("options")
def export_options() -> None:
    """List exportable content types, formats, and filter presets."""
    from haven_api.lib.content_extractor import CONTENT_TYPES, DATE_RANGE_OPTIONS, STATUS_OPTIONS
    from haven_api.lib.exporter import FORMATS

    typer.echo("Content types:")
    for info in CONTENT_TYPES:
        typer.echo(f"  {info.id:<12} {info.name} ({info.estimated_size}): {', '.join(info.fields)}")
    typer.echo("\nFormats:")
    for fmt in FORMATS:
        typer.echo(f"  {fmt.id:<12} {fmt.name} ({fmt.extension}): {fmt.description}")
    typer.echo("\nDate ranges:")
    for value, label in DATE_RANGE_OPTIONS:
        typer.echo(f"  {value:<12} {label}")
    typer.echo("\nStatuses:")
    for value, label in STATUS_OPTIONS:
        typer.echo(f"  {value:<12} {label}")
