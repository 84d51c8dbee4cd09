"""FastAPI application factory.

Creates the FastAPI app with lifespan management, exception handlers,
and OpenAPI metadata.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from haven_api.core.background import BoundedTaskRunner
from haven_api.core.config import Settings, get_settings
from haven_api.core.database import dispose_engine, get_session_factory, init_engine
from haven_api.core.logging import setup_logging
from haven_api.lib.export_jobs import JobRegistry
from haven_api.services.export_service import ExportService


def build_export_service(settings: Settings, runner: BoundedTaskRunner) -> ExportService:
    """Wire an export service to a fresh registry and the current session factory."""
    return ExportService(
        JobRegistry(),
        runner,
        get_session_factory(),
        export_dir=Path(settings.export_dir),
        file_prefix=settings.export_file_prefix,
        timeout_seconds=settings.export_job_timeout_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifecycle: engine, export runner, and export service."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_dir)
    init_engine(settings.database_url, echo=False)

    runner = BoundedTaskRunner(max_concurrency=settings.export_max_workers)
    app.state.task_runner = runner
    app.state.export_service = build_export_service(settings, runner)
    logger.info(f"Export service ready (dir={settings.export_dir}, workers={settings.export_max_workers})")

    yield

    await runner.shutdown()
    await dispose_engine()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Haven API",
        description="Content export and backup service for the Haven Word Church platform",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Register exception handlers
    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"detail": str(exc)},
        )

    # Register middleware and routers
    from haven_api.api.router import create_router, setup_middleware

    setup_middleware(app, settings)
    app.include_router(create_router(settings))

    return app
