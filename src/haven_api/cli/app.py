"""Typer CLI root application with serve command."""

import typer

from haven_api.core.config import get_settings
from haven_api.core.logging import setup_logging

app = typer.Typer(name="haven-api", help="Haven Word Church content export CLI")


@app.callback()
def _main_callback() -> None:
    """Initialize logging for all CLI commands."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)


@app.command()
def serve(
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload for development"),
    host: str = typer.Option("0.0.0.0", "--host", help="Bind host"),  # noqa: S104
    port: int = typer.Option(8000, "--port", help="Bind port"),
) -> None:
    """Start the API server."""
    import uvicorn

    uvicorn.run(
        "haven_api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


def _register_subcommands() -> None:
    """Register all CLI subcommand groups."""
    from haven_api.cli.export_cmd import export_app

    app.add_typer(export_app, name="export", help="Content export commands")


_register_subcommands()
