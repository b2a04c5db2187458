"""
CLI: ``pagelog serve`` — start the HTTP server.
"""

from __future__ import annotations

import typer
import uvicorn

from pagelog.cli.utils import console
from pagelog.core.settings import get_settings

app = typer.Typer(no_args_is_help=True)


@app.command("start")
def start(
    host: str | None = typer.Option(None, "--host", "-h", help="Bind address (default: PAGELOG_HOST)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port (default: PAGELOG_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on changes"),
    workers: int = typer.Option(1, "--workers", "-w", help="Number of workers"),
    log_level: str | None = typer.Option(
        None, "--log-level", help="uvicorn log level (default: PAGELOG_LOG_LEVEL)"
    ),
) -> None:
    """Start the pagelog server; every request it answers is recorded."""
    settings = get_settings()
    host = host or settings.host
    port = port or settings.port
    log_level = log_level or settings.log_level.lower()

    console.print(f"[bold green]Starting pagelog[/bold green] on {host}:{port}")
    uvicorn.run(
        "pagelog.api:create_server",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        workers=workers,
        log_level=log_level,
    )
