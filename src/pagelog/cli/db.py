"""
CLI: ``pagelog db`` — database management commands.
"""

from __future__ import annotations

import typer

from pagelog.cli.utils import console, get_engine
from pagelog.core.orm import init_db

app = typer.Typer(no_args_is_help=True)


@app.command()
def init(
    database: str | None = typer.Option(None, "--database", "-d", help="SQLAlchemy database URL"),
) -> None:
    """Create the page_requests table if it does not exist."""
    engine = get_engine(database)
    try:
        init_db(engine)
    finally:
        engine.dispose()
    console.print(f"[green]Initialised[/green] {engine.url.render_as_string(hide_password=True)}")
