"""
CLI: ``pagelog requests`` — inspect recorded page requests.
"""

from __future__ import annotations

import typer
from sqlalchemy import select

from pagelog.api.schemas.page_requests import PageRequestOut
from pagelog.cli.utils import err_console, get_engine, output_dict, output_rows
from pagelog.core.orm import PageRequestTable, pagelog_session_factory

app = typer.Typer(no_args_is_help=True)

_LIST_COLUMNS = (
    "id",
    "status",
    "http_method",
    "path",
    "controller_name",
    "action_name",
    "view_runtime",
    "db_runtime",
    "duration",
    "created_at",
)


@app.command("list")
def list_requests(
    limit: int = typer.Option(20, "--limit", "-n", min=1, help="Number of records"),
    database: str | None = typer.Option(None, "--database", "-d", help="SQLAlchemy database URL"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Show the most recent page requests, newest first."""
    engine = get_engine(database)
    try:
        with pagelog_session_factory(engine)() as session:
            rows = session.scalars(
                select(PageRequestTable).order_by(PageRequestTable.id.desc()).limit(limit)
            ).all()
            data = [PageRequestOut.model_validate(row).model_dump(mode="json") for row in rows]
    finally:
        engine.dispose()

    if not json_out:
        data = [{key: item[key] for key in _LIST_COLUMNS} for item in data]
    output_rows(data, as_json=json_out, title="Page Requests")


@app.command("show")
def show_request(
    page_request_id: int = typer.Argument(..., help="Record id"),
    database: str | None = typer.Option(None, "--database", "-d", help="SQLAlchemy database URL"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Show one page request."""
    engine = get_engine(database)
    try:
        with pagelog_session_factory(engine)() as session:
            row = session.get(PageRequestTable, page_request_id)
            if row is None:
                err_console.print(f"[bold red]Error[/bold red]: page request {page_request_id} not found")
                raise typer.Exit(code=1)
            title = str(row)
            data = PageRequestOut.model_validate(row).model_dump(mode="json")
    finally:
        engine.dispose()

    output_dict(data, as_json=json_out, title=title)
