"""
Root Typer application for the pagelog CLI.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version

import typer
from typer import Typer

from pagelog.cli.db import app as db_app
from pagelog.cli.requests import app as requests_app
from pagelog.cli.serve import app as serve_app

app = Typer(
    name="pagelog",
    help="pagelog — record every completed HTTP request as a durable row.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        try:
            v = pkg_version("pagelog")
        except PackageNotFoundError:
            from pagelog import __version__ as v
        typer.echo(f"pagelog {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """pagelog CLI — manage the database, inspect records, run the server."""


app.add_typer(db_app, name="db", help="Database operations.")
app.add_typer(requests_app, name="requests", help="Recorded page requests.")
app.add_typer(serve_app, name="serve", help="Start the HTTP server.")
