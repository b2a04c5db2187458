"""
CLI utility helpers — output formatting and database access.
"""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.table import Table
from sqlalchemy.engine import Engine

from pagelog.core.orm import create_pagelog_engine
from pagelog.core.settings import get_settings

console = Console()
err_console = Console(stderr=True)


# ── Database helper ──────────────────────────────────────────────────────


def get_engine(database_url: str | None = None) -> Engine:
    """Engine for *database_url*, defaulting to ``PAGELOG_DATABASE_URL``."""
    return create_pagelog_engine(database_url or get_settings().database_url)


# ── Output helpers ───────────────────────────────────────────────────────


def output_rows(rows: list[dict[str, Any]], *, as_json: bool = False, title: str = "") -> None:
    """Render a list of dicts as JSON or as a Rich table."""
    if as_json:
        console.print_json(json.dumps(rows, default=str))
        return

    if not rows:
        console.print("[dim]No items.[/dim]")
        return

    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in rows[0]:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*("" if v is None else str(v) for v in row.values()))
    console.print(table)


def output_dict(data: dict[str, Any], *, as_json: bool = False, title: str = "") -> None:
    """Render a single dict as JSON or as key-value pairs."""
    if as_json:
        console.print_json(json.dumps(data, default=str))
        return

    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {v}")
