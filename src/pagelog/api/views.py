"""HTML rendering for recorded page requests."""

from __future__ import annotations

from collections.abc import Sequence
from html import escape

from pagelog.core.orm.tables import PageRequestTable

COLUMNS = (
    "status",
    "http_method",
    "path",
    "http_format",
    "controller_name",
    "action_name",
    "view_runtime",
    "db_runtime",
    "duration",
    "created_at",
)


def _cell(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        return f"{value:.2f}"
    return escape(str(value))


def _page(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html>\n"
        f"<html><head><meta charset=\"utf-8\"><title>{escape(title)}</title></head>\n"
        f"<body>\n<h1>{escape(title)}</h1>\n{body}\n</body></html>\n"
    )


def render_index(rows: Sequence[PageRequestTable]) -> str:
    header = "".join(f"<th>{name}</th>" for name in COLUMNS)
    lines = []
    for row in rows:
        cells = "".join(f"<td>{_cell(getattr(row, name))}</td>" for name in COLUMNS)
        lines.append(f"<tr><td><a href=\"/page_requests/{row.id}\">{row.id}</a></td>{cells}</tr>")
    table = f"<table>\n<tr><th>id</th>{header}</tr>\n" + "\n".join(lines) + "\n</table>"
    return _page("Page requests", table)


def render_show(row: PageRequestTable) -> str:
    items = "\n".join(
        f"<dt>{name}</dt><dd>{_cell(getattr(row, name))}</dd>" for name in COLUMNS
    )
    body = (
        f"<p>{escape(str(row))}</p>\n<dl>\n{items}\n</dl>\n"
        "<p><a href=\"/page_requests\">Back</a></p>"
    )
    return _page(f"Page request {row.id}", body)
