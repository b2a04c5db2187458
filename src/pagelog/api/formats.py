"""Response format negotiation — ``html`` or ``json``."""

from __future__ import annotations

from starlette.datastructures import Headers, QueryParams
from starlette.types import Scope

HTML = "html"
JSON = "json"

SUPPORTED_FORMATS = (HTML, JSON)


def negotiate_format(query_format: str | None, accept: str | None) -> str:
    """Pick the response format for a request.

    An explicit ``?format=`` wins when it names a supported format, then an
    ``Accept`` header asking for ``application/json``; everything else is
    ``html``.
    """
    if query_format:
        wanted = query_format.lower()
        if wanted in SUPPORTED_FORMATS:
            return wanted
    if accept and "application/json" in accept.lower():
        return JSON
    return HTML


def format_for_scope(scope: Scope) -> str:
    """:func:`negotiate_format` applied to a raw ASGI scope."""
    query = QueryParams(scope.get("query_string", b""))
    headers = Headers(scope=scope)
    return negotiate_format(query.get("format"), headers.get("accept"))
