"""
FastAPI dependency injection — per-request session and format.

Usage in routers::

    from pagelog.api.deps import DbSession, ResponseFormat

    @router.get("/things")
    def list_things(session: DbSession, fmt: ResponseFormat):
        ...
"""

from __future__ import annotations

from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from pagelog.api.formats import negotiate_format


def get_session(request: Request) -> Generator[Session, None, None]:
    """Yield a session from the app's session factory for the request lifespan."""
    with request.app.state.session_factory() as session:
        yield session


def get_format(request: Request) -> str:
    """Negotiated response format (``html`` or ``json``)."""
    return negotiate_format(request.query_params.get("format"), request.headers.get("accept"))


DbSession = Annotated[Session, Depends(get_session)]
ResponseFormat = Annotated[str, Depends(get_format)]
