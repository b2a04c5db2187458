"""
Page requests router — read-only views over the ``page_requests`` ledger.

Records are written only by the recorder, so there is no create, update
or delete endpoint.  Both endpoints render HTML or JSON depending on the
negotiated format, and rendering is timed into the request's
``view_runtime``.

Endpoints:
    GET /page_requests          Newest records first (limit / offset)
    GET /page_requests/{id}     One record
"""

from __future__ import annotations

from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response
from sqlalchemy import select

from pagelog.api.deps import DbSession, ResponseFormat
from pagelog.api.formats import JSON
from pagelog.api.middleware.errors import problem_response
from pagelog.api.schemas.page_requests import PageRequestOut
from pagelog.api.views import render_index, render_show
from pagelog.core.orm.tables import PageRequestTable
from pagelog.observability.runtime import measure_view

router = APIRouter()


@router.get("/page_requests", response_model=list[PageRequestOut])
def index(
    session: DbSession,
    fmt: ResponseFormat,
    limit: int = Query(50, ge=1, le=1000, description="Maximum records to return"),
    offset: int = Query(0, ge=0, description="Records to skip"),
) -> Response:
    """List recorded requests, newest first."""
    rows = session.scalars(
        select(PageRequestTable)
        .order_by(PageRequestTable.id.desc())
        .limit(limit)
        .offset(offset)
    ).all()

    with measure_view():
        if fmt == JSON:
            return JSONResponse(
                [PageRequestOut.model_validate(row).model_dump(mode="json") for row in rows]
            )
        return HTMLResponse(render_index(rows))


@router.get("/page_requests/{page_request_id}", response_model=PageRequestOut)
def show(
    page_request_id: int,
    request: Request,
    session: DbSession,
    fmt: ResponseFormat,
) -> Response:
    """Show one recorded request."""
    row = session.get(PageRequestTable, page_request_id)
    if row is None:
        return problem_response(
            status=404,
            title="Not Found",
            detail=f"page request {page_request_id} does not exist",
            instance=str(request.url),
        )

    with measure_view():
        if fmt == JSON:
            return JSONResponse(PageRequestOut.model_validate(row).model_dump(mode="json"))
        return HTMLResponse(render_show(row))
