"""Health endpoints.

``GET /health``         Primary health — checks the database.
``GET /health/ready``   Readiness probe — 503 when the database is down.
``GET /health/live``    Liveness probe — always 200.
"""

from __future__ import annotations

import time
from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

# Set when the service first imports this module.
_START_TIME = time.monotonic()

router = APIRouter()


class CheckResult(BaseModel):
    """Result of a single dependency check."""

    status: Literal["healthy", "unhealthy"]
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    status: Literal["healthy", "unhealthy"] = "healthy"
    service: str = ""
    version: str = ""
    uptime_s: float = Field(default_factory=lambda: round(time.monotonic() - _START_TIME, 1))
    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    checks: dict[str, CheckResult] = Field(default_factory=dict)


def _check_database(request: Request) -> CheckResult:
    start = time.monotonic()
    try:
        with request.app.state.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        return CheckResult(
            status="unhealthy",
            latency_ms=round((time.monotonic() - start) * 1000, 2),
            error=str(exc)[:200],
        )
    return CheckResult(status="healthy", latency_ms=round((time.monotonic() - start) * 1000, 2))


def _health(request: Request) -> JSONResponse:
    settings = request.app.state.settings
    database = _check_database(request)
    body = HealthResponse(
        status=database.status,
        service=settings.api_title,
        version=settings.api_version,
        checks={"database": database},
    )
    code = 503 if body.status == "unhealthy" else 200
    return JSONResponse(content=body.model_dump(), status_code=code)


@router.get("/health", response_model=HealthResponse)
def health(request: Request) -> JSONResponse:
    return _health(request)


@router.get("/health/ready", response_model=HealthResponse)
def readiness(request: Request) -> JSONResponse:
    return _health(request)


@router.get("/health/live")
def liveness() -> dict[str, str]:
    return {"status": "alive"}
