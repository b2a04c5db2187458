"""Response schema for recorded page requests."""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict


class PageRequestOut(BaseModel):
    """One ``page_requests`` row as returned by the JSON endpoints."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    status: int | None = None
    http_method: str | None = None
    path: str | None = None
    http_format: str | None = None
    controller_name: str | None = None
    action_name: str | None = None
    view_runtime: float | None = None
    db_runtime: float | None = None
    duration: float
    created_at: datetime.datetime
    updated_at: datetime.datetime
