"""
Event recorder — turns ``request.completed`` events into ``page_requests`` rows.

Manifesto:
    One finished request, one row.  The recorder copies nine fields from
    the event into a new record and writes it synchronously.  A write
    that fails is raised to the publisher, never retried and never
    swallowed: the request it describes has already been answered, so
    the only thing at stake is the visibility of the failure.

Field mapping::

    payload["status"]        → status
    payload["method"]        → http_method
    payload["path"]          → path
    payload["format"]        → http_format
    payload["controller"]    → controller_name
    payload["action"]        → action_name
    payload["view_runtime"]  → view_runtime
    payload["db_runtime"]    → db_runtime
    event.duration           → duration

Every invocation opens its own session from the factory and shares
nothing else with other invocations, so concurrent request cycles insert
independently.

Tags:
    pagelog, observability, recorder, instrumentation, sqlalchemy

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pagelog.core.errors import PayloadError, RecordWriteError
from pagelog.core.events import REQUEST_COMPLETED, Event, EventHandler
from pagelog.core.logging import get_logger
from pagelog.core.orm.tables import PageRequestTable
from pagelog.observability.subscriber import Subscriber

__all__ = ["EventRecorder", "ProcessActionPayload"]

log = get_logger(__name__)


class ProcessActionPayload(BaseModel):
    """Typed view of a ``request.completed`` payload.

    Every field is optional; a key missing from the payload becomes ``None``.
    Keys outside this set (``exception``, ``request_id``, ...) are ignored.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    status: int | None = None
    method: str | None = None
    path: str | None = None
    format: str | None = None
    controller: str | None = None
    action: str | None = None
    view_runtime: float | None = None
    db_runtime: float | None = None

    @classmethod
    def parse(cls, payload: Mapping[str, Any]) -> ProcessActionPayload:
        """Validate *payload*, raising :class:`PayloadError` on bad types."""
        try:
            return cls.model_validate(dict(payload))
        except pydantic.ValidationError as exc:
            fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
            raise PayloadError(
                f"invalid request payload: {', '.join(fields)}", cause=exc
            ).with_context(fields=fields)


class EventRecorder(Subscriber):
    """Persist one :class:`PageRequestTable` row per completed request.

    Example::

        recorder = EventRecorder(pagelog_session_factory(engine))
        recorder.register(notifier)
        ...
        recorder.unregister()
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        super().__init__()
        self._session_factory = session_factory

    def subscriptions(self) -> dict[str, EventHandler]:
        return {REQUEST_COMPLETED: self}

    def __call__(self, event: Event) -> None:
        try:
            parsed = ProcessActionPayload.parse(event.payload)
        except PayloadError as exc:
            exc.with_context(
                event_name=event.name,
                event_id=event.event_id,
                transaction_id=event.transaction_id,
            )
            raise
        self._write(parsed, event.duration, event)

    def record(self, payload: Mapping[str, Any], duration: float) -> PageRequestTable:
        """Write one record directly from a payload mapping and a duration (ms)."""
        return self._write(ProcessActionPayload.parse(payload), duration, None)

    def _write(
        self,
        payload: ProcessActionPayload,
        duration: float,
        event: Event | None,
    ) -> PageRequestTable:
        row = PageRequestTable(
            status=payload.status,
            http_method=payload.method,
            path=payload.path,
            http_format=payload.format,
            controller_name=payload.controller,
            action_name=payload.action,
            view_runtime=payload.view_runtime,
            db_runtime=payload.db_runtime,
            duration=duration,
        )

        with self._session_factory() as session:
            session.add(row)
            try:
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                error = RecordWriteError(
                    f"could not persist page request for {payload.path!r}", cause=exc
                ).with_context(path=payload.path)
                if event is not None:
                    error.with_context(
                        event_name=event.name,
                        event_id=event.event_id,
                        transaction_id=event.transaction_id,
                    )
                log.error("page_request_write_failed", **error.to_dict())
                raise error from exc
            log.debug("page_request_recorded", id=row.id, path=row.path, duration=duration)

        return row
