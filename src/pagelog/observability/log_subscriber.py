"""Log one structured line per completed request (and, optionally, per SQL statement)."""

from __future__ import annotations

from typing import Any

from pagelog.core.events import REQUEST_COMPLETED, SQL_EXECUTED, Event, EventHandler
from pagelog.core.logging import get_logger
from pagelog.observability.subscriber import Subscriber

__all__ = ["LogSubscriber"]


class LogSubscriber(Subscriber):
    """Writes ``request_completed`` at INFO and ``sql_executed`` at DEBUG."""

    def __init__(self, *, log_sql: bool = False, logger: Any = None) -> None:
        super().__init__()
        self._log_sql = log_sql
        self._log = logger or get_logger(__name__)

    def subscriptions(self) -> dict[str, EventHandler]:
        handlers: dict[str, EventHandler] = {REQUEST_COMPLETED: self.request_completed}
        if self._log_sql:
            handlers[SQL_EXECUTED] = self.sql_executed
        return handlers

    def request_completed(self, event: Event) -> None:
        payload = event.payload
        self._log.info(
            "request_completed",
            transaction_id=event.transaction_id,
            duration=round(event.duration, 2),
            status=payload.get("status"),
            method=payload.get("method"),
            path=payload.get("path"),
            format=payload.get("format"),
            controller=payload.get("controller"),
            action=payload.get("action"),
            view_runtime=payload.get("view_runtime"),
            db_runtime=payload.get("db_runtime"),
            exception=payload.get("exception"),
        )

    def sql_executed(self, event: Event) -> None:
        self._log.debug("sql_executed", duration=round(event.duration, 3), sql=event.payload.get("sql"))
