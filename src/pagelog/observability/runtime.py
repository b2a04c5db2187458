"""
Per-request runtime collection — ``db_runtime`` and ``view_runtime``.

A :class:`RuntimeCollector` is bound to a ``ContextVar`` for the length of
one request cycle.  SQLAlchemy cursor hooks add each statement's elapsed
time to ``db_runtime``; :func:`measure_view` adds rendering time to
``view_runtime``.  Both stay ``None`` until their phase is entered, so a
redirect that never renders reports no view runtime at all.

Sync endpoints run on worker threads with a *copy* of the request's
context.  The copy still points at the same collector object, which is
why the collector is mutated in place rather than replaced.

Tags:
    pagelog, observability, runtime, sqlalchemy, contextvars

Doc-Types:
    api-reference
"""

from __future__ import annotations

import re
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import event as sa_event
from sqlalchemy.engine import Engine

from pagelog.core.events import SQL_EXECUTED, Event, Notifier

__all__ = [
    "RuntimeCollector",
    "collecting",
    "current_collector",
    "instrument_engine",
    "measure_view",
]

_QUERY_START_KEY = "pagelog_query_start"

_current: ContextVar[RuntimeCollector | None] = ContextVar("pagelog_runtime", default=None)


@dataclass
class RuntimeCollector:
    """Accumulates milliseconds spent in the database and in rendering."""

    db_runtime: float | None = None
    view_runtime: float | None = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def add_db(self, elapsed_ms: float) -> None:
        with self._lock:
            self.db_runtime = (self.db_runtime or 0.0) + elapsed_ms

    def add_view(self, elapsed_ms: float) -> None:
        with self._lock:
            self.view_runtime = (self.view_runtime or 0.0) + elapsed_ms


def current_collector() -> RuntimeCollector | None:
    """The collector bound to the running request cycle, if any."""
    return _current.get()


@contextmanager
def collecting() -> Iterator[RuntimeCollector]:
    """Bind a fresh collector for the enclosed block."""
    collector = RuntimeCollector()
    token = _current.set(collector)
    try:
        yield collector
    finally:
        _current.reset(token)


@contextmanager
def measure_view() -> Iterator[None]:
    """Add the enclosed block's elapsed time to the current ``view_runtime``."""
    start = time.perf_counter()
    try:
        yield
    finally:
        collector = _current.get()
        if collector is not None:
            collector.add_view((time.perf_counter() - start) * 1000)


def squish(sql: str) -> str:
    """Collapse runs of whitespace so a statement fits on one log line."""
    return re.sub(r"\s+", " ", sql).strip()


def instrument_engine(engine: Engine, notifier: Notifier | None = None) -> None:
    """Time every statement *engine* executes.

    Each statement's duration, failed ones included, is added to the
    current collector's ``db_runtime``.  With a *notifier*, each successful
    statement is also published as an ``sql.executed`` event when someone is
    listening.
    """

    @sa_event.listens_for(engine, "before_cursor_execute")
    def _before_cursor_execute(
        conn: Any, cursor: Any, statement: str, parameters: Any, context: Any, executemany: bool
    ) -> None:
        conn.info.setdefault(_QUERY_START_KEY, []).append((cursor, time.perf_counter()))

    @sa_event.listens_for(engine, "after_cursor_execute")
    def _after_cursor_execute(
        conn: Any, cursor: Any, statement: str, parameters: Any, context: Any, executemany: bool
    ) -> None:
        _, started = conn.info[_QUERY_START_KEY].pop()
        elapsed_ms = (time.perf_counter() - started) * 1000

        collector = _current.get()
        if collector is not None:
            collector.add_db(elapsed_ms)

        if notifier is not None and notifier.listening(SQL_EXECUTED):
            notifier.publish(
                Event(
                    name=SQL_EXECUTED,
                    payload={"sql": squish(statement), "executemany": executemany},
                    duration=elapsed_ms,
                )
            )

    @sa_event.listens_for(engine, "handle_error")
    def _handle_error(exception_context: Any) -> None:
        # after_cursor_execute never fires for a failed statement.
        conn = exception_context.connection
        if conn is None:
            return
        starts = conn.info.get(_QUERY_START_KEY)
        if not starts or starts[-1][0] is not exception_context.cursor:
            return
        _, started = starts.pop()
        collector = _current.get()
        if collector is not None:
            collector.add_db((time.perf_counter() - started) * 1000)
