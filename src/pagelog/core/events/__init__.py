"""Lifecycle events and the in-process notifier.

Why This Package Exists
-----------------------
The HTTP host knows when a request-handling cycle has finished; the
recorder knows how to persist it.  Neither should import the other.  An
``Event`` is the typed notification passed between them, and a
``Notifier`` is the explicit channel it travels through.

There is deliberately no process-wide default notifier: the server's
composition root creates one, hands it to the middleware that publishes
and to the subscribers that listen, and drops it on shutdown.

Usage::

    from pagelog.core.events import REQUEST_COMPLETED, Notifier

    notifier = Notifier()

    def handler(event):
        print(event.name, event.duration, event.payload["path"])

    notifier.subscribe(REQUEST_COMPLETED, handler)

    with notifier.instrument(REQUEST_COMPLETED, {"path": "/posts/1"}) as payload:
        payload["status"] = 200

Modules
-------
notifier    Notifier -- thread-safe synchronous publish/subscribe
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from types import MappingProxyType
from typing import Any

__all__ = [
    "Event",
    "EventHandler",
    "Notifier",
    "REQUEST_COMPLETED",
    "SQL_EXECUTED",
]


# ── Event names ──────────────────────────────────────────────────────────

#: Fired once per finished HTTP request/response cycle.
REQUEST_COMPLETED = "request.completed"

#: Fired once per SQL statement executed through an instrumented engine.
SQL_EXECUTED = "sql.executed"


# ── Event Model ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Event:
    """Immutable notification describing one finished unit of work.

    Attributes:
        name: Dot-separated event name (e.g. ``request.completed``)
        payload: Named fields describing the unit of work (read-only)
        duration: Elapsed milliseconds between start and end, measured by
            whoever published the event
        started_at: Wall-clock start (UTC)
        transaction_id: Correlates events from the same request
        event_id: Unique event identifier
    """

    name: str
    payload: Mapping[str, Any] = field(default_factory=dict)
    duration: float = 0.0
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    transaction_id: str | None = None
    event_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self) -> None:
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))

    @property
    def ended_at(self) -> datetime:
        """Wall-clock end, derived from ``started_at`` and ``duration``."""
        return self.started_at + timedelta(milliseconds=self.duration)

    def matches(self, pattern: str) -> bool:
        """Check if the event name matches a pattern (supports wildcards).

        Examples:
            - ``sql.*`` matches ``sql.executed``
            - ``*`` matches everything
            - ``request.completed`` matches exactly ``request.completed``
        """
        if pattern == "*":
            return True
        if pattern.endswith(".*"):
            prefix = pattern[:-2]
            return self.name.startswith(prefix + ".")
        return self.name == pattern


# ── Type Aliases ─────────────────────────────────────────────────────────

EventHandler = Callable[[Event], None]


from pagelog.core.events.notifier import Notifier  # noqa: E402
