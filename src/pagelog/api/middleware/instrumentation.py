"""Instrumentation middleware — publishes ``request.completed`` per HTTP cycle.

Manifesto:
    The host is the only component that knows when a request has really
    finished.  This middleware measures the whole cycle, gathers the
    payload the recorder needs, and publishes one event after the
    response has been sent, so nothing a subscriber does can change what
    the client already received.

Payload keys::

    status, method, path, format, controller, action,
    view_runtime, db_runtime          (+ exception when the app raised)

Tags:
    pagelog, api, middleware, instrumentation, asgi

Doc-Types:
    api-reference
"""

from __future__ import annotations

import time
import uuid
from datetime import UTC, datetime
from typing import Any

from starlette.concurrency import run_in_threadpool
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from pagelog.api.formats import format_for_scope
from pagelog.core.errors import NotificationError
from pagelog.core.events import REQUEST_COMPLETED, Event, Notifier
from pagelog.observability.runtime import collecting


def controller_name(endpoint: Any) -> str | None:
    """Last segment of the endpoint's module, e.g. ``page_requests``."""
    module = getattr(endpoint, "__module__", None)
    if not module:
        return None
    return module.rsplit(".", 1)[-1]


def action_name(endpoint: Any) -> str | None:
    return getattr(endpoint, "__name__", None)


class InstrumentationMiddleware:
    """Pure ASGI middleware wrapping every HTTP cycle in a ``request.completed`` event."""

    def __init__(self, app: ASGIApp, notifier: Notifier) -> None:
        self.app = app
        self.notifier = notifier

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self.notifier.listening(REQUEST_COMPLETED):
            await self.app(scope, receive, send)
            return

        payload: dict[str, Any] = {
            "method": scope["method"],
            "path": scope["path"],
            "format": format_for_scope(scope),
        }

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                payload["status"] = message["status"]
            await send(message)

        error: Exception | None = None
        started_at = datetime.now(UTC)
        start = time.perf_counter()
        with collecting() as collector:
            try:
                await self.app(scope, receive, send_wrapper)
            except Exception as exc:
                payload.setdefault("status", 500)
                payload["exception"] = (type(exc).__name__, str(exc))
                error = exc
        duration = (time.perf_counter() - start) * 1000

        endpoint = scope.get("endpoint")
        payload["controller"] = controller_name(endpoint)
        payload["action"] = action_name(endpoint)
        payload["view_runtime"] = collector.view_runtime
        payload["db_runtime"] = collector.db_runtime

        state = scope.get("state") or {}
        event = Event(
            name=REQUEST_COMPLETED,
            payload=payload,
            duration=duration,
            started_at=started_at,
            transaction_id=state.get("request_id") or uuid.uuid4().hex,
        )

        try:
            # Subscribers write synchronously; keep them off the event loop.
            await run_in_threadpool(self.notifier.publish, event)
        except NotificationError:
            if error is None:
                raise
            # Already logged by the notifier; the request's own exception wins.
        if error is not None:
            raise error
