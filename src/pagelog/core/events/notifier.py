"""
In-process notifier.

Manifesto:
    The request host and the recorder run in the same process.  Delivery
    is synchronous so that a subscriber's failure surfaces to whoever
    published the event instead of disappearing into a background task.

Subscribers are isolated from each other: every matching subscriber is
called even when an earlier one raised, each failure is logged, and the
failures are then raised together as one ``NotificationError``.

Tags:
    pagelog, events, in-process, publish-subscribe, instrumentation

Doc-Types:
    api-reference
"""

from __future__ import annotations

import threading
import time
import uuid
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from pagelog.core.errors import NotificationError
from pagelog.core.events import Event, EventHandler
from pagelog.core.logging import get_logger

__all__ = ["Notifier"]

log = get_logger(__name__)


@dataclass(frozen=True)
class Subscription:
    """Internal subscription record."""

    id: str
    pattern: str
    handler: EventHandler


class Notifier:
    """Thread-safe synchronous publish/subscribe channel.

    Example::

        notifier = Notifier()
        sub_id = notifier.subscribe("request.completed", recorder)
        notifier.publish(Event(name="request.completed", payload={...}, duration=12.5))
        notifier.unsubscribe(sub_id)
    """

    def __init__(self) -> None:
        self._subscriptions: dict[str, Subscription] = {}
        self._lock = threading.Lock()

    def subscribe(self, pattern: str, handler: EventHandler) -> str:
        """Subscribe *handler* to events matching *pattern*.

        Args:
            pattern: Exact name, ``*``, or ``prefix.*``
            handler: Callable receiving the :class:`Event`

        Returns:
            Subscription ID for later unsubscription
        """
        sub_id = f"sub_{uuid.uuid4().hex[:12]}"
        with self._lock:
            self._subscriptions[sub_id] = Subscription(id=sub_id, pattern=pattern, handler=handler)
        log.debug("subscribed", subscription_id=sub_id, pattern=pattern)
        return sub_id

    def unsubscribe(self, subscription_id: str) -> None:
        """Remove a subscription. Unknown ids are ignored."""
        with self._lock:
            self._subscriptions.pop(subscription_id, None)

    def listening(self, name: str) -> bool:
        """True when at least one subscriber would receive an event called *name*."""
        candidate = Event(name=name)
        with self._lock:
            return any(candidate.matches(sub.pattern) for sub in self._subscriptions.values())

    def publish(self, event: Event) -> None:
        """Deliver *event* to every matching subscriber, in registration order.

        Raises:
            NotificationError: if one or more subscribers raised. All
                subscribers have still been called.
        """
        with self._lock:
            targets = [sub for sub in self._subscriptions.values() if event.matches(sub.pattern)]

        failures: list[tuple[str, Exception]] = []
        for sub in targets:
            try:
                sub.handler(event)
            except Exception as exc:
                log.error(
                    "subscriber_failed",
                    subscription_id=sub.id,
                    event_name=event.name,
                    transaction_id=event.transaction_id,
                    error=repr(exc),
                )
                failures.append((sub.id, exc))

        if failures:
            raise NotificationError(
                f"{len(failures)} subscriber(s) failed handling {event.name}",
                failures,
            ).with_context(
                event_name=event.name,
                event_id=event.event_id,
                transaction_id=event.transaction_id,
            )

    @contextmanager
    def instrument(
        self,
        name: str,
        payload: Mapping[str, Any] | None = None,
        *,
        transaction_id: str | None = None,
    ) -> Iterator[dict[str, Any]]:
        """Time the enclosed block and publish it as *name* when it ends.

        Yields a mutable payload dict the block can fill in.  If the block
        raises, ``exception`` (class name, message) is added to the payload,
        the event is still published, and the original exception propagates
        even when a subscriber fails as well.
        """
        data: dict[str, Any] = dict(payload or {})
        error: Exception | None = None
        started_at = datetime.now(UTC)
        start = time.perf_counter()
        try:
            yield data
        except Exception as exc:
            data["exception"] = (type(exc).__name__, str(exc))
            error = exc

        event = Event(
            name=name,
            payload=data,
            duration=(time.perf_counter() - start) * 1000,
            started_at=started_at,
            transaction_id=transaction_id,
        )
        try:
            self.publish(event)
        except NotificationError:
            if error is None:
                raise
            # Already logged by publish; the block's own exception wins.
        if error is not None:
            raise error

    @property
    def subscription_count(self) -> int:
        """Number of active subscriptions."""
        return len(self._subscriptions)
