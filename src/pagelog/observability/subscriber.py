"""Base class for objects that attach handlers to a :class:`Notifier`.

A subscriber is registered once, at server composition, and unregistered
at shutdown, so its lifetime is the server's lifetime.
"""

from __future__ import annotations

from pagelog.core.errors import ConfigError
from pagelog.core.events import EventHandler, Notifier


class Subscriber:
    """Registers the handlers returned by :meth:`subscriptions` on a notifier."""

    def __init__(self) -> None:
        self._notifier: Notifier | None = None
        self._subscription_ids: list[str] = []

    def subscriptions(self) -> dict[str, EventHandler]:
        """Map of event pattern → handler. Subclasses must override."""
        raise NotImplementedError

    def register(self, notifier: Notifier) -> list[str]:
        """Subscribe every handler on *notifier*.

        Raises:
            ConfigError: if this subscriber is already registered.
        """
        if self._notifier is not None:
            raise ConfigError(
                f"{type(self).__name__} is already registered"
            ).with_context(subscription_id=",".join(self._subscription_ids))

        self._subscription_ids = [
            notifier.subscribe(pattern, handler)
            for pattern, handler in self.subscriptions().items()
        ]
        self._notifier = notifier
        return list(self._subscription_ids)

    def unregister(self) -> None:
        """Remove every subscription made by :meth:`register`."""
        if self._notifier is None:
            return
        for sub_id in self._subscription_ids:
            self._notifier.unsubscribe(sub_id)
        self._notifier = None
        self._subscription_ids = []

    @property
    def registered(self) -> bool:
        return self._notifier is not None
