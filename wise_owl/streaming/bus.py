"""Synchronous named-event dispatcher shared by concurrent turns.

Handlers run in subscription order on the publishing task. Each publish
iterates over a snapshot of the subscriber list, so handlers may subscribe
or unsubscribe while an event is being delivered.
"""

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], None]


def _key(event_name: str | Enum) -> str:
    return event_name.value if isinstance(event_name, Enum) else event_name


class EventBus:
    """Mapping from event name to an ordered list of handlers."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        """Register a handler for an event name.

        Args:
            event_name: Name of the event, e.g. ``"chunk"``.
            handler: Callable receiving the published event.
        """
        self._handlers.setdefault(_key(event_name), []).append(handler)

    def unsubscribe(self, event_name: str, handler: EventHandler) -> None:
        """Remove a handler. Unknown handlers are ignored."""
        handlers = self._handlers.get(_key(event_name))
        if not handlers:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            return
        if not handlers:
            del self._handlers[_key(event_name)]

    def publish(self, event_name: str, event: Any) -> None:
        """Deliver an event to every current subscriber of its name.

        A handler raising an exception is logged and does not stop delivery
        to the remaining handlers.
        """
        name = _key(event_name)
        for handler in list(self._handlers.get(name, ())):
            try:
                handler(event)
            except Exception:
                logger.exception(f"Error in '{name}' event handler {handler!r}")

    def subscriber_count(self, event_name: str) -> int:
        return len(self._handlers.get(_key(event_name), ()))

    def clear(self) -> None:
        """Drop every subscription."""
        self._handlers.clear()
