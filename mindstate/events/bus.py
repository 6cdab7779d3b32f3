"""EventBus — synchronous pub/sub for blink and clench events."""

from __future__ import annotations

from collections.abc import Callable

from .base import Event, EventType

EventHandler = Callable[[Event], None]


class EventBus:
    """Dispatches events to handlers registered per type, or to all types.

    Usage::

        bus = EventBus()
        bus.subscribe(EventType.BLINK, on_blink)
        bus.subscribe(None, log_everything)
        bus.publish(Event(EventType.BLINK, timestamp=1.0, value=450.0))
    """

    def __init__(self) -> None:
        self._handlers: dict[EventType | None, list[EventHandler]] = {}

    def subscribe(self, event_type: EventType | None, handler: EventHandler) -> None:
        """Register ``handler``; ``None`` as type receives every event."""
        self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: EventType | None, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event: Event) -> None:
        """Call typed handlers first, then wildcard handlers, in subscription order."""
        for handler in list(self._handlers.get(event.type, [])):
            handler(event)
        for handler in list(self._handlers.get(None, [])):
            handler(event)
