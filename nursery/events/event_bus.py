"""Synchronous event bus for domain event dispatch.

The EventBus decouples the simulation from statistics and logging
consumers. Dispatch is synchronous and in registration order so that a
seeded run always produces the same handler call sequence.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from typing import TypeVar

T = TypeVar("T")


class EventBus:
    """Synchronous event bus for domain events.

    With no subscribers, emit() is a single dict lookup.

    Example:
        bus = EventBus()
        bus.subscribe(SaleCompletedEvent, stats.on_sale)
        bus.emit(SaleCompletedEvent(customer_id=3, item="tomato", quantity=2, revenue=110.0, tick=40))
    """

    def __init__(self) -> None:
        self._handlers: dict[type, list[Callable]] = defaultdict(list)

    def emit(self, event: object) -> None:
        """Dispatch ``event`` to every handler registered for its type."""
        handlers = self._handlers.get(type(event))
        if handlers:
            for handler in list(handlers):
                handler(event)

    def subscribe(self, event_type: type[T], handler: Callable[[T], None]) -> None:
        """Register a handler for a specific event type."""
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: type[T], handler: Callable[[T], None]) -> bool:
        """Remove a handler.

        Returns:
            True if the handler was found and removed, False otherwise
        """
        handlers = self._handlers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)
            return True
        return False

