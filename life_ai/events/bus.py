"""In-process event bus.

Handlers are awaited one after another in subscription order, so consumers
observe events in exactly the order they were published.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, List, Type

import structlog

logger = structlog.get_logger()


@dataclass
class Event:
    """Base event."""

    event_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    source: str = "unknown"

    @property
    def event_type(self) -> str:
        return type(self).__name__


EventHandler = Callable[[Event], Awaitable[None]]


class EventBus:
    """Publish/subscribe by event class."""

    def __init__(self) -> None:
        self._handlers: Dict[Type[Event], List[EventHandler]] = {}

    def subscribe(self, event_type: Type[Event], handler: EventHandler) -> None:
        """Register a handler for an event class and its subclasses."""
        self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: Type[Event], handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    async def publish(self, event: Event) -> None:
        """Deliver an event to every matching handler."""
        for event_type, handlers in list(self._handlers.items()):
            if not isinstance(event, event_type):
                continue
            for handler in list(handlers):
                try:
                    await handler(event)
                except Exception:
                    logger.exception(
                        "Event handler failed",
                        event_type=event.event_type,
                        event_id=event.event_id,
                    )
