"""Event bus and the render/state events the pipeline publishes."""

from .bus import Event, EventBus, EventHandler
from .types import InputStateEvent, MessageEvent, StateChangedEvent

__all__ = [
    "Event",
    "EventBus",
    "EventHandler",
    "InputStateEvent",
    "MessageEvent",
    "StateChangedEvent",
]
