"""Concrete event types for the event bus."""

from dataclasses import dataclass

from .bus import Event


@dataclass
class MessageEvent(Event):
    """A message to render in the conversation view."""

    text: str = ""
    role: str = "ai"  # "user" | "ai" | "system"
    source: str = "orchestrator"


@dataclass
class InputStateEvent(Event):
    """Whether the user may submit another message."""

    enabled: bool = True
    source: str = "orchestrator"


@dataclass
class StateChangedEvent(Event):
    """The orchestrator moved between pipeline states."""

    previous: str = ""
    current: str = ""
    source: str = "orchestrator"
