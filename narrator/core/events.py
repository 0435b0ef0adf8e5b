"""
Typed event bus for decoupled communication.

Uses Enums for event types to prevent magic strings. The sequencer and
the presentation sink publish here so that audio cues, analytics or UI
layers can follow a conversation without being wired into it.

Usage:
    # Subscribe
    event_bus.subscribe(SequenceEvent.CHOICE_SELECTED, on_choice)

    # Publish
    event_bus.publish(SequenceEvent.CHOICE_SELECTED, index=1, run=run)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable


logger = logging.getLogger(__name__)


class SequenceEvent(Enum):
    """Events published by the sequence player."""
    RUN_STARTED = auto()
    STEP_SHOWN = auto()
    AWAITING_CHOICE = auto()
    CHOICE_SELECTED = auto()
    RUN_COMPLETED = auto()
    RUN_SUPERSEDED = auto()
    RUN_ABORTED = auto()


class PresentationEvent(Enum):
    """Events published by the presentation sink."""
    MESSAGE_SHOWN = auto()
    MESSAGE_HIDDEN = auto()
    SELECTION_CHANGED = auto()


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: The event type (Enum member)
        data: Keyword data given to publish()
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


EventHandler = Callable[[Event], None]


class EventBus:
    """
    Publish/subscribe hub for sequence and presentation events.

    Handlers are held strongly (lambdas and closures are fine) and called
    in subscription order. A handler that raises is logged and skipped;
    the publisher never sees the error. Events published from inside a
    handler are queued and delivered once the current event has reached
    every handler, so listeners always observe events in publish order.
    """

    def __init__(self):
        self._handlers: dict[Enum, list[EventHandler]] = {}
        self._event_queue: list[Event] = []
        self._is_publishing = False

    def subscribe(self, event_type: Enum, handler: EventHandler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        """Remove handler from event_type. Unknown handlers are ignored."""
        handlers = self._handlers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def publish(self, event_type: Enum, **data: Any) -> Event:
        event = Event(type=event_type, data=data)

        if self._is_publishing:
            self._event_queue.append(event)
            return event

        self._is_publishing = True
        try:
            self._dispatch(event)
            while self._event_queue:
                self._dispatch(self._event_queue.pop(0))
        finally:
            self._event_queue.clear()
            self._is_publishing = False

        return event

    def clear(self, event_type: Enum | None = None) -> None:
        """Drop the handlers of one event type, or all of them."""
        if event_type is None:
            self._handlers.clear()
        else:
            self._handlers.pop(event_type, None)

    def handler_count(self, event_type: Enum | None = None) -> int:
        """Number of registered handlers, for one event type or in total."""
        if event_type is not None:
            return len(self._handlers.get(event_type, []))
        return sum(len(handlers) for handlers in self._handlers.values())

    def _dispatch(self, event: Event) -> None:
        # Copy so handlers may (un)subscribe while being called
        for handler in list(self._handlers.get(event.type, [])):
            try:
                handler(event)
            except Exception:
                logger.exception(f"Error in event handler for {event.type}")
