"""
Simple asynchronous event bus used to surface catalog and mutation events.
"""

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from models.events import MarketEvent

logger_event_bus = logging.getLogger(__name__)

EventHandler = Callable[[MarketEvent], Coroutine[Any, Any, None]]


class EventBus:
    """Publish/subscribe hub; one failing subscriber never affects the others."""

    def __init__(self):
        self.subscribers: dict[str, list[EventHandler]] = {}

    def subscribe(self, event_type: str, callback: EventHandler) -> None:
        """Subscribe to an event type."""
        if not callable(callback):
            raise TypeError("Callback must be a callable async function.")
        handlers = self.subscribers.setdefault(event_type, [])
        if callback in handlers:
            logger_event_bus.warning(f"Callback {_name(callback)} already subscribed to {event_type}")
            return
        handlers.append(callback)
        logger_event_bus.debug(f"Callback {_name(callback)} subscribed to {event_type}")

    def unsubscribe(self, event_type: str, callback: EventHandler) -> None:
        """Unsubscribe a specific callback from an event type."""
        handlers = self.subscribers.get(event_type)
        if not handlers or callback not in handlers:
            logger_event_bus.warning(f"Callback {_name(callback)} not found for event type {event_type}")
            return
        handlers.remove(callback)
        if not handlers:
            del self.subscribers[event_type]

    async def publish(self, event: MarketEvent) -> None:
        """Publish an event to its subscribers and wait for all of them to settle."""
        if not isinstance(event, MarketEvent):
            logger_event_bus.error(f"Attempted to publish invalid event type: {type(event)}")
            return

        logger_event_bus.debug(f"Event published: {event.event_type} from {event.source.value}")
        handlers = list(self.subscribers.get(event.event_type, []))
        if not handlers:
            return
        results = await asyncio.gather(*(handler(event) for handler in handlers), return_exceptions=True)
        for handler, result in zip(handlers, results):
            if isinstance(result, Exception):
                logger_event_bus.error(
                    f"Error in subscriber callback '{_name(handler)}' for event {event.event_type}: {result}"
                )


def _name(callback: Any) -> str:
    return getattr(callback, "__name__", repr(callback))
