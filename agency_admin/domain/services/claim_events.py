"""In-memory event bus for claim review events."""

import asyncio
import inspect
import logging
from typing import Callable, Dict, List, Optional

from ..models.claim_event import ClaimEvent, ClaimEventType

logger = logging.getLogger(__name__)


def _handler_name(handler: Callable) -> str:
    return getattr(handler, "__name__", repr(handler))


class ClaimEventBus:
    """Publishes claim events to subscribed views.

    List views subscribe here instead of relying on a refresh callback, so a
    successful approval or rejection always reaches every open list.
    """

    def __init__(self, max_history: int = 1000):
        self.subscribers: Dict[ClaimEventType, List[Callable]] = {}
        self.event_history: List[ClaimEvent] = []
        self.max_history = max_history

    def subscribe(self, event_type: ClaimEventType, handler: Callable) -> None:
        """Subscribe to events of a specific type."""
        self.subscribers.setdefault(event_type, []).append(handler)
        logger.debug(f"Subscribed {_handler_name(handler)} to {event_type.value}")

    def subscribe_all(self, handler: Callable) -> None:
        """Subscribe to every claim event type."""
        for event_type in ClaimEventType:
            self.subscribe(event_type, handler)

    def unsubscribe(self, event_type: ClaimEventType, handler: Callable) -> None:
        """Unsubscribe from events of a specific type."""
        try:
            self.subscribers.get(event_type, []).remove(handler)
        except ValueError:
            logger.warning(
                f"⚠️ Handler {_handler_name(handler)} not found in {event_type.value} subscribers"
            )

    def unsubscribe_all(self, handler: Callable) -> None:
        """Remove a handler from every event type it is subscribed to."""
        for handlers in self.subscribers.values():
            if handler in handlers:
                handlers.remove(handler)

    async def publish(self, event: ClaimEvent) -> None:
        """Publish an event to all subscribers.

        Handler errors are logged and never reach the publisher.
        """
        logger.info(f"📣 Publishing {event.event_type.value} for claim {event.claim_id}")

        self.event_history.append(event)
        if len(self.event_history) > self.max_history:
            self.event_history.pop(0)

        handlers = list(self.subscribers.get(event.event_type, []))
        if not handlers:
            logger.debug(f"No subscribers for event type: {event.event_type.value}")
            return

        tasks = [asyncio.create_task(self._handle_event(handler, event)) for handler in handlers]
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _handle_event(self, handler: Callable, event: ClaimEvent) -> None:
        try:
            result = handler(event)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"❌ Error in event handler {_handler_name(handler)}: {e}")

    def get_events(
        self,
        event_type: Optional[ClaimEventType] = None,
        claim_id: Optional[str] = None,
    ) -> List[ClaimEvent]:
        """Get events from history with optional filtering."""
        events = self.event_history
        if event_type:
            events = [e for e in events if e.event_type == event_type]
        if claim_id:
            events = [e for e in events if e.claim_id == claim_id]
        return events
