"""
Event service publishing registry notifications to subscribers.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional, Set

from ..core.entities import Event
from ..core.enums import EventType
from ..core.interfaces import EventHandler, EventStore
from ..persistence.event_store import InMemoryEventStore

logger = logging.getLogger(__name__)


class PendingEvent(NamedTuple):
    """A journal entry not yet given its sequence number."""
    event_type: EventType
    stream_id: str
    event_data: Dict[str, Any]
    payload: Optional[Dict[str, Any]] = None


@dataclass
class EventSubscription:
    """Event subscription information."""
    subscriber_id: str
    event_types: Set[EventType]
    handler: Callable[[Event], None]
    filter_func: Optional[Callable[[Event], bool]] = None
    created_at: float = None

    def __post_init__(self):
        if self.created_at is None:
            self.created_at = time.time()


class EventService:
    """Journals notifications and fans them out to subscribers.

    Registry services journal a mutation with ``record`` before applying it and
    ``deliver`` it once applied, both while still holding the write lock, so the
    journal and every subscriber observe notifications in commit order.
    """

    def __init__(self, event_store: Optional[EventStore] = None):
        self._event_store = event_store or InMemoryEventStore()
        self._subscriptions: Dict[str, EventSubscription] = {}
        self._handlers: List[EventHandler] = []
        self._lock = threading.RLock()
        self._published = 0
        self._delivery_failures = 0
        existing = self._event_store.get_all_events()
        self._next_sequence = max((e.sequence for e in existing), default=0) + 1

    @property
    def event_store(self) -> EventStore:
        return self._event_store

    def record(self, entries: Iterable[PendingEvent]) -> List[Event]:
        """Journal a group of entries in one append, without delivering them.

        Sequence numbers are only consumed when the append succeeds.
        """
        with self._lock:
            events = [
                Event(
                    event_type=entry.event_type,
                    stream_id=entry.stream_id,
                    event_data=entry.event_data,
                    payload=entry.payload,
                    sequence=self._next_sequence + offset,
                )
                for offset, entry in enumerate(entries)
            ]
            if events:
                self._event_store.append_events(events)
            self._next_sequence += len(events)
            self._published += len(events)
            return events

    def deliver(self, events: Iterable[Event]) -> None:
        """Hand journaled events to subscribers and handlers."""
        with self._lock:
            for event in events:
                logger.debug("Delivering %s on %s", event.event_type.value, event.stream_id)
                self._notify_subscribers(event)
                self._notify_handlers(event)

    def publish(self, event_type: EventType, stream_id: str, event_data: Dict[str, Any],
                payload: Optional[Dict[str, Any]] = None) -> Event:
        """Journal a notification and deliver it to subscribers."""
        with self._lock:
            [event] = self.record([PendingEvent(event_type, stream_id, event_data, payload)])
            self.deliver([event])
            return event

    def subscribe(self, subscriber_id: str, event_types: Set[EventType],
                  handler: Callable[[Event], None],
                  filter_func: Optional[Callable[[Event], bool]] = None) -> None:
        """Subscribe to events."""
        with self._lock:
            self._subscriptions[subscriber_id] = EventSubscription(
                subscriber_id=subscriber_id,
                event_types=set(event_types),
                handler=handler,
                filter_func=filter_func,
            )

    def unsubscribe(self, subscriber_id: str) -> None:
        """Unsubscribe from events."""
        with self._lock:
            self._subscriptions.pop(subscriber_id, None)

    def add_handler(self, handler: EventHandler) -> None:
        """Add an event handler."""
        with self._lock:
            self._handlers.append(handler)

    def _notify_subscribers(self, event: Event) -> None:
        for subscription in list(self._subscriptions.values()):
            if event.event_type not in subscription.event_types:
                continue
            try:
                if subscription.filter_func and not subscription.filter_func(event):
                    continue
                subscription.handler(event)
            except Exception:
                self._delivery_failures += 1
                logger.exception("Error notifying subscriber %s", subscription.subscriber_id)

    def _notify_handlers(self, event: Event) -> None:
        for handler in list(self._handlers):
            if not handler.can_handle(event.event_type):
                continue
            try:
                handler.handle_event(event)
            except Exception:
                self._delivery_failures += 1
                logger.exception("Error in event handler %s", handler.__class__.__name__)

    def get_events(self, stream_id: str, from_version: int = 0) -> List[Event]:
        """Get events for a stream."""
        return self._event_store.get_events(stream_id, from_version)

    def get_all_events(self, event_type: Optional[EventType] = None) -> List[Event]:
        return self._event_store.get_all_events(event_type)

    def get_event_streams(self) -> List[str]:
        return self._event_store.get_all_streams()

    def get_processing_statistics(self) -> Dict[str, Any]:
        """Get event processing statistics."""
        with self._lock:
            return {
                'published': self._published,
                'delivery_failures': self._delivery_failures,
                'active_subscriptions': len(self._subscriptions),
                'active_handlers': len(self._handlers),
            }
