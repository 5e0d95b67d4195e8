"""
Core interfaces and abstract base classes for the academic registry.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from .enums import EventType


class EventHandler(ABC):
    """Abstract base class for notification handlers."""

    @abstractmethod
    def handle_event(self, event: 'Event') -> None:
        """Handle an event."""
        pass

    @abstractmethod
    def can_handle(self, event_type: EventType) -> bool:
        """Check if this handler can handle the event type."""
        pass


class EventStore(ABC):
    """Abstract base class for the notification journal."""

    @abstractmethod
    def append_event(self, event: 'Event') -> None:
        """Append an event to the store."""
        pass

    @abstractmethod
    def append_events(self, events: List['Event']) -> None:
        """Append a group of events so that either all or none are stored."""
        pass

    @abstractmethod
    def get_events(self, stream_id: str, from_version: int = 0) -> List['Event']:
        """Get events for a stream."""
        pass

    @abstractmethod
    def get_all_events(self, event_type: Optional[EventType] = None) -> List['Event']:
        """Get every event in commit order, optionally of one type."""
        pass

    @abstractmethod
    def get_all_streams(self) -> List[str]:
        """Get all stream IDs."""
        pass
