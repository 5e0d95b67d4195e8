"""
Event store implementations for the notification journal.
"""

import json
import logging
import os
import threading
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional

from ..core.entities import Event
from ..core.enums import EventType
from ..core.exceptions import ConfigurationError, EventSourcingError
from ..core.interfaces import EventStore

logger = logging.getLogger(__name__)


class InMemoryEventStore(EventStore):
    """In-memory implementation of event store."""

    def __init__(self):
        self._events: List[Event] = []
        self._streams: Dict[str, List[Event]] = defaultdict(list)
        self._lock = threading.RLock()

    def append_event(self, event: Event) -> None:
        """Append an event to the store."""
        with self._lock:
            self._events.append(event)
            self._streams[event.stream_id].append(event)

    def append_events(self, events: List[Event]) -> None:
        with self._lock:
            for event in events:
                self.append_event(event)

    def get_events(self, stream_id: str, from_version: int = 0) -> List[Event]:
        """Get events for a stream."""
        with self._lock:
            return list(self._streams.get(stream_id, [])[from_version:])

    def get_all_events(self, event_type: Optional[EventType] = None) -> List[Event]:
        with self._lock:
            if event_type is None:
                return list(self._events)
            return [e for e in self._events if e.event_type == event_type]

    def get_all_streams(self) -> List[str]:
        with self._lock:
            return list(self._streams.keys())


class FileEventStore(EventStore):
    """Append-only JSONL journal on disk."""

    def __init__(self, base_path: str = "events", file_name: str = "journal.jsonl"):
        self._base_path = base_path
        self._journal_path = os.path.join(base_path, file_name)
        self._lock = threading.RLock()
        self._ensure_directory_exists()

    def _ensure_directory_exists(self) -> None:
        """Ensure the events directory exists."""
        os.makedirs(self._base_path, exist_ok=True)

    @property
    def journal_path(self) -> str:
        return self._journal_path

    def append_event(self, event: Event) -> None:
        """Append an event to the journal."""
        self.append_events([event])

    def append_events(self, events: List[Event]) -> None:
        """Append events to the journal in a single write."""
        lines = "".join(json.dumps(event.to_dict()) + "\n" for event in events)
        with self._lock:
            try:
                with open(self._journal_path, "a", encoding="utf-8") as f:
                    f.write(lines)
            except OSError as e:
                raise EventSourcingError(f"Failed to append events: {str(e)}")

    def _read_events(self) -> List[Event]:
        if not os.path.exists(self._journal_path):
            return []

        events = []
        try:
            with open(self._journal_path, "r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, 1):
                    if not line.strip():
                        continue
                    try:
                        data = json.loads(line)
                        events.append(Event(
                            event_type=EventType(data["event_type"]),
                            stream_id=data["stream_id"],
                            event_data=data["event_data"],
                            event_id=data["id"],
                            sequence=data.get("sequence", 0),
                            payload=data.get("payload"),
                            created_at=datetime.fromisoformat(data["created_at"]),
                        ))
                    except (json.JSONDecodeError, KeyError, ValueError) as e:
                        logger.warning("Skipping malformed event at line %d: %s", line_num, e)
                        continue
        except OSError as e:
            raise EventSourcingError(f"Failed to read events: {str(e)}")

        return events

    def get_events(self, stream_id: str, from_version: int = 0) -> List[Event]:
        """Get events for a stream."""
        with self._lock:
            events = [e for e in self._read_events() if e.stream_id == stream_id]
            return events[from_version:]

    def get_all_events(self, event_type: Optional[EventType] = None) -> List[Event]:
        with self._lock:
            events = self._read_events()
            if event_type is None:
                return events
            return [e for e in events if e.event_type == event_type]

    def get_all_streams(self) -> List[str]:
        """Get all stream IDs in first-seen order."""
        with self._lock:
            streams: List[str] = []
            for event in self._read_events():
                if event.stream_id not in streams:
                    streams.append(event.stream_id)
            return streams


class EventStoreFactory:
    """Factory for creating event store instances."""

    @staticmethod
    def create_event_store(store_type: str, **kwargs) -> EventStore:
        """Create an event store instance based on type."""
        if store_type.lower() == "memory":
            return InMemoryEventStore()
        elif store_type.lower() == "file":
            return FileEventStore(**kwargs)
        else:
            raise ConfigurationError(f"Unsupported event store type: {store_type}")
