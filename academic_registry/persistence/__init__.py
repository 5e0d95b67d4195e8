"""
Persistence module for record storage and the notification journal.
"""

from .store import RegistryStore
from .event_store import InMemoryEventStore, FileEventStore, EventStoreFactory
from .replay import JournalReplayer

__all__ = [
    "RegistryStore",
    "InMemoryEventStore",
    "FileEventStore",
    "EventStoreFactory",
    "JournalReplayer",
]
