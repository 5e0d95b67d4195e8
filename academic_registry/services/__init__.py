"""
Services module containing the registry's guarded operations.
"""

from .concurrency_manager import ConcurrencyManager
from .event_service import EventService, EventSubscription, PendingEvent
from .role_resolver import RoleResolver, resolve_role
from .catalog_service import CatalogService
from .student_service import StudentService
from .access_control import AccessControlService
from .query_service import QueryService
from .registry import AcademicRegistry

__all__ = [
    "ConcurrencyManager",
    "EventService",
    "EventSubscription",
    "PendingEvent",
    "RoleResolver",
    "resolve_role",
    "CatalogService",
    "StudentService",
    "AccessControlService",
    "QueryService",
    "AcademicRegistry",
]
