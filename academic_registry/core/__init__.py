"""
Core module containing the record model, interfaces and exceptions.
"""

from .entities import *
from .interfaces import *
from .exceptions import *
from .enums import *

__all__ = [
    # Entities
    "AbstractRecord",
    "CourseKey",
    "DisciplineKey",
    "GradeKey",
    "Institution",
    "Course",
    "Discipline",
    "Student",
    "Grade",
    "GradeInput",
    "StudentInformation",
    "StudentView",
    "Transcript",
    "Event",

    # Interfaces
    "EventHandler",
    "EventStore",

    # Enums
    "Role",
    "EventType",
    "LockType",

    # Exceptions
    "RegistryError",
    "NotAuthorizedError",
    "NotFoundError",
    "AlreadyExistsError",
    "NotEnrolledError",
    "ConfigurationError",
    "EventSourcingError",
]
