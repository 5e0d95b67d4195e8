"""
Enumerations for the academic registry.
"""

from enum import Enum


class Role(Enum):
    """Role a caller identity resolves to, highest precedence first."""
    OWNER = "owner"
    STUDENT = "student"
    INSTITUTION = "institution"
    VIEWER = "viewer"


class EventType(Enum):
    """Notifications published after a successful mutation."""
    INSTITUTION_ADDED = "institution_added"
    COURSE_ADDED = "course_added"
    DISCIPLINE_ADDED = "discipline_added"
    STUDENT_ADDED = "student_added"
    STUDENT_ENROLLED = "student_enrolled"
    GRADE_ADDED = "grade_added"
    ACCESS_GRANTED = "access_granted"
    PROFILE_UPDATED = "profile_updated"


class LockType(Enum):
    """Types of locks available."""
    READ = "read"
    WRITE = "write"
