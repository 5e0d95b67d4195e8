"""
Shared plumbing for the registry services.
"""

import logging
from typing import List

from ..core.entities import Event, Student
from ..core.exceptions import NotAuthorizedError, NotFoundError, RegistryError
from ..persistence.store import RegistryStore
from .concurrency_manager import ConcurrencyManager
from .event_service import EventService, PendingEvent

logger = logging.getLogger(__name__)


def institution_stream(identity: str) -> str:
    return f"institution:{identity}"


def student_stream(identity: str) -> str:
    return f"student:{identity}"


class RegistryService:
    """Base class giving a service the store, the lock and the event service."""

    def __init__(self, store: RegistryStore, concurrency_manager: ConcurrencyManager,
                 event_service: EventService, owner: str):
        self._store = store
        self._concurrency_manager = concurrency_manager
        self._event_service = event_service
        self._owner = owner

    @property
    def owner(self) -> str:
        return self._owner

    def _reject(self, error: RegistryError) -> RegistryError:
        """Log a rejected call and hand the error back for raising."""
        logger.warning("%s rejected: %s", self.__class__.__name__, error.message,
                       extra={'error_code': error.error_code})
        return error

    def _journal(self, *entries: PendingEvent) -> List[Event]:
        """Journal a mutation before it is applied to the store.

        If the append fails nothing has been written yet, so the caller sees
        the error and the registry is unchanged.
        """
        events = self._event_service.record(entries)
        for event in events:
            logger.info("%s %s", event.event_type.value, event.event_data)
        return events

    def _deliver(self, events: List[Event]) -> None:
        self._event_service.deliver(events)

    def _require_actor(self, caller: str, expected: str, action: str) -> None:
        if caller != expected:
            raise self._reject(NotAuthorizedError(
                f"{caller!r} may not {action}",
                details={'caller': caller, 'expected': expected},
            ))

    def _require_institution(self, identity: str) -> None:
        if not self._store.has_institution(identity):
            raise self._reject(NotFoundError(
                f"Institution {identity!r} not found",
                details={'institution': identity},
            ))

    def _require_student(self, identity: str) -> Student:
        student = self._store.get_student(identity)
        if student is None:
            raise self._reject(NotFoundError(
                f"Student {identity!r} not found",
                details={'student': identity},
            ))
        return student

    def _require_own_student(self, institution: str, identity: str) -> Student:
        """The student must exist and be registered by ``institution``."""
        student = self._require_student(identity)
        if student.institution != institution:
            raise self._reject(NotAuthorizedError(
                f"Student {identity!r} does not belong to institution {institution!r}",
                details={'student': identity, 'institution': institution},
            ))
        return student

    def _require_reader(self, caller: str, student: Student) -> None:
        if not self._store.is_granted(student.identity, caller):
            raise self._reject(NotAuthorizedError(
                f"{caller!r} may not read data of student {student.identity!r}",
                details={'caller': caller, 'student': student.identity},
            ))
