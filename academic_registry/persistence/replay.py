"""
Rebuilds registry records from a persisted journal.

Every journal entry carries, in its payload, the state its mutation wrote.
Entries are applied in commit order without re-running any guard: they were
checked when first committed.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable

from ..core.entities import Course, Discipline, Event, Grade, Institution, Student
from ..core.enums import EventType
from ..core.exceptions import EventSourcingError
from .store import RegistryStore

logger = logging.getLogger(__name__)


def _record_kwargs(payload: Dict[str, Any]) -> Dict[str, Any]:
    kwargs = dict(payload)
    kwargs['created_at'] = datetime.fromisoformat(kwargs['created_at'])
    return kwargs


class JournalReplayer:
    """Applies journal entries to a RegistryStore."""

    def __init__(self, store: RegistryStore):
        self._store = store
        self._appliers: Dict[EventType, Callable[[Dict[str, Any]], None]] = {
            EventType.INSTITUTION_ADDED: self._apply_institution,
            EventType.COURSE_ADDED: self._apply_course,
            EventType.DISCIPLINE_ADDED: self._apply_discipline,
            EventType.STUDENT_ADDED: self._apply_student,
            EventType.STUDENT_ENROLLED: self._apply_enrollment,
            EventType.GRADE_ADDED: self._apply_grade,
            EventType.ACCESS_GRANTED: self._apply_grant,
            EventType.PROFILE_UPDATED: self._apply_profile,
        }

    def replay(self, events: Iterable[Event]) -> int:
        """Apply ``events`` in order and return how many were applied."""
        applied = 0
        for event in events:
            try:
                self._appliers[event.event_type](event.payload)
            except (KeyError, TypeError, ValueError) as e:
                raise EventSourcingError(
                    f"Failed to replay event {event.id}: {str(e)}",
                    details={'sequence': event.sequence, 'event_type': event.event_type.value},
                )
            applied += 1
        logger.info("Replayed %d journal entries", applied)
        return applied

    def _apply_institution(self, payload: Dict[str, Any]) -> None:
        self._store.insert_institution(Institution(**_record_kwargs(payload)))

    def _apply_course(self, payload: Dict[str, Any]) -> None:
        self._store.insert_course(Course(**_record_kwargs(payload)))

    def _apply_discipline(self, payload: Dict[str, Any]) -> None:
        self._store.insert_discipline(Discipline(**_record_kwargs(payload)))

    def _apply_student(self, payload: Dict[str, Any]) -> None:
        self._store.insert_student(Student(**_record_kwargs(payload)))

    def _apply_enrollment(self, payload: Dict[str, Any]) -> None:
        self._store.insert_enrollment(payload['student'], payload['discipline_code'],
                                      payload['course_code'])

    def _apply_grade(self, payload: Dict[str, Any]) -> None:
        self._store.insert_grade(Grade(**_record_kwargs(payload)))

    def _apply_grant(self, payload: Dict[str, Any]) -> None:
        self._store.insert_grant(payload['student'], payload['reader'])

    def _apply_profile(self, payload: Dict[str, Any]) -> None:
        student = self._store.get_student(payload['student'])
        if student is None:
            raise KeyError(payload['student'])
        self._store.put_student(student.with_information(payload['encrypted_information'],
                                                         payload['public_key']))
