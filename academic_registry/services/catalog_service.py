"""
Institution, course and discipline registries.

All three are append-only. An insert checks, in order, the actor, the parent's
existence and the code's uniqueness under that parent; nothing is written
unless every check passes and the journal entry is appended.
"""

from typing import List

from ..core.entities import Course, CourseKey, Discipline, DisciplineKey, Institution
from ..core.enums import EventType
from ..core.exceptions import AlreadyExistsError, NotFoundError
from .base import RegistryService, institution_stream
from .event_service import PendingEvent


class CatalogService(RegistryService):
    """Service for registering institutions and their course catalog."""

    def add_institution(self, caller: str, identity: str, name: str, document: str) -> Institution:
        """Register an institution. Only the owner may call this."""
        with self._concurrency_manager.write():
            self._require_actor(caller, self._owner, "add institutions")
            if self._store.has_institution(identity):
                raise self._reject(AlreadyExistsError(
                    f"Institution {identity!r} already exists",
                    details={'institution': identity},
                ))

            institution = Institution(identity=identity, name=name, document=document)
            events = self._journal(PendingEvent(
                EventType.INSTITUTION_ADDED, institution_stream(identity),
                {'institution': identity}, institution.to_dict(),
            ))
            self._store.insert_institution(institution)
            self._deliver(events)
            return institution

    def add_course(self, caller: str, institution: str, code: str, name: str,
                   course_type: str, semesters: int) -> Course:
        """Add a course to the caller's own institution."""
        with self._concurrency_manager.write():
            self._require_actor(caller, institution, f"add courses to {institution!r}")
            self._require_institution(institution)
            key = CourseKey(institution, code)
            if self._store.has_course(key):
                raise self._reject(AlreadyExistsError(
                    f"Course {code!r} already exists in institution {institution!r}",
                    details={'institution': institution, 'course_code': code},
                ))

            course = Course(institution=institution, code=code, name=name,
                            course_type=course_type, semesters=semesters)
            events = self._journal(PendingEvent(
                EventType.COURSE_ADDED, institution_stream(institution),
                {'institution': institution, 'course_code': code}, course.to_dict(),
            ))
            self._store.insert_course(course)
            self._deliver(events)
            return course

    def add_discipline_to_course(self, caller: str, institution: str, course_code: str,
                                 code: str, name: str, syllabus: str, workload: int,
                                 credits: int) -> Discipline:
        """Add a discipline to one of the caller's courses."""
        with self._concurrency_manager.write():
            self._require_actor(caller, institution, f"add disciplines to {institution!r}")
            self._require_institution(institution)
            if not self._store.has_course(CourseKey(institution, course_code)):
                raise self._reject(NotFoundError(
                    f"Course {course_code!r} not found in institution {institution!r}",
                    details={'institution': institution, 'course_code': course_code},
                ))
            key = DisciplineKey(institution, course_code, code)
            if self._store.has_discipline(key):
                raise self._reject(AlreadyExistsError(
                    f"Discipline {code!r} already exists in course {course_code!r}",
                    details={'institution': institution, 'course_code': course_code,
                             'discipline_code': code},
                ))

            discipline = Discipline(institution=institution, course_code=course_code,
                                    code=code, name=name, syllabus=syllabus,
                                    workload=workload, credits=credits)
            events = self._journal(PendingEvent(
                EventType.DISCIPLINE_ADDED, institution_stream(institution),
                {'institution': institution, 'course_code': course_code,
                 'discipline_code': code},
                discipline.to_dict(),
            ))
            self._store.insert_discipline(discipline)
            self._deliver(events)
            return discipline

    def get_institution(self, identity: str) -> Institution:
        with self._concurrency_manager.read():
            institution = self._store.get_institution(identity)
            if institution is None:
                raise NotFoundError(f"Institution {identity!r} not found",
                                    details={'institution': identity})
            return institution

    def get_institution_list(self) -> List[Institution]:
        with self._concurrency_manager.read():
            return self._store.list_institutions()

    def get_courses_from_institution(self, institution: str) -> List[Course]:
        with self._concurrency_manager.read():
            if not self._store.has_institution(institution):
                raise NotFoundError(f"Institution {institution!r} not found",
                                    details={'institution': institution})
            return self._store.list_courses(institution)

    def get_disciplines_from_course(self, institution: str, course_code: str) -> List[Discipline]:
        with self._concurrency_manager.read():
            key = CourseKey(institution, course_code)
            if not self._store.has_course(key):
                raise NotFoundError(
                    f"Course {course_code!r} not found in institution {institution!r}",
                    details={'institution': institution, 'course_code': course_code},
                )
            return self._store.list_disciplines(key)

    def get_discipline(self, institution: str, course_code: str, code: str) -> Discipline:
        """Look up a discipline by the composite key used at insert."""
        with self._concurrency_manager.read():
            discipline = self._store.get_discipline(DisciplineKey(institution, course_code, code))
            if discipline is None:
                raise NotFoundError(
                    f"Discipline {code!r} not found in course {course_code!r}",
                    details={'institution': institution, 'course_code': course_code,
                             'discipline_code': code},
                )
            return discipline
