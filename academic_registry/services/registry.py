"""
Facade exposing every registry operation over one shared store.
"""

from typing import Iterable, List, Optional, Set, Tuple

from ..core.entities import (
    Course, Discipline, Grade, GradeInput, Institution, Student, StudentInformation, StudentView,
    Transcript,
)
from ..core.enums import Role
from ..persistence.replay import JournalReplayer
from ..persistence.store import RegistryStore
from .access_control import AccessControlService
from .catalog_service import CatalogService
from .concurrency_manager import ConcurrencyManager
from .event_service import EventService
from .query_service import QueryService
from .role_resolver import RoleResolver
from .student_service import StudentService


class AcademicRegistry:
    """The registry's call surface.

    Every mutating method takes the authenticated caller identity first; it is
    the only credential the registry knows.

    A registry built over a non-empty journal restores its records from it;
    ``store`` must then start empty.
    """

    def __init__(self, owner: str, event_service: Optional[EventService] = None,
                 concurrency_manager: Optional[ConcurrencyManager] = None,
                 store: Optional[RegistryStore] = None):
        self._owner = owner
        self._store = store or RegistryStore()
        self._concurrency_manager = concurrency_manager or ConcurrencyManager()
        self._event_service = event_service or EventService()

        journal = self._event_service.get_all_events()
        if journal:
            JournalReplayer(self._store).replay(journal)

        args = (self._store, self._concurrency_manager, self._event_service, owner)
        self._roles = RoleResolver(*args)
        self._catalog = CatalogService(*args)
        self._students = StudentService(*args)
        self._access = AccessControlService(*args)
        self._queries = QueryService(*args)

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def event_service(self) -> EventService:
        return self._event_service

    @property
    def concurrency_manager(self) -> ConcurrencyManager:
        return self._concurrency_manager

    # Mutations

    def add_institution(self, caller: str, identity: str, name: str, document: str) -> Institution:
        return self._catalog.add_institution(caller, identity, name, document)

    def add_course(self, caller: str, institution: str, code: str, name: str,
                   course_type: str, semesters: int) -> Course:
        return self._catalog.add_course(caller, institution, code, name, course_type, semesters)

    def add_discipline_to_course(self, caller: str, institution: str, course_code: str,
                                 code: str, name: str, syllabus: str, workload: int,
                                 credits: int) -> Discipline:
        return self._catalog.add_discipline_to_course(
            caller, institution, course_code, code, name, syllabus, workload, credits)

    def add_student(self, caller: str, institution: str, identity: str,
                    name: Optional[str] = None, document: Optional[str] = None) -> Student:
        return self._students.add_student(caller, institution, identity, name, document)

    def enroll_student_in_discipline(self, caller: str, institution: str, identity: str,
                                     discipline_code: str, course_code: str) -> Student:
        return self._students.enroll_student_in_discipline(
            caller, institution, identity, discipline_code, course_code)

    def add_grade(self, caller: str, institution: str, identity: str, discipline_code: str,
                  period: int, score: int, attendance: int, passed: bool) -> Grade:
        return self._students.add_grade(
            caller, institution, identity, discipline_code, period, score, attendance, passed)

    def add_grades(self, caller: str, institution: str, identity: str,
                   entries: Iterable[GradeInput]) -> List[Grade]:
        return self._students.add_grades(caller, institution, identity, entries)

    def add_allowed_address(self, caller: str, reader: str, identity: str) -> None:
        self._access.add_allowed_address(caller, reader, identity)

    def add_student_information(self, caller: str, encrypted_information: str,
                                public_key: Optional[str] = None) -> None:
        self._access.add_student_information(caller, encrypted_information, public_key)

    # Queries

    def get_institution(self, identity: str) -> Institution:
        return self._catalog.get_institution(identity)

    def get_institution_list(self) -> List[Institution]:
        return self._catalog.get_institution_list()

    def get_courses_from_institution(self, institution: str) -> List[Course]:
        return self._catalog.get_courses_from_institution(institution)

    def get_disciplines_from_course(self, institution: str, course_code: str) -> List[Discipline]:
        return self._catalog.get_disciplines_from_course(institution, course_code)

    def get_discipline(self, institution: str, course_code: str, code: str) -> Discipline:
        return self._catalog.get_discipline(institution, course_code, code)

    def get_student(self, identity: str) -> StudentView:
        return self._students.get_student(identity)

    def get_enrollments(self, identity: str) -> Set[str]:
        return self._students.get_enrollments(identity)

    def get_grades(self, caller: str, identity: str) -> List[Grade]:
        return self._access.get_grades(caller, identity)

    def get_student_transcript(self, caller: str, identity: str) -> Transcript:
        return self._queries.get_student_transcript(caller, identity)

    def get_student_institution_data(self, identity: str) -> Tuple[Institution, Course]:
        return self._queries.get_student_institution_data(identity)

    def get_permission(self, caller: str) -> Role:
        return self._roles.get_permission(caller)

    def retrieve_student_information(self, caller: str, identity: str) -> StudentInformation:
        return self._access.retrieve_student_information(caller, identity)

    def is_allowed(self, reader: str, identity: str) -> bool:
        return self._access.is_allowed(reader, identity)

    def get_allowed_readers(self, caller: str, identity: str) -> List[str]:
        return self._access.get_allowed_readers(caller, identity)

    def get_statistics(self) -> dict:
        with self._concurrency_manager.read():
            records = self._store.get_statistics()
        return {
            'records': records,
            'events': self._event_service.get_processing_statistics(),
            'concurrency': self._concurrency_manager.get_statistics(),
        }
