"""
Student registration, enrollment and grade recording.
"""

from typing import Iterable, List, Optional, Set

from ..core.entities import DisciplineKey, Grade, GradeInput, GradeKey, Student, StudentView
from ..core.enums import EventType
from ..core.exceptions import AlreadyExistsError, NotEnrolledError, NotFoundError
from .base import RegistryService, student_stream
from .event_service import PendingEvent


class StudentService(RegistryService):
    """Service for students, their enrollments and their grades."""

    def add_student(self, caller: str, institution: str, identity: str,
                    name: Optional[str] = None, document: Optional[str] = None) -> Student:
        """Register a student under the caller's institution.

        The student and the institution are seeded onto the student's
        allow-list.
        """
        with self._concurrency_manager.write():
            self._require_actor(caller, institution, f"add students to {institution!r}")
            self._require_institution(institution)
            if self._store.has_student(identity):
                raise self._reject(AlreadyExistsError(
                    f"Student {identity!r} already exists",
                    details={'student': identity},
                ))

            student = Student(identity=identity, institution=institution,
                              name=name, document=document)
            events = self._journal(PendingEvent(
                EventType.STUDENT_ADDED, student_stream(identity),
                {'institution': institution, 'student': identity}, student.to_dict(),
            ))
            self._store.insert_student(student)
            self._deliver(events)
            return student

    def enroll_student_in_discipline(self, caller: str, institution: str, identity: str,
                                     discipline_code: str, course_code: str) -> Student:
        """Enroll a student in a discipline of one of the institution's courses.

        The first enrollment binds the student to ``course_code`` for good.
        Returns the student record as it stands after the call.
        """
        with self._concurrency_manager.write():
            self._require_actor(caller, institution, f"enroll students of {institution!r}")
            self._require_own_student(institution, identity)
            if not self._store.has_discipline(DisciplineKey(institution, course_code, discipline_code)):
                raise self._reject(NotFoundError(
                    f"Discipline {discipline_code!r} not found in course {course_code!r}",
                    details={'institution': institution, 'course_code': course_code,
                             'discipline_code': discipline_code},
                ))
            if self._store.is_enrolled(identity, discipline_code):
                raise self._reject(AlreadyExistsError(
                    f"Student {identity!r} is already enrolled in {discipline_code!r}",
                    details={'student': identity, 'discipline_code': discipline_code},
                ))

            enrollment = {
                'institution': institution,
                'student': identity,
                'course_code': course_code,
                'discipline_code': discipline_code,
            }
            events = self._journal(PendingEvent(
                EventType.STUDENT_ENROLLED, student_stream(identity), enrollment, enrollment,
            ))
            student = self._store.insert_enrollment(identity, discipline_code, course_code)
            self._deliver(events)
            return student

    def add_grade(self, caller: str, institution: str, identity: str, discipline_code: str,
                  period: int, score: int, attendance: int, passed: bool) -> Grade:
        """Record one grade for an enrolled student."""
        entry = GradeInput(discipline_code=discipline_code, period=period, score=score,
                           attendance=attendance, passed=passed)
        [grade] = self.add_grades(caller, institution, identity, [entry])
        return grade

    def add_grades(self, caller: str, institution: str, identity: str,
                   entries: Iterable[GradeInput]) -> List[Grade]:
        """Record several grades at once.

        Every entry is checked, and every journal entry appended in one write,
        before any grade is stored; the first failing entry rejects the whole
        batch.
        """
        entries = list(entries)
        with self._concurrency_manager.write():
            self._require_actor(caller, institution, f"grade students of {institution!r}")
            self._require_own_student(institution, identity)
            pending: Set[GradeKey] = set()
            for entry in entries:
                self._check_grade(identity, entry, pending)
                pending.add(GradeKey(identity, entry.discipline_code, entry.period))

            grades = [
                Grade(student=identity, discipline_code=entry.discipline_code,
                      period=entry.period, score=entry.score,
                      attendance=entry.attendance, passed=entry.passed)
                for entry in entries
            ]
            events = self._journal(*(
                PendingEvent(EventType.GRADE_ADDED, student_stream(identity), {
                    'institution': institution,
                    'student': identity,
                    'discipline_code': grade.discipline_code,
                    'period': grade.period,
                }, grade.to_dict())
                for grade in grades
            ))
            for grade in grades:
                self._store.insert_grade(grade)
            self._deliver(events)
            return grades

    def get_student(self, identity: str) -> StudentView:
        """Public view of a student; the profile blob is not part of it."""
        with self._concurrency_manager.read():
            return self._require_student(identity).to_view()

    def get_enrollments(self, identity: str) -> Set[str]:
        """Discipline codes the student is enrolled in."""
        with self._concurrency_manager.read():
            self._require_student(identity)
            return self._store.get_enrollments(identity)

    def _check_grade(self, identity: str, entry: GradeInput, pending: Set[GradeKey]) -> None:
        if not self._store.is_enrolled(identity, entry.discipline_code):
            raise self._reject(NotEnrolledError(
                f"Student {identity!r} is not enrolled in {entry.discipline_code!r}",
                details={'student': identity, 'discipline_code': entry.discipline_code},
            ))
        key = GradeKey(identity, entry.discipline_code, entry.period)
        if self._store.has_grade(key) or key in pending:
            raise self._reject(AlreadyExistsError(
                f"Grade for {entry.discipline_code!r} period {entry.period} already exists",
                details={'student': identity, 'discipline_code': entry.discipline_code,
                         'period': entry.period},
            ))
