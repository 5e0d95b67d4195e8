"""
Read-time views joining a student's records with the catalog.
"""

from typing import Tuple

from ..core.entities import Course, Discipline, DisciplineKey, Institution, Student, Transcript
from ..core.exceptions import NotEnrolledError, NotFoundError
from .base import RegistryService


class QueryService(RegistryService):
    """Service assembling transcripts and institution views."""

    def get_student_transcript(self, caller: str, identity: str) -> Transcript:
        """Pair each grade with its discipline record.

        Disciplines resolve through the student's bound course. A grade whose
        discipline cannot be resolved is paired with an empty discipline.
        """
        with self._concurrency_manager.read():
            student = self._require_student(identity)
            self._require_reader(caller, student)
            self._require_course_binding(student)

            grades = self._store.list_grades(identity)
            disciplines = []
            for grade in grades:
                key = DisciplineKey(student.institution, student.course_code, grade.discipline_code)
                disciplines.append(self._store.get_discipline(key) or Discipline.empty())
            return Transcript(grades=tuple(grades), disciplines=tuple(disciplines))

    def get_student_institution_data(self, identity: str) -> Tuple[Institution, Course]:
        """The institution and course the student is bound to."""
        with self._concurrency_manager.read():
            student = self._require_student(identity)
            self._require_course_binding(student)

            institution = self._store.get_institution(student.institution)
            course = self._store.get_course(student.course_key)
            if institution is None or course is None:
                raise NotFoundError(
                    f"Institution data for student {identity!r} is missing",
                    details={'student': identity, 'institution': student.institution,
                             'course_code': student.course_code},
                )
            return institution, course

    def _require_course_binding(self, student: Student) -> None:
        if student.course_code is None:
            raise NotEnrolledError(
                f"Student {student.identity!r} is not enrolled in any course",
                details={'student': student.identity},
            )
