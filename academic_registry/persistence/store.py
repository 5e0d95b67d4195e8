"""
In-memory record arenas for the registry.

Each ordered collection is paired with an existence index that is updated in
the same insert, so duplicate checks are O(1). The store performs no
authorization and no locking; services own both.
"""

from collections import defaultdict
from typing import Dict, List, Optional, Set

from ..core.entities import (
    Course, CourseKey, Discipline, DisciplineKey, Grade, GradeKey,
    Institution, Student,
)


class RegistryStore:
    """Keyed storage for every record kind of the registry."""

    def __init__(self):
        self._institutions: Dict[str, Institution] = {}
        self._institution_order: List[str] = []

        self._courses: Dict[CourseKey, Course] = {}
        self._courses_by_institution: Dict[str, List[CourseKey]] = defaultdict(list)

        self._disciplines: Dict[DisciplineKey, Discipline] = {}
        self._disciplines_by_course: Dict[CourseKey, List[DisciplineKey]] = defaultdict(list)

        self._students: Dict[str, Student] = {}
        self._enrollments: Dict[str, Set[str]] = defaultdict(set)  # student -> discipline codes

        self._grades: Dict[str, List[Grade]] = defaultdict(list)
        self._grade_keys: Set[GradeKey] = set()

        self._grants: Dict[str, List[str]] = defaultdict(list)  # student -> readers, grant order
        self._grant_index: Dict[str, Set[str]] = defaultdict(set)

    # Institutions

    def has_institution(self, identity: str) -> bool:
        return identity in self._institutions

    def get_institution(self, identity: str) -> Optional[Institution]:
        return self._institutions.get(identity)

    def list_institutions(self) -> List[Institution]:
        return [self._institutions[i] for i in self._institution_order]

    def insert_institution(self, institution: Institution) -> None:
        self._institutions[institution.identity] = institution
        self._institution_order.append(institution.identity)

    # Courses

    def has_course(self, key: CourseKey) -> bool:
        return key in self._courses

    def get_course(self, key: CourseKey) -> Optional[Course]:
        return self._courses.get(key)

    def list_courses(self, institution: str) -> List[Course]:
        return [self._courses[k] for k in self._courses_by_institution.get(institution, [])]

    def insert_course(self, course: Course) -> None:
        self._courses[course.key] = course
        self._courses_by_institution[course.institution].append(course.key)

    # Disciplines

    def has_discipline(self, key: DisciplineKey) -> bool:
        return key in self._disciplines

    def get_discipline(self, key: DisciplineKey) -> Optional[Discipline]:
        return self._disciplines.get(key)

    def list_disciplines(self, course: CourseKey) -> List[Discipline]:
        return [self._disciplines[k] for k in self._disciplines_by_course.get(course, [])]

    def insert_discipline(self, discipline: Discipline) -> None:
        self._disciplines[discipline.key] = discipline
        self._disciplines_by_course[discipline.key.course_key].append(discipline.key)

    # Students

    def has_student(self, identity: str) -> bool:
        return identity in self._students

    def get_student(self, identity: str) -> Optional[Student]:
        return self._students.get(identity)

    def list_students(self) -> List[Student]:
        return list(self._students.values())

    def insert_student(self, student: Student) -> None:
        """Insert a new student and seed its allow-list with itself and its institution."""
        self.put_student(student)
        self.insert_grant(student.identity, student.identity)
        if student.institution != student.identity:
            self.insert_grant(student.identity, student.institution)

    def put_student(self, student: Student) -> None:
        """Insert or replace a student record."""
        self._students[student.identity] = student

    # Enrollments

    def is_enrolled(self, student: str, discipline_code: str) -> bool:
        return discipline_code in self._enrollments.get(student, ())

    def get_enrollments(self, student: str) -> Set[str]:
        return set(self._enrollments.get(student, ()))

    def insert_enrollment(self, student: str, discipline_code: str, course_code: str) -> Student:
        """Record an enrollment. The first one binds the student to ``course_code``."""
        self._enrollments[student].add(discipline_code)
        record = self._students[student]
        if record.course_code is None:
            record = record.with_course(course_code)
            self._students[student] = record
        return record

    # Grades

    def has_grade(self, key: GradeKey) -> bool:
        return key in self._grade_keys

    def list_grades(self, student: str) -> List[Grade]:
        return list(self._grades.get(student, ()))

    def insert_grade(self, grade: Grade) -> None:
        self._grades[grade.student].append(grade)
        self._grade_keys.add(grade.key)

    # Access grants

    def is_granted(self, student: str, reader: str) -> bool:
        return reader in self._grant_index.get(student, ())

    def list_grants(self, student: str) -> List[str]:
        return list(self._grants.get(student, ()))

    def insert_grant(self, student: str, reader: str) -> None:
        self._grants[student].append(reader)
        self._grant_index[student].add(reader)

    def get_statistics(self) -> Dict[str, int]:
        """Get record counts."""
        return {
            'institutions': len(self._institutions),
            'courses': len(self._courses),
            'disciplines': len(self._disciplines),
            'students': len(self._students),
            'enrollments': sum(len(codes) for codes in self._enrollments.values()),
            'grades': len(self._grade_keys),
            'access_grants': sum(len(readers) for readers in self._grant_index.values()),
        }
