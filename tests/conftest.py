"""Root conftest: shared registry fixtures."""

import pytest

from academic_registry.services import AcademicRegistry

OWNER = "owner"
INST = "inst-a"
OTHER_INST = "inst-b"
COURSE = "A101"
DISC = "D1"
DISC2 = "D2"
STUDENT = "student-s1"
STRANGER = "stranger-x"


@pytest.fixture
def registry():
    return AcademicRegistry(owner=OWNER)


@pytest.fixture
def catalog(registry):
    """Registry with InstitutionA, CourseA101 and disciplines D1, D2."""
    registry.add_institution(OWNER, INST, "Institution A", "doc-a")
    registry.add_course(INST, INST, COURSE, "Computer Science", "bachelor", 4)
    registry.add_discipline_to_course(INST, INST, COURSE, DISC, "Algorithms", "graphs", 60, 4)
    registry.add_discipline_to_course(INST, INST, COURSE, DISC2, "Databases", "sql", 60, 4)
    return registry


@pytest.fixture
def enrolled(catalog):
    """Catalog plus StudentS1 enrolled in D1 under A101."""
    catalog.add_student(INST, INST, STUDENT, "Student One", "123")
    catalog.enroll_student_in_discipline(INST, INST, STUDENT, DISC, COURSE)
    return catalog
