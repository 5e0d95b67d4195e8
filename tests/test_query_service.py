"""Transcript & Institution Views: tests for read-time joins.

Tests cover:
    - transcript pairs each grade with its discipline
    - unresolvable disciplines pair with an empty record
    - transcript access is limited to the allow-list
    - institution data for bound and unbound students
"""

import pytest

from academic_registry.core.exceptions import (
    NotAuthorizedError, NotEnrolledError, NotFoundError,
)

from tests.conftest import COURSE, DISC, INST, STRANGER, STUDENT


# ─── get_student_transcript ──────────────────────────────────────

def test_transcript_pairs_grade_with_discipline(enrolled):
    enrolled.add_grade(INST, INST, STUDENT, DISC, 1, 85, 90, True)
    transcript = enrolled.get_student_transcript(STUDENT, STUDENT)
    assert len(transcript) == 1
    [(grade, discipline)] = list(transcript.pairs())
    assert grade.score == 85
    assert discipline.name == "Algorithms"
    assert discipline.key == (INST, COURSE, DISC)


def test_transcript_keeps_grade_order(enrolled):
    enrolled.add_grade(INST, INST, STUDENT, DISC, 2, 70, 90, True)
    enrolled.add_grade(INST, INST, STUDENT, DISC, 1, 40, 90, False)
    transcript = enrolled.get_student_transcript(INST, STUDENT)
    assert [g.period for g in transcript.grades] == [2, 1]
    assert len(transcript.grades) == len(transcript.disciplines)


def test_transcript_without_grades_is_empty(enrolled):
    transcript = enrolled.get_student_transcript(STUDENT, STUDENT)
    assert len(transcript) == 0


def test_discipline_outside_bound_course_resolves_to_empty(enrolled):
    enrolled.add_course(INST, INST, "B202", "Math", "bachelor", 4)
    enrolled.add_discipline_to_course(INST, INST, "B202", "M1", "Calculus", "", 90, 6)
    enrolled.enroll_student_in_discipline(INST, INST, STUDENT, "M1", "B202")
    enrolled.add_grade(INST, INST, STUDENT, "M1", 1, 75, 90, True)

    transcript = enrolled.get_student_transcript(STUDENT, STUDENT)
    [(grade, discipline)] = list(transcript.pairs())
    assert grade.discipline_code == "M1"
    assert discipline.is_empty


def test_transcript_for_stranger_rejects_not_authorized(enrolled):
    with pytest.raises(NotAuthorizedError):
        enrolled.get_student_transcript(STRANGER, STUDENT)


def test_transcript_for_unbound_student_rejects_not_enrolled(catalog):
    catalog.add_student(INST, INST, STUDENT)
    with pytest.raises(NotEnrolledError):
        catalog.get_student_transcript(STUDENT, STUDENT)


def test_transcript_for_unknown_student_rejects_not_found(registry):
    with pytest.raises(NotFoundError):
        registry.get_student_transcript(STUDENT, STUDENT)


# ─── get_student_institution_data ────────────────────────────────

def test_institution_data_returns_bound_course(enrolled):
    institution, course = enrolled.get_student_institution_data(STUDENT)
    assert institution.identity == INST
    assert course.code == COURSE
    assert course.name == "Computer Science"


def test_institution_data_for_unbound_student_rejects_not_enrolled(catalog):
    catalog.add_student(INST, INST, STUDENT)
    with pytest.raises(NotEnrolledError):
        catalog.get_student_institution_data(STUDENT)
