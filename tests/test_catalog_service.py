"""Entity Registries: tests for institution, course and discipline inserts.

Tests cover:
    - only the owner adds institutions; duplicates rejected
    - only the owning institution adds courses and disciplines
    - parent existence checked before uniqueness
    - composite keys keep same codes under different parents apart
    - read projections and their NotFound cases
"""

import pytest

from academic_registry.core.exceptions import (
    AlreadyExistsError, NotAuthorizedError, NotFoundError,
)

from tests.conftest import COURSE, DISC, DISC2, INST, OTHER_INST, OWNER


# ─── add_institution ─────────────────────────────────────────────

def test_owner_adds_institution(registry):
    institution = registry.add_institution(OWNER, INST, "Institution A", "doc-a")
    assert institution.identity == INST
    assert registry.get_institution(INST) == institution


def test_add_institution_twice_rejects_already_exists(registry):
    registry.add_institution(OWNER, INST, "Institution A", "doc-a")
    with pytest.raises(AlreadyExistsError):
        registry.add_institution(OWNER, INST, "Other name", "doc-b")
    assert registry.get_institution(INST).name == "Institution A"


def test_non_owner_cannot_add_institution(registry):
    with pytest.raises(NotAuthorizedError):
        registry.add_institution(INST, INST, "Institution A", "doc-a")
    assert registry.get_institution_list() == []


def test_institution_list_keeps_registration_order(registry):
    for identity in ("i3", "i1", "i2"):
        registry.add_institution(OWNER, identity, identity.upper(), "doc")
    assert [i.identity for i in registry.get_institution_list()] == ["i3", "i1", "i2"]


def test_get_unknown_institution_rejects_not_found(registry):
    with pytest.raises(NotFoundError):
        registry.get_institution("missing")


# ─── add_course ──────────────────────────────────────────────────

def test_add_course_on_unregistered_institution_rejects_not_found(registry):
    with pytest.raises(NotFoundError):
        registry.add_course(INST, INST, COURSE, "CS", "bachelor", 4)


def test_add_course_by_other_actor_rejects_not_authorized(catalog):
    catalog.add_institution(OWNER, OTHER_INST, "Institution B", "doc-b")
    with pytest.raises(NotAuthorizedError):
        catalog.add_course(OTHER_INST, INST, "B1", "Hijack", "bachelor", 4)
    with pytest.raises(NotAuthorizedError):
        catalog.add_course(OWNER, INST, "B1", "Owner course", "bachelor", 4)


def test_add_duplicate_course_rejects_already_exists(catalog):
    with pytest.raises(AlreadyExistsError):
        catalog.add_course(INST, INST, COURSE, "Again", "bachelor", 4)


def test_same_course_code_under_different_institutions(catalog):
    catalog.add_institution(OWNER, OTHER_INST, "Institution B", "doc-b")
    course = catalog.add_course(OTHER_INST, OTHER_INST, COURSE, "Other CS", "technologist", 6)
    assert course.key == (OTHER_INST, COURSE)
    assert [c.name for c in catalog.get_courses_from_institution(INST)] == ["Computer Science"]
    assert [c.name for c in catalog.get_courses_from_institution(OTHER_INST)] == ["Other CS"]


def test_courses_of_unknown_institution_rejects_not_found(registry):
    with pytest.raises(NotFoundError):
        registry.get_courses_from_institution("missing")


def test_courses_of_institution_without_courses_is_empty(registry):
    registry.add_institution(OWNER, INST, "Institution A", "doc-a")
    assert registry.get_courses_from_institution(INST) == []


# ─── add_discipline_to_course ────────────────────────────────────

def test_add_discipline_to_unregistered_course_rejects_not_found(catalog):
    with pytest.raises(NotFoundError):
        catalog.add_discipline_to_course(INST, INST, "NOPE", "X1", "X", "", 30, 2)


def test_add_duplicate_discipline_rejects_already_exists(catalog):
    with pytest.raises(AlreadyExistsError):
        catalog.add_discipline_to_course(INST, INST, COURSE, DISC, "Again", "", 30, 2)


def test_add_discipline_by_other_actor_rejects_not_authorized(catalog):
    with pytest.raises(NotAuthorizedError):
        catalog.add_discipline_to_course(OWNER, INST, COURSE, "X1", "X", "", 30, 2)


def test_same_discipline_code_under_different_courses(catalog):
    catalog.add_course(INST, INST, "B202", "Math", "bachelor", 4)
    catalog.add_discipline_to_course(INST, INST, "B202", DISC, "Calculus", "", 90, 6)
    assert catalog.get_discipline(INST, COURSE, DISC).name == "Algorithms"
    assert catalog.get_discipline(INST, "B202", DISC).name == "Calculus"


def test_disciplines_listed_in_insertion_order(catalog):
    codes = [d.code for d in catalog.get_disciplines_from_course(INST, COURSE)]
    assert codes == [DISC, DISC2]


def test_disciplines_of_unknown_course_rejects_not_found(catalog):
    with pytest.raises(NotFoundError):
        catalog.get_disciplines_from_course(INST, "NOPE")


def test_get_unknown_discipline_rejects_not_found(catalog):
    with pytest.raises(NotFoundError):
        catalog.get_discipline(INST, COURSE, "NOPE")


def test_discipline_record_carries_all_attributes(catalog):
    discipline = catalog.get_discipline(INST, COURSE, DISC)
    assert (discipline.name, discipline.syllabus, discipline.workload, discipline.credits) == (
        "Algorithms", "graphs", 60, 4)
    assert discipline.key.course_key == (INST, COURSE)
