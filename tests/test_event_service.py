"""Notifications: tests for the event service and journals.

Tests cover:
    - one notification per successful mutation, none on rejection
    - stream naming and commit-order sequences
    - subscriber failures are logged and counted, never raised
    - FileEventStore persistence and sequence continuation
    - EventStoreFactory
"""

import logging

import pytest

from academic_registry.core.entities import Event, GradeInput
from academic_registry.core.enums import EventType
from academic_registry.core.exceptions import AlreadyExistsError, ConfigurationError
from academic_registry.core.interfaces import EventHandler
from academic_registry.persistence import (
    EventStoreFactory, FileEventStore, InMemoryEventStore,
)
from academic_registry.services import AcademicRegistry, EventService

from tests.conftest import COURSE, DISC, DISC2, INST, OWNER, STRANGER, STUDENT


# ─── Notifications from the registry ─────────────────────────────

def test_catalog_setup_publishes_one_event_per_insert(catalog):
    types = [e.event_type for e in catalog.event_service.get_all_events()]
    assert types == [
        EventType.INSTITUTION_ADDED,
        EventType.COURSE_ADDED,
        EventType.DISCIPLINE_ADDED,
        EventType.DISCIPLINE_ADDED,
    ]


def test_rejected_call_publishes_nothing(enrolled):
    before = len(enrolled.event_service.get_all_events())
    with pytest.raises(AlreadyExistsError):
        enrolled.enroll_student_in_discipline(INST, INST, STUDENT, DISC, COURSE)
    assert len(enrolled.event_service.get_all_events()) == before


def test_batch_publishes_one_event_per_grade(enrolled):
    enrolled.enroll_student_in_discipline(INST, INST, STUDENT, DISC2, COURSE)
    enrolled.add_grades(INST, INST, STUDENT, [
        GradeInput(DISC, 1, 85, 90, True),
        GradeInput(DISC2, 1, 60, 80, True),
    ])
    grade_events = enrolled.event_service.get_all_events(EventType.GRADE_ADDED)
    assert [e.event_data["discipline_code"] for e in grade_events] == [DISC, DISC2]


def test_student_events_land_on_student_stream(enrolled):
    enrolled.add_allowed_address(STUDENT, STRANGER, STUDENT)
    events = enrolled.event_service.get_events(f"student:{STUDENT}")
    assert [e.event_type for e in events] == [
        EventType.STUDENT_ADDED,
        EventType.STUDENT_ENROLLED,
        EventType.ACCESS_GRANTED,
    ]
    assert f"institution:{INST}" in enrolled.event_service.get_event_streams()


def test_sequences_follow_commit_order(enrolled):
    sequences = [e.sequence for e in enrolled.event_service.get_all_events()]
    assert sequences == list(range(1, len(sequences) + 1))


# ─── Subscribers ─────────────────────────────────────────────────

def test_subscriber_receives_matching_events_only(registry):
    received = []
    registry.event_service.subscribe("watcher", {EventType.COURSE_ADDED}, received.append)
    registry.add_institution(OWNER, INST, "Institution A", "doc-a")
    registry.add_course(INST, INST, COURSE, "Computer Science", "bachelor", 4)
    assert [e.event_type for e in received] == [EventType.COURSE_ADDED]
    assert received[0].event_data["course_code"] == COURSE


def test_subscriber_filter_is_applied(registry):
    received = []
    registry.event_service.subscribe(
        "watcher", {EventType.INSTITUTION_ADDED}, received.append,
        filter_func=lambda e: e.event_data["institution"] == "i2",
    )
    registry.add_institution(OWNER, "i1", "One", "doc")
    registry.add_institution(OWNER, "i2", "Two", "doc")
    assert len(received) == 1


def test_unsubscribe_stops_delivery(registry):
    received = []
    registry.event_service.subscribe("watcher", {EventType.INSTITUTION_ADDED}, received.append)
    registry.event_service.unsubscribe("watcher")
    registry.add_institution(OWNER, INST, "Institution A", "doc-a")
    assert received == []


def test_failing_subscriber_does_not_fail_mutation(registry, caplog):
    def explode(event):
        raise RuntimeError("subscriber down")

    registry.event_service.subscribe("broken", {EventType.INSTITUTION_ADDED}, explode)
    with caplog.at_level(logging.ERROR):
        registry.add_institution(OWNER, INST, "Institution A", "doc-a")

    assert registry.get_institution(INST).name == "Institution A"
    assert "broken" in caplog.text
    assert registry.event_service.get_processing_statistics()["delivery_failures"] == 1


def test_registry_statistics_include_events(catalog):
    stats = catalog.get_statistics()
    assert stats["events"]["published"] == 4
    assert stats["records"]["institutions"] == 1


# ─── Event stores ────────────────────────────────────────────────

def test_file_store_persists_across_instances(tmp_path):
    store = FileEventStore(base_path=str(tmp_path))
    service = EventService(store)
    service.publish(EventType.INSTITUTION_ADDED, "institution:a", {"identity": "a"})
    service.publish(EventType.COURSE_ADDED, "institution:a", {"course_code": "c"})

    reopened = FileEventStore(base_path=str(tmp_path))
    events = reopened.get_all_events()
    assert [e.event_type for e in events] == [EventType.INSTITUTION_ADDED, EventType.COURSE_ADDED]
    assert reopened.get_all_streams() == ["institution:a"]
    assert reopened.get_events("institution:a", from_version=1)[0].event_data == {"course_code": "c"}


def test_sequence_continues_from_existing_journal(tmp_path):
    first = EventService(FileEventStore(base_path=str(tmp_path)))
    first.publish(EventType.INSTITUTION_ADDED, "institution:a", {"identity": "a"})

    second = EventService(FileEventStore(base_path=str(tmp_path)))
    event = second.publish(EventType.INSTITUTION_ADDED, "institution:b", {"identity": "b"})
    assert event.sequence == 2


def test_file_store_skips_malformed_lines(tmp_path):
    store = FileEventStore(base_path=str(tmp_path))
    store.append_event(Event(EventType.INSTITUTION_ADDED, "institution:a", {}, sequence=1))
    with open(store.journal_path, "a", encoding="utf-8") as f:
        f.write("not json\n")
    assert len(store.get_all_events()) == 1


def test_registry_over_file_store(tmp_path):
    store = EventStoreFactory.create_event_store("file", base_path=str(tmp_path))
    registry = AcademicRegistry(owner=OWNER, event_service=EventService(store))
    registry.add_institution(OWNER, INST, "Institution A", "doc-a")
    assert FileEventStore(base_path=str(tmp_path)).get_all_events()[0].stream_id == f"institution:{INST}"


def test_factory_creates_memory_store():
    assert isinstance(EventStoreFactory.create_event_store("memory"), InMemoryEventStore)


def test_factory_rejects_unknown_type():
    with pytest.raises(ConfigurationError):
        EventStoreFactory.create_event_store("postgres")


class GradeCounter(EventHandler):
    def __init__(self):
        self.count = 0

    def handle_event(self, event):
        self.count += 1

    def can_handle(self, event_type):
        return event_type == EventType.GRADE_ADDED


def test_handler_receives_types_it_can_handle(enrolled):
    counter = GradeCounter()
    enrolled.event_service.add_handler(counter)
    enrolled.add_grade(INST, INST, STUDENT, DISC, 1, 85, 90, True)
    enrolled.add_allowed_address(STUDENT, STRANGER, STUDENT)
    assert counter.count == 1
