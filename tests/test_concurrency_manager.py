"""Concurrency: tests for the single-writer lock and racing mutations.

Tests cover:
    - racing grade inserts on one key have exactly one winner
    - racing institution inserts have exactly one winner
    - the writer is reentrant
    - lock statistics
"""

import threading

from academic_registry.core.exceptions import AlreadyExistsError
from academic_registry.core.enums import EventType, LockType
from academic_registry.services import ConcurrencyManager

from tests.conftest import DISC, INST, OWNER, STUDENT


def _race(count, call):
    """Run ``call`` from ``count`` threads released together."""
    barrier = threading.Barrier(count)
    outcomes = []
    outcomes_lock = threading.Lock()

    def worker(index):
        barrier.wait()
        try:
            call(index)
            result = "ok"
        except AlreadyExistsError:
            result = "exists"
        with outcomes_lock:
            outcomes.append(result)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return outcomes


# ─── Racing mutations ────────────────────────────────────────────

def test_racing_grades_on_same_key_have_one_winner(enrolled):
    outcomes = _race(20, lambda i: enrolled.add_grade(INST, INST, STUDENT, DISC, 1, i, 90, True))

    assert outcomes.count("ok") == 1
    assert outcomes.count("exists") == 19
    assert len(enrolled.get_grades(STUDENT, STUDENT)) == 1
    assert len(enrolled.event_service.get_all_events(EventType.GRADE_ADDED)) == 1


def test_racing_institution_inserts_have_one_winner(registry):
    outcomes = _race(10, lambda i: registry.add_institution(OWNER, INST, f"Name {i}", "doc"))

    assert outcomes.count("ok") == 1
    assert len(registry.get_institution_list()) == 1


def test_distinct_keys_all_succeed(enrolled):
    outcomes = _race(8, lambda i: enrolled.add_grade(INST, INST, STUDENT, DISC, i, 50, 90, True))

    assert outcomes == ["ok"] * 8
    assert sorted(g.period for g in enrolled.get_grades(STUDENT, STUDENT)) == list(range(8))


# ─── ConcurrencyManager ──────────────────────────────────────────

def test_writer_may_reenter_write_and_read():
    manager = ConcurrencyManager()
    with manager.write():
        with manager.write():
            with manager.read():
                assert manager.get_statistics()["writer_active"]
    stats = manager.get_statistics()
    assert not stats["writer_active"]
    assert stats["writes_committed"] == 1


def test_readers_share_the_lock():
    manager = ConcurrencyManager()
    inside = threading.Barrier(2, timeout=5)

    def reader():
        with manager.lock(LockType.READ):
            inside.wait()

    threads = [threading.Thread(target=reader) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert manager.get_statistics()["reads_served"] == 2
