"""
Concurrency management for the registry.

Every mutation runs under one global write lock and every read under a shared
read lock, so uniqueness and referential checks always see committed state.
"""

import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from ..core.enums import LockType


class ConcurrencyManager:
    """Single-writer, multi-reader lock shared by all registry services.

    The writer is reentrant: a thread holding the write lock may take the write
    or read lock again. A thread holding only a read lock must not ask for the
    write lock.
    """

    def __init__(self):
        self._condition = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer: Optional[int] = None
        self._writer_depth = 0
        self._writes_committed = 0
        self._reads_served = 0

    def acquire_read(self) -> None:
        me = threading.get_ident()
        with self._condition:
            while self._writer is not None and self._writer != me:
                self._condition.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._condition:
            self._readers -= 1
            self._reads_served += 1
            if self._readers == 0:
                self._condition.notify_all()

    def acquire_write(self) -> None:
        me = threading.get_ident()
        with self._condition:
            if self._writer == me:
                self._writer_depth += 1
                return
            while self._writer is not None or self._readers > 0:
                self._condition.wait()
            self._writer = me
            self._writer_depth = 1

    def release_write(self) -> None:
        with self._condition:
            self._writer_depth -= 1
            if self._writer_depth == 0:
                self._writer = None
                self._writes_committed += 1
                self._condition.notify_all()

    @contextmanager
    def lock(self, lock_type: LockType) -> Iterator[None]:
        """Context manager for acquiring and releasing the registry lock."""
        if lock_type == LockType.WRITE:
            self.acquire_write()
            try:
                yield
            finally:
                self.release_write()
        else:
            self.acquire_read()
            try:
                yield
            finally:
                self.release_read()

    def write(self):
        return self.lock(LockType.WRITE)

    def read(self):
        return self.lock(LockType.READ)

    def get_statistics(self) -> Dict[str, Any]:
        with self._condition:
            return {
                'active_readers': self._readers,
                'writer_active': self._writer is not None,
                'writes_committed': self._writes_committed,
                'reads_served': self._reads_served,
            }
