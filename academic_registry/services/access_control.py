"""
Per-student allow-list of readers and the protected reads it guards.

The ledger only grows: there is no revoke operation.
"""

from typing import List, Optional

from ..core.entities import Grade, StudentInformation
from ..core.enums import EventType
from ..core.exceptions import AlreadyExistsError, NotAuthorizedError
from .base import RegistryService, student_stream
from .event_service import PendingEvent


class AccessControlService(RegistryService):
    """Service managing access grants and protected student data."""

    def add_allowed_address(self, caller: str, reader: str, identity: str) -> None:
        """Let ``reader`` read the caller's own protected data."""
        with self._concurrency_manager.write():
            self._require_actor(caller, identity, f"grant access to student {identity!r}")
            self._require_student(identity)
            if self._store.is_granted(identity, reader):
                raise self._reject(AlreadyExistsError(
                    f"{reader!r} is already allowed to read student {identity!r}",
                    details={'student': identity, 'reader': reader},
                ))

            grant = {'student': identity, 'reader': reader}
            events = self._journal(PendingEvent(
                EventType.ACCESS_GRANTED, student_stream(identity), grant, grant,
            ))
            self._store.insert_grant(identity, reader)
            self._deliver(events)

    def add_student_information(self, caller: str, encrypted_information: str,
                                public_key: Optional[str] = None) -> None:
        """Overwrite the caller's profile blob, and public key when given."""
        with self._concurrency_manager.write():
            student = self._require_student(caller)
            events = self._journal(PendingEvent(
                EventType.PROFILE_UPDATED, student_stream(caller),
                {'student': caller, 'public_key_changed': public_key is not None},
                {'student': caller, 'encrypted_information': encrypted_information,
                 'public_key': public_key},
            ))
            self._store.put_student(student.with_information(encrypted_information, public_key))
            self._deliver(events)

    def is_allowed(self, reader: str, identity: str) -> bool:
        with self._concurrency_manager.read():
            return self._store.is_granted(identity, reader)

    def get_allowed_readers(self, caller: str, identity: str) -> List[str]:
        """Readers on the allow-list, in grant order.

        Visible to the student and to its institution only.
        """
        with self._concurrency_manager.read():
            student = self._require_student(identity)
            if caller not in (student.identity, student.institution):
                raise self._reject(NotAuthorizedError(
                    f"{caller!r} may not list readers of student {identity!r}",
                    details={'caller': caller, 'student': identity},
                ))
            return self._store.list_grants(identity)

    def retrieve_student_information(self, caller: str, identity: str) -> StudentInformation:
        with self._concurrency_manager.read():
            student = self._require_student(identity)
            self._require_reader(caller, student)
            return StudentInformation(
                encrypted_information=student.encrypted_information,
                public_key=student.public_key,
            )

    def get_grades(self, caller: str, identity: str) -> List[Grade]:
        with self._concurrency_manager.read():
            student = self._require_student(identity)
            self._require_reader(caller, student)
            return self._store.list_grades(identity)
