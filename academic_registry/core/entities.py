"""
Core entities for the academic registry.

Records are immutable once built. The store replaces a record with a new
instance when a mutable attribute (student profile, bound course) changes, so a
record handed to a caller never changes underneath it.
"""

import uuid
from abc import ABC
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from .enums import EventType


class CourseKey(NamedTuple):
    """Composite key of a course: code unique within its institution."""
    institution: str
    code: str


class DisciplineKey(NamedTuple):
    """Composite key of a discipline: code unique within its course."""
    institution: str
    course_code: str
    code: str

    @property
    def course_key(self) -> CourseKey:
        return CourseKey(self.institution, self.course_code)


class GradeKey(NamedTuple):
    """At most one grade exists per (student, discipline, period)."""
    student: str
    discipline_code: str
    period: int


class AbstractRecord(ABC):
    """Base record with creation timestamp."""

    def __init__(self, created_at: Optional[datetime] = None):
        self._created_at = created_at or datetime.now(timezone.utc)

    @property
    def created_at(self) -> datetime:
        """Get creation timestamp."""
        return self._created_at

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to dictionary."""
        return {'created_at': self._created_at.isoformat()}

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self._fields() == other._fields()

    def __hash__(self) -> int:
        return hash((self.__class__.__name__, repr(sorted(self._fields().items()))))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._fields()})"

    def _fields(self) -> Dict[str, Any]:
        fields = self.to_dict()
        fields.pop('created_at')
        return fields


class Institution(AbstractRecord):
    """An institution; its key is its own identity."""

    def __init__(self, identity: str, name: str, document: str, **kwargs):
        super().__init__(**kwargs)
        self._identity = identity
        self._name = name
        self._document = document

    @property
    def identity(self) -> str:
        return self._identity

    @property
    def name(self) -> str:
        return self._name

    @property
    def document(self) -> str:
        return self._document

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            'identity': self._identity,
            'name': self._name,
            'document': self._document,
        })
        return base_dict


class Course(AbstractRecord):
    """A course offered by an institution."""

    def __init__(self, institution: str, code: str, name: str, course_type: str,
                 semesters: int, **kwargs):
        super().__init__(**kwargs)
        self._institution = institution
        self._code = code
        self._name = name
        self._course_type = course_type
        self._semesters = semesters

    @property
    def key(self) -> CourseKey:
        return CourseKey(self._institution, self._code)

    @property
    def institution(self) -> str:
        return self._institution

    @property
    def code(self) -> str:
        return self._code

    @property
    def name(self) -> str:
        return self._name

    @property
    def course_type(self) -> str:
        return self._course_type

    @property
    def semesters(self) -> int:
        return self._semesters

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            'institution': self._institution,
            'code': self._code,
            'name': self._name,
            'course_type': self._course_type,
            'semesters': self._semesters,
        })
        return base_dict


class Discipline(AbstractRecord):
    """A discipline within a course."""

    def __init__(self, institution: str, course_code: str, code: str, name: str,
                 syllabus: str, workload: int, credits: int, **kwargs):
        super().__init__(**kwargs)
        self._institution = institution
        self._course_code = course_code
        self._code = code
        self._name = name
        self._syllabus = syllabus
        self._workload = workload
        self._credits = credits

    @classmethod
    def empty(cls) -> 'Discipline':
        """Placeholder for a transcript entry whose discipline cannot be resolved."""
        return cls(institution="", course_code="", code="", name="", syllabus="",
                   workload=0, credits=0)

    @property
    def is_empty(self) -> bool:
        return not self._code

    @property
    def key(self) -> DisciplineKey:
        return DisciplineKey(self._institution, self._course_code, self._code)

    @property
    def institution(self) -> str:
        return self._institution

    @property
    def course_code(self) -> str:
        return self._course_code

    @property
    def code(self) -> str:
        return self._code

    @property
    def name(self) -> str:
        return self._name

    @property
    def syllabus(self) -> str:
        return self._syllabus

    @property
    def workload(self) -> int:
        return self._workload

    @property
    def credits(self) -> int:
        return self._credits

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            'institution': self._institution,
            'course_code': self._course_code,
            'code': self._code,
            'name': self._name,
            'syllabus': self._syllabus,
            'workload': self._workload,
            'credits': self._credits,
        })
        return base_dict


class Student(AbstractRecord):
    """Student record with its encrypted profile and public key."""

    def __init__(self, identity: str, institution: str, name: Optional[str] = None,
                 document: Optional[str] = None, encrypted_information: str = "",
                 public_key: str = "", course_code: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self._identity = identity
        self._institution = institution
        self._name = name
        self._document = document
        self._encrypted_information = encrypted_information
        self._public_key = public_key
        self._course_code = course_code

    @property
    def identity(self) -> str:
        return self._identity

    @property
    def institution(self) -> str:
        return self._institution

    @property
    def name(self) -> Optional[str]:
        return self._name

    @property
    def document(self) -> Optional[str]:
        return self._document

    @property
    def encrypted_information(self) -> str:
        return self._encrypted_information

    @property
    def public_key(self) -> str:
        return self._public_key

    @property
    def course_code(self) -> Optional[str]:
        """Course bound at first enrollment, or None."""
        return self._course_code

    @property
    def course_key(self) -> Optional[CourseKey]:
        if self._course_code is None:
            return None
        return CourseKey(self._institution, self._course_code)

    def with_information(self, encrypted_information: str,
                         public_key: Optional[str] = None) -> 'Student':
        """Return a copy carrying a new profile blob and, if given, a new public key."""
        return Student(
            identity=self._identity,
            institution=self._institution,
            name=self._name,
            document=self._document,
            encrypted_information=encrypted_information,
            public_key=self._public_key if public_key is None else public_key,
            course_code=self._course_code,
            created_at=self._created_at,
        )

    def with_course(self, course_code: str) -> 'Student':
        """Return a copy bound to ``course_code``."""
        return Student(
            identity=self._identity,
            institution=self._institution,
            name=self._name,
            document=self._document,
            encrypted_information=self._encrypted_information,
            public_key=self._public_key,
            course_code=course_code,
            created_at=self._created_at,
        )

    def to_view(self) -> 'StudentView':
        """Projection without the protected profile blob."""
        return StudentView(
            identity=self._identity,
            institution=self._institution,
            course_code=self._course_code,
            public_key=self._public_key,
        )

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            'identity': self._identity,
            'institution': self._institution,
            'course_code': self._course_code,
            'public_key': self._public_key,
            'name': self._name,
            'document': self._document,
            'encrypted_information': self._encrypted_information,
        })
        return base_dict


class Grade(AbstractRecord):
    """Immutable grade entity."""

    def __init__(self, student: str, discipline_code: str, period: int, score: int,
                 attendance: int, passed: bool, **kwargs):
        super().__init__(**kwargs)
        self._student = student
        self._discipline_code = discipline_code
        self._period = period
        self._score = score
        self._attendance = attendance
        self._passed = passed

    @property
    def key(self) -> GradeKey:
        return GradeKey(self._student, self._discipline_code, self._period)

    @property
    def student(self) -> str:
        return self._student

    @property
    def discipline_code(self) -> str:
        return self._discipline_code

    @property
    def period(self) -> int:
        return self._period

    @property
    def score(self) -> int:
        return self._score

    @property
    def attendance(self) -> int:
        return self._attendance

    @property
    def passed(self) -> bool:
        return self._passed

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            'student': self._student,
            'discipline_code': self._discipline_code,
            'period': self._period,
            'score': self._score,
            'attendance': self._attendance,
            'passed': self._passed,
        })
        return base_dict


@dataclass(frozen=True)
class GradeInput:
    """One entry of a batch grade submission."""
    discipline_code: str
    period: int
    score: int
    attendance: int
    passed: bool


@dataclass(frozen=True)
class StudentInformation:
    """Protected profile of a student."""
    encrypted_information: str
    public_key: str


@dataclass(frozen=True)
class StudentView:
    """What anyone may see of a student."""
    identity: str
    institution: str
    course_code: Optional[str]
    public_key: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Transcript:
    """Grades and their disciplines as two index-aligned sequences."""
    grades: Tuple[Grade, ...]
    disciplines: Tuple[Discipline, ...]

    def __post_init__(self):
        if len(self.grades) != len(self.disciplines):
            raise ValueError("transcript sequences must have equal length")

    def pairs(self) -> List[Tuple[Grade, Discipline]]:
        return list(zip(self.grades, self.disciplines))

    def __len__(self) -> int:
        return len(self.grades)


class Event(AbstractRecord):
    """Journal entry and notification for one registry mutation."""

    def __init__(self, event_type: EventType, stream_id: str, event_data: Dict[str, Any],
                 event_id: Optional[str] = None, sequence: int = 0,
                 payload: Optional[Dict[str, Any]] = None, **kwargs):
        super().__init__(**kwargs)
        self._id = event_id or str(uuid.uuid4())
        self._event_type = event_type
        self._stream_id = stream_id
        self._event_data = dict(event_data)
        self._sequence = sequence
        self._payload = dict(payload or {})

    @property
    def id(self) -> str:
        return self._id

    @property
    def event_type(self) -> EventType:
        return self._event_type

    @property
    def stream_id(self) -> str:
        return self._stream_id

    @property
    def event_data(self) -> Dict[str, Any]:
        return self._event_data.copy()

    @property
    def sequence(self) -> int:
        """Position in the global commit order, starting at 1."""
        return self._sequence

    @property
    def payload(self) -> Dict[str, Any]:
        """Record state needed to rebuild the registry from the journal.

        Unlike ``event_data`` it may hold protected values, so it is journaled
        but never served as part of the notification.
        """
        return self._payload.copy()

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            'id': self._id,
            'event_type': self._event_type.value,
            'stream_id': self._stream_id,
            'event_data': self._event_data,
            'sequence': self._sequence,
            'payload': self._payload,
        })
        return base_dict
