"""Entities — frozen records and the immutable Dataset snapshot that holds them.

Invariants:
    - Every record is a frozen dataclass; updates build a new record, never mutate
    - Dataset collections are tuples; a snapshot cannot be changed after creation
    - attendance_keys / grade_keys always index the tuples they were built from
    - Natural key index points at the FIRST record carrying that key

Design Decisions:
    - Composite-key indexes live on the snapshot so upserts find their target in O(1)
      instead of scanning the collection
    - Indexes excluded from equality/repr: two snapshots with the same records are equal
    - evolve() drops a stale index whenever its collection is replaced without one,
      so dataclasses.replace can never carry an index for the wrong tuple
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from teacherhub.core.domain_types import (
    AssessmentId, AttendanceId, AttendanceStatus, GradeId, GroupId,
    IsoTimestamp, Month, PaymentId, PaymentStatus, Performance,
    SessionId, SessionReportId, StudentId,
)


@dataclass(frozen=True)
class Student:
    id: StudentId
    full_name: str
    created_at: IsoTimestamp
    contact_info: str | None = None
    parent_phone: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class Group:
    id: GroupId
    name: str
    created_at: IsoTimestamp
    description: str | None = None


@dataclass(frozen=True)
class StudentGroup:
    """Many-to-many link. No id of its own; the pair is the identity."""
    student_id: StudentId
    group_id: GroupId


@dataclass(frozen=True)
class Session:
    id: SessionId
    group_id: GroupId
    date_time: IsoTimestamp
    created_at: IsoTimestamp
    topic: str | None = None


@dataclass(frozen=True)
class AttendanceRecord:
    id: AttendanceId
    session_id: SessionId
    student_id: StudentId
    status: AttendanceStatus


@dataclass(frozen=True)
class SessionReport:
    id: SessionReportId
    session_id: SessionId
    student_id: StudentId
    performance: Performance
    created_at: IsoTimestamp
    updated_at: IsoTimestamp
    strengths: str = ""
    improvements: str = ""
    notes: str = ""


@dataclass(frozen=True)
class Assessment:
    id: AssessmentId
    group_id: GroupId
    name: str
    max_score: float
    date: IsoTimestamp
    created_at: IsoTimestamp


@dataclass(frozen=True)
class Grade:
    """Score range (0..max_score) is the caller's concern, not the store's."""
    id: GradeId
    assessment_id: AssessmentId
    student_id: StudentId
    score: float
    comments: str | None = None


@dataclass(frozen=True)
class PaymentRecord:
    id: PaymentId
    student_id: StudentId
    group_id: GroupId
    month: Month
    status: PaymentStatus
    amount: float
    due_date: IsoTimestamp
    created_at: IsoTimestamp
    paid_date: IsoTimestamp | None = None
    notes: str | None = None


# ─── Natural keys ────────────────────────────────────────────────

AttendanceKey = tuple[str, str]   # (session_id, student_id)
GradeKey = tuple[str, str]        # (assessment_id, student_id)


def attendance_key(record: AttendanceRecord) -> AttendanceKey:
    return (record.session_id, record.student_id)


def grade_key(record: Grade) -> GradeKey:
    return (record.assessment_id, record.student_id)


def index_by_natural_key(records: Iterable, key_fn) -> Mapping[tuple[str, str], int]:
    """Map natural key -> position of the first record carrying it."""
    index: dict[tuple[str, str], int] = {}
    for position, record in enumerate(records):
        index.setdefault(key_fn(record), position)
    return MappingProxyType(index)


# ─── Snapshot ────────────────────────────────────────────────────

# Order matches the persisted snapshot layout
COLLECTION_FIELDS: tuple[str, ...] = (
    "students", "groups", "student_groups", "sessions",
    "attendance_records", "session_reports", "assessments",
    "grades", "payment_records",
)


@dataclass(frozen=True)
class Dataset:
    """The complete set of entity collections at one point in time."""

    students: tuple[Student, ...] = ()
    groups: tuple[Group, ...] = ()
    student_groups: tuple[StudentGroup, ...] = ()
    sessions: tuple[Session, ...] = ()
    attendance_records: tuple[AttendanceRecord, ...] = ()
    session_reports: tuple[SessionReport, ...] = ()
    assessments: tuple[Assessment, ...] = ()
    grades: tuple[Grade, ...] = ()
    payment_records: tuple[PaymentRecord, ...] = ()

    # Derived, rebuilt from the collections when not supplied
    attendance_keys: Mapping[AttendanceKey, int] | None = field(
        default=None, compare=False, repr=False,
    )
    grade_keys: Mapping[GradeKey, int] | None = field(
        default=None, compare=False, repr=False,
    )

    def __post_init__(self) -> None:
        for name in COLLECTION_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value))
        if self.attendance_keys is None:
            object.__setattr__(
                self, "attendance_keys",
                index_by_natural_key(self.attendance_records, attendance_key),
            )
        if self.grade_keys is None:
            object.__setattr__(
                self, "grade_keys", index_by_natural_key(self.grades, grade_key),
            )

    def evolve(self, **changes) -> "Dataset":
        """Copy with some collections replaced. Stale indexes are rebuilt."""
        if "attendance_records" in changes:
            changes.setdefault("attendance_keys", None)
        if "grades" in changes:
            changes.setdefault("grade_keys", None)
        return replace(self, **changes)

    def size_of(self, collection: str) -> int:
        return len(getattr(self, collection))


EMPTY_DATASET = Dataset()
