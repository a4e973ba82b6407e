"""Actions — the closed set of mutation requests the Entity Store accepts.

Invariants:
    - One frozen dataclass per action kind; Action is their Union (tagged by class)
    - Create actions carry entity fields minus id/created_at (the store assigns those)
    - Update actions carry the full record, matched by id
    - Delete actions carry only the id
    - Upsert actions (attendance, grade) carry the natural key plus mutable fields

Design Decisions:
    - Union of dataclasses over a string "type" field: exhaustiveness is visible to
      the type checker and the handler table in mutations.py is keyed by class
    - No validation here: required-field checks belong to the caller before dispatch
"""

from dataclasses import dataclass
from typing import Union

from teacherhub.core.domain_types import (
    AssessmentId, AttendanceStatus, GradeId, GroupId, IsoTimestamp, Month,
    PaymentId, PaymentStatus, Performance, SessionId, SessionReportId, StudentId,
)
from teacherhub.core.entities import (
    Assessment, AttendanceRecord, Dataset, Grade, Group, PaymentRecord,
    Session, SessionReport, Student,
)


# ─── Students ────────────────────────────────────────────────────

@dataclass(frozen=True)
class AddStudent:
    full_name: str
    contact_info: str | None = None
    parent_phone: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class UpdateStudent:
    student: Student


@dataclass(frozen=True)
class DeleteStudent:
    student_id: StudentId


# ─── Groups & membership ─────────────────────────────────────────

@dataclass(frozen=True)
class AddGroup:
    name: str
    description: str | None = None


@dataclass(frozen=True)
class UpdateGroup:
    group: Group


@dataclass(frozen=True)
class DeleteGroup:
    group_id: GroupId


@dataclass(frozen=True)
class AddStudentToGroup:
    student_id: StudentId
    group_id: GroupId


@dataclass(frozen=True)
class RemoveStudentFromGroup:
    student_id: StudentId
    group_id: GroupId


# ─── Sessions, attendance, reports ───────────────────────────────

@dataclass(frozen=True)
class AddSession:
    group_id: GroupId
    date_time: IsoTimestamp
    topic: str | None = None


@dataclass(frozen=True)
class UpdateSession:
    session: Session


@dataclass(frozen=True)
class DeleteSession:
    session_id: SessionId


@dataclass(frozen=True)
class RecordAttendance:
    """Upsert keyed by (session_id, student_id)."""
    session_id: SessionId
    student_id: StudentId
    status: AttendanceStatus


@dataclass(frozen=True)
class UpdateAttendance:
    record: AttendanceRecord


@dataclass(frozen=True)
class AddSessionReport:
    session_id: SessionId
    student_id: StudentId
    performance: Performance = Performance.AVERAGE
    strengths: str = ""
    improvements: str = ""
    notes: str = ""


@dataclass(frozen=True)
class UpdateSessionReport:
    report: SessionReport


@dataclass(frozen=True)
class DeleteSessionReport:
    report_id: SessionReportId


# ─── Assessments & grades ────────────────────────────────────────

@dataclass(frozen=True)
class AddAssessment:
    group_id: GroupId
    name: str
    max_score: float
    date: IsoTimestamp


@dataclass(frozen=True)
class UpdateAssessment:
    assessment: Assessment


@dataclass(frozen=True)
class DeleteAssessment:
    assessment_id: AssessmentId


@dataclass(frozen=True)
class RecordGrade:
    """Upsert keyed by (assessment_id, student_id)."""
    assessment_id: AssessmentId
    student_id: StudentId
    score: float
    comments: str | None = None


@dataclass(frozen=True)
class UpdateGrade:
    grade: Grade


@dataclass(frozen=True)
class DeleteGrade:
    grade_id: GradeId


# ─── Payments ────────────────────────────────────────────────────

@dataclass(frozen=True)
class AddPayment:
    student_id: StudentId
    group_id: GroupId
    month: Month
    status: PaymentStatus
    amount: float
    due_date: IsoTimestamp
    paid_date: IsoTimestamp | None = None
    notes: str | None = None


@dataclass(frozen=True)
class UpdatePayment:
    payment: PaymentRecord


@dataclass(frozen=True)
class DeletePayment:
    payment_id: PaymentId


# ─── Whole dataset ───────────────────────────────────────────────

@dataclass(frozen=True)
class ReplaceDataset:
    """Import: the given snapshot becomes the store's snapshot verbatim."""
    dataset: Dataset


@dataclass(frozen=True)
class ClearDataset:
    pass


Action = Union[
    AddStudent, UpdateStudent, DeleteStudent,
    AddGroup, UpdateGroup, DeleteGroup,
    AddStudentToGroup, RemoveStudentFromGroup,
    AddSession, UpdateSession, DeleteSession,
    RecordAttendance, UpdateAttendance,
    AddSessionReport, UpdateSessionReport, DeleteSessionReport,
    AddAssessment, UpdateAssessment, DeleteAssessment,
    RecordGrade, UpdateGrade, DeleteGrade,
    AddPayment, UpdatePayment, DeletePayment,
    ReplaceDataset, ClearDataset,
]
