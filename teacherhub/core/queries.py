"""Query Layer — pure read functions over one Dataset snapshot.

Invariants:
    - Never mutate the snapshot; results are fresh lists built per call
    - Joins drop rows whose parent no longer exists (dangling foreign keys are
      expected after a legacy Group delete)
    - Unsorted results keep the collection's insertion order
    - Date-sorted results are most-recent-first; equal or unparseable dates keep
      insertion order among themselves
    - Month sorting is plain string order (valid because months are "YYYY-MM")

Design Decisions:
    - Functions over a query object: callers pass the snapshot they hold, so a
      stale result can never outlive the snapshot it came from
    - "Not found" is None; callers supply their own defaults
"""

from dataclasses import dataclass
from datetime import datetime, timezone

from teacherhub.core.entities import (
    Assessment, AttendanceRecord, Dataset, Grade, Group, PaymentRecord,
    Session, SessionReport, Student,
)

_EPOCH_FLOOR = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class GradeWithAssessment:
    grade: Grade
    assessment: Assessment


@dataclass(frozen=True)
class AttendanceWithSession:
    record: AttendanceRecord
    session: Session
    group: Group


def parse_instant(value: str) -> datetime:
    """ISO date/datetime -> aware datetime. Naive values are read as UTC.

    Unparseable values sort as the oldest possible instant.
    """
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return _EPOCH_FLOOR
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# --- Lookups by id -------------------------------------------------------------

def _find(records: tuple, record_id: str):
    return next((r for r in records if r.id == record_id), None)


def student_by_id(dataset: Dataset, student_id: str) -> Student | None:
    return _find(dataset.students, student_id)


def group_by_id(dataset: Dataset, group_id: str) -> Group | None:
    return _find(dataset.groups, group_id)


def session_by_id(dataset: Dataset, session_id: str) -> Session | None:
    return _find(dataset.sessions, session_id)


def assessment_by_id(dataset: Dataset, assessment_id: str) -> Assessment | None:
    return _find(dataset.assessments, assessment_id)


def payment_by_id(dataset: Dataset, payment_id: str) -> PaymentRecord | None:
    return _find(dataset.payment_records, payment_id)


# --- Membership ----------------------------------------------------------------

def students_in_group(dataset: Dataset, group_id: str) -> list[Student]:
    """Students linked to the group, in Student insertion order."""
    member_ids = {
        link.student_id for link in dataset.student_groups
        if link.group_id == group_id
    }
    return [s for s in dataset.students if s.id in member_ids]


def groups_for_student(dataset: Dataset, student_id: str) -> list[Group]:
    """Groups the student is linked to, in Group insertion order."""
    group_ids = {
        link.group_id for link in dataset.student_groups
        if link.student_id == student_id
    }
    return [g for g in dataset.groups if g.id in group_ids]


# --- Sessions & attendance -----------------------------------------------------

def sessions_for_group(dataset: Dataset, group_id: str) -> list[Session]:
    """Group's sessions, most recent date_time first."""
    sessions = [s for s in dataset.sessions if s.group_id == group_id]
    return sorted(sessions, key=lambda s: parse_instant(s.date_time), reverse=True)


def attendance_for_session(dataset: Dataset, session_id: str) -> list[AttendanceRecord]:
    return [r for r in dataset.attendance_records if r.session_id == session_id]


def attendance_for_student(dataset: Dataset, student_id: str) -> list[AttendanceWithSession]:
    """Student's attendance joined with session and group; dangling rows dropped."""
    sessions = {s.id: s for s in dataset.sessions}
    groups = {g.id: g for g in dataset.groups}
    joined = []
    for record in dataset.attendance_records:
        if record.student_id != student_id:
            continue
        session = sessions.get(record.session_id)
        group = groups.get(session.group_id) if session else None
        if session and group:
            joined.append(AttendanceWithSession(record, session, group))
    return joined


def session_reports_for_session(dataset: Dataset, session_id: str) -> list[SessionReport]:
    return [r for r in dataset.session_reports if r.session_id == session_id]


# --- Assessments & grades ------------------------------------------------------

def assessments_for_group(dataset: Dataset, group_id: str) -> list[Assessment]:
    """Group's assessments, most recent date first."""
    assessments = [a for a in dataset.assessments if a.group_id == group_id]
    return sorted(assessments, key=lambda a: parse_instant(a.date), reverse=True)


def grades_for_assessment(dataset: Dataset, assessment_id: str) -> list[Grade]:
    return [g for g in dataset.grades if g.assessment_id == assessment_id]


def grades_for_student(dataset: Dataset, student_id: str) -> list[GradeWithAssessment]:
    """Student's grades joined with their assessment; orphaned grades dropped."""
    assessments = {a.id: a for a in dataset.assessments}
    return [
        GradeWithAssessment(g, assessments[g.assessment_id])
        for g in dataset.grades
        if g.student_id == student_id and g.assessment_id in assessments
    ]


# --- Payments ------------------------------------------------------------------

def _latest_month_first(payments: list[PaymentRecord]) -> list[PaymentRecord]:
    return sorted(payments, key=lambda p: p.month, reverse=True)


def payments_for_student(dataset: Dataset, student_id: str) -> list[PaymentRecord]:
    return _latest_month_first(
        [p for p in dataset.payment_records if p.student_id == student_id],
    )


def payments_for_group(dataset: Dataset, group_id: str) -> list[PaymentRecord]:
    return _latest_month_first(
        [p for p in dataset.payment_records if p.group_id == group_id],
    )


def payments_for_month(dataset: Dataset, month: str) -> list[PaymentRecord]:
    return [p for p in dataset.payment_records if p.month == month]


def payments_for_student_in_group(
    dataset: Dataset, student_id: str, group_id: str,
) -> list[PaymentRecord]:
    return _latest_month_first([
        p for p in dataset.payment_records
        if p.student_id == student_id and p.group_id == group_id
    ])


def payment_status_for_student_in_month(
    dataset: Dataset, student_id: str, group_id: str, month: str,
) -> PaymentRecord | None:
    """First record for (student, group, month), or None. No default synthesized."""
    return next(
        (
            p for p in dataset.payment_records
            if p.student_id == student_id and p.group_id == group_id
            and p.month == month
        ),
        None,
    )
