"""Mutation Engine — pure handlers turning (snapshot, action) into a new snapshot.

Invariants:
    - Handlers never mutate their input; every result carries a fresh Dataset
    - Update/delete of an unknown id returns the input snapshot with NOT_FOUND
    - Attendance and Grade are upserted by natural key: at most one record per key,
      the first existing id survives and later duplicates (from loaded data or an
      update by id) collapse into it
    - Adding an existing (student, group) link is UNCHANGED, never a duplicate
    - Student delete removes its links, attendance and grades (reports stay)
    - Group delete removes its links, sessions and assessments; the attendance,
      reports and grades under them go too only in CascadeMode.STRICT
    - Session delete removes its attendance and reports; Assessment delete its grades

Design Decisions:
    - Explicit dict from action class to handler: every mapping visible in one place
    - Id and clock injected through MutationEnv so handlers stay deterministic in tests
    - References to missing parents are stored as given; callers validate first,
      queries filter dangling joins
"""

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType

from teacherhub.core import actions as act
from teacherhub.core.domain_types import CascadeMode, MutationOutcome
from teacherhub.core.entities import (
    EMPTY_DATASET, Assessment, AttendanceRecord, Dataset, Grade, Group,
    PaymentRecord, Session, SessionReport, Student, StudentGroup,
    attendance_key, grade_key,
)


def generate_id() -> str:
    return uuid.uuid4().hex


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class MutationEnv:
    """Everything a handler needs beyond the snapshot and the action."""
    new_id: Callable[[], str] = generate_id
    now: Callable[[], str] = utc_now_iso
    cascade_mode: CascadeMode = CascadeMode.LEGACY


@dataclass(frozen=True)
class MutationResult:
    dataset: Dataset
    outcome: MutationOutcome

    @property
    def changed(self) -> bool:
        return self.outcome is MutationOutcome.APPLIED


DEFAULT_ENV = MutationEnv()


# ─── Helpers ─────────────────────────────────────────────────────

def _applied(dataset: Dataset) -> MutationResult:
    return MutationResult(dataset, MutationOutcome.APPLIED)


def _not_found(dataset: Dataset) -> MutationResult:
    return MutationResult(dataset, MutationOutcome.NOT_FOUND)


def _unchanged(dataset: Dataset) -> MutationResult:
    return MutationResult(dataset, MutationOutcome.UNCHANGED)


def _has_id(records: tuple, record_id: str) -> bool:
    return any(r.id == record_id for r in records)


def _without(records: tuple, predicate: Callable) -> tuple:
    return tuple(r for r in records if not predicate(r))


def _upsert_at(records: tuple, position: int, record, key_fn) -> tuple:
    """Replace the record at position and drop later records sharing its key."""
    key = key_fn(record)
    rest = tuple(r for r in records[position + 1:] if key_fn(r) != key)
    return records[:position] + (record,) + rest


def _update_in(dataset: Dataset, collection: str, updated) -> MutationResult:
    """Replace the record(s) whose id matches updated.id."""
    records = getattr(dataset, collection)
    if not _has_id(records, updated.id):
        return _not_found(dataset)
    replaced = tuple(updated if r.id == updated.id else r for r in records)
    return _applied(dataset.evolve(**{collection: replaced}))


def _delete_in(dataset: Dataset, collection: str, record_id: str) -> MutationResult:
    """Delete by id with no cascade."""
    records = getattr(dataset, collection)
    if not _has_id(records, record_id):
        return _not_found(dataset)
    return _applied(dataset.evolve(
        **{collection: _without(records, lambda r: r.id == record_id)},
    ))


# ─── Students ────────────────────────────────────────────────────

def _add_student(dataset: Dataset, action: act.AddStudent, env: MutationEnv) -> MutationResult:
    student = Student(
        id=env.new_id(), full_name=action.full_name, created_at=env.now(),
        contact_info=action.contact_info, parent_phone=action.parent_phone,
        notes=action.notes,
    )
    return _applied(dataset.evolve(students=dataset.students + (student,)))


def _update_student(dataset: Dataset, action: act.UpdateStudent, env: MutationEnv) -> MutationResult:
    return _update_in(dataset, "students", action.student)


def _delete_student(dataset: Dataset, action: act.DeleteStudent, env: MutationEnv) -> MutationResult:
    student_id = action.student_id
    if not _has_id(dataset.students, student_id):
        return _not_found(dataset)
    return _applied(dataset.evolve(
        students=_without(dataset.students, lambda s: s.id == student_id),
        student_groups=_without(
            dataset.student_groups, lambda link: link.student_id == student_id,
        ),
        attendance_records=_without(
            dataset.attendance_records, lambda r: r.student_id == student_id,
        ),
        grades=_without(dataset.grades, lambda g: g.student_id == student_id),
    ))


# ─── Groups & membership ─────────────────────────────────────────

def _add_group(dataset: Dataset, action: act.AddGroup, env: MutationEnv) -> MutationResult:
    group = Group(
        id=env.new_id(), name=action.name, created_at=env.now(),
        description=action.description,
    )
    return _applied(dataset.evolve(groups=dataset.groups + (group,)))


def _update_group(dataset: Dataset, action: act.UpdateGroup, env: MutationEnv) -> MutationResult:
    return _update_in(dataset, "groups", action.group)


def _delete_group(dataset: Dataset, action: act.DeleteGroup, env: MutationEnv) -> MutationResult:
    group_id = action.group_id
    if not _has_id(dataset.groups, group_id):
        return _not_found(dataset)
    changes = {
        "groups": _without(dataset.groups, lambda g: g.id == group_id),
        "student_groups": _without(
            dataset.student_groups, lambda link: link.group_id == group_id,
        ),
        "sessions": _without(dataset.sessions, lambda s: s.group_id == group_id),
        "assessments": _without(
            dataset.assessments, lambda a: a.group_id == group_id,
        ),
    }
    if env.cascade_mode is CascadeMode.STRICT:
        session_ids = {s.id for s in dataset.sessions if s.group_id == group_id}
        assessment_ids = {
            a.id for a in dataset.assessments if a.group_id == group_id
        }
        changes["attendance_records"] = _without(
            dataset.attendance_records, lambda r: r.session_id in session_ids,
        )
        changes["session_reports"] = _without(
            dataset.session_reports, lambda r: r.session_id in session_ids,
        )
        changes["grades"] = _without(
            dataset.grades, lambda g: g.assessment_id in assessment_ids,
        )
    return _applied(dataset.evolve(**changes))


def _add_student_to_group(
    dataset: Dataset, action: act.AddStudentToGroup, env: MutationEnv,
) -> MutationResult:
    link = StudentGroup(student_id=action.student_id, group_id=action.group_id)
    if link in dataset.student_groups:
        return _unchanged(dataset)
    return _applied(dataset.evolve(student_groups=dataset.student_groups + (link,)))


def _remove_student_from_group(
    dataset: Dataset, action: act.RemoveStudentFromGroup, env: MutationEnv,
) -> MutationResult:
    link = StudentGroup(student_id=action.student_id, group_id=action.group_id)
    if link not in dataset.student_groups:
        return _unchanged(dataset)
    return _applied(dataset.evolve(
        student_groups=_without(dataset.student_groups, lambda sg: sg == link),
    ))


# ─── Sessions, attendance, reports ───────────────────────────────

def _add_session(dataset: Dataset, action: act.AddSession, env: MutationEnv) -> MutationResult:
    session = Session(
        id=env.new_id(), group_id=action.group_id, date_time=action.date_time,
        created_at=env.now(), topic=action.topic,
    )
    return _applied(dataset.evolve(sessions=dataset.sessions + (session,)))


def _update_session(dataset: Dataset, action: act.UpdateSession, env: MutationEnv) -> MutationResult:
    return _update_in(dataset, "sessions", action.session)


def _delete_session(dataset: Dataset, action: act.DeleteSession, env: MutationEnv) -> MutationResult:
    session_id = action.session_id
    if not _has_id(dataset.sessions, session_id):
        return _not_found(dataset)
    return _applied(dataset.evolve(
        sessions=_without(dataset.sessions, lambda s: s.id == session_id),
        attendance_records=_without(
            dataset.attendance_records, lambda r: r.session_id == session_id,
        ),
        session_reports=_without(
            dataset.session_reports, lambda r: r.session_id == session_id,
        ),
    ))


def _record_attendance(
    dataset: Dataset, action: act.RecordAttendance, env: MutationEnv,
) -> MutationResult:
    key = (action.session_id, action.student_id)
    records = dataset.attendance_records
    position = dataset.attendance_keys.get(key)
    if position is not None:
        record = AttendanceRecord(
            id=records[position].id, session_id=action.session_id,
            student_id=action.student_id, status=action.status,
        )
        return _applied(dataset.evolve(
            attendance_records=_upsert_at(records, position, record, attendance_key),
        ))
    record = AttendanceRecord(
        id=env.new_id(), session_id=action.session_id,
        student_id=action.student_id, status=action.status,
    )
    keys = MappingProxyType({**dataset.attendance_keys, key: len(records)})
    return _applied(dataset.evolve(
        attendance_records=records + (record,), attendance_keys=keys,
    ))


def _update_attendance(
    dataset: Dataset, action: act.UpdateAttendance, env: MutationEnv,
) -> MutationResult:
    return _update_in(dataset, "attendance_records", action.record)


def _add_session_report(
    dataset: Dataset, action: act.AddSessionReport, env: MutationEnv,
) -> MutationResult:
    stamp = env.now()
    report = SessionReport(
        id=env.new_id(), session_id=action.session_id,
        student_id=action.student_id, performance=action.performance,
        created_at=stamp, updated_at=stamp, strengths=action.strengths,
        improvements=action.improvements, notes=action.notes,
    )
    return _applied(dataset.evolve(
        session_reports=dataset.session_reports + (report,),
    ))


def _update_session_report(
    dataset: Dataset, action: act.UpdateSessionReport, env: MutationEnv,
) -> MutationResult:
    return _update_in(dataset, "session_reports", action.report)


def _delete_session_report(
    dataset: Dataset, action: act.DeleteSessionReport, env: MutationEnv,
) -> MutationResult:
    return _delete_in(dataset, "session_reports", action.report_id)


# ─── Assessments & grades ────────────────────────────────────────

def _add_assessment(dataset: Dataset, action: act.AddAssessment, env: MutationEnv) -> MutationResult:
    assessment = Assessment(
        id=env.new_id(), group_id=action.group_id, name=action.name,
        max_score=action.max_score, date=action.date, created_at=env.now(),
    )
    return _applied(dataset.evolve(assessments=dataset.assessments + (assessment,)))


def _update_assessment(
    dataset: Dataset, action: act.UpdateAssessment, env: MutationEnv,
) -> MutationResult:
    return _update_in(dataset, "assessments", action.assessment)


def _delete_assessment(
    dataset: Dataset, action: act.DeleteAssessment, env: MutationEnv,
) -> MutationResult:
    assessment_id = action.assessment_id
    if not _has_id(dataset.assessments, assessment_id):
        return _not_found(dataset)
    return _applied(dataset.evolve(
        assessments=_without(dataset.assessments, lambda a: a.id == assessment_id),
        grades=_without(dataset.grades, lambda g: g.assessment_id == assessment_id),
    ))


def _record_grade(dataset: Dataset, action: act.RecordGrade, env: MutationEnv) -> MutationResult:
    key = (action.assessment_id, action.student_id)
    grades = dataset.grades
    position = dataset.grade_keys.get(key)
    if position is not None:
        grade = Grade(
            id=grades[position].id, assessment_id=action.assessment_id,
            student_id=action.student_id, score=action.score,
            comments=action.comments,
        )
        return _applied(dataset.evolve(grades=_upsert_at(grades, position, grade, grade_key)))
    grade = Grade(
        id=env.new_id(), assessment_id=action.assessment_id,
        student_id=action.student_id, score=action.score,
        comments=action.comments,
    )
    keys = MappingProxyType({**dataset.grade_keys, key: len(grades)})
    return _applied(dataset.evolve(grades=grades + (grade,), grade_keys=keys))


def _update_grade(dataset: Dataset, action: act.UpdateGrade, env: MutationEnv) -> MutationResult:
    return _update_in(dataset, "grades", action.grade)


def _delete_grade(dataset: Dataset, action: act.DeleteGrade, env: MutationEnv) -> MutationResult:
    return _delete_in(dataset, "grades", action.grade_id)


# ─── Payments ────────────────────────────────────────────────────

def _add_payment(dataset: Dataset, action: act.AddPayment, env: MutationEnv) -> MutationResult:
    # (student, group, month) uniqueness is a caller convention, not enforced
    payment = PaymentRecord(
        id=env.new_id(), student_id=action.student_id, group_id=action.group_id,
        month=action.month, status=action.status, amount=action.amount,
        due_date=action.due_date, created_at=env.now(),
        paid_date=action.paid_date, notes=action.notes,
    )
    return _applied(dataset.evolve(
        payment_records=dataset.payment_records + (payment,),
    ))


def _update_payment(dataset: Dataset, action: act.UpdatePayment, env: MutationEnv) -> MutationResult:
    return _update_in(dataset, "payment_records", action.payment)


def _delete_payment(dataset: Dataset, action: act.DeletePayment, env: MutationEnv) -> MutationResult:
    return _delete_in(dataset, "payment_records", action.payment_id)


# ─── Whole dataset ───────────────────────────────────────────────

def _replace_dataset(dataset: Dataset, action: act.ReplaceDataset, env: MutationEnv) -> MutationResult:
    return _applied(action.dataset)


def _clear_dataset(dataset: Dataset, action: act.ClearDataset, env: MutationEnv) -> MutationResult:
    return _applied(EMPTY_DATASET)


# Every mapping explicit: adding an action kind requires editing this dict
_HANDLERS: dict[type, Callable[..., MutationResult]] = {
    act.AddStudent: _add_student,
    act.UpdateStudent: _update_student,
    act.DeleteStudent: _delete_student,
    act.AddGroup: _add_group,
    act.UpdateGroup: _update_group,
    act.DeleteGroup: _delete_group,
    act.AddStudentToGroup: _add_student_to_group,
    act.RemoveStudentFromGroup: _remove_student_from_group,
    act.AddSession: _add_session,
    act.UpdateSession: _update_session,
    act.DeleteSession: _delete_session,
    act.RecordAttendance: _record_attendance,
    act.UpdateAttendance: _update_attendance,
    act.AddSessionReport: _add_session_report,
    act.UpdateSessionReport: _update_session_report,
    act.DeleteSessionReport: _delete_session_report,
    act.AddAssessment: _add_assessment,
    act.UpdateAssessment: _update_assessment,
    act.DeleteAssessment: _delete_assessment,
    act.RecordGrade: _record_grade,
    act.UpdateGrade: _update_grade,
    act.DeleteGrade: _delete_grade,
    act.AddPayment: _add_payment,
    act.UpdatePayment: _update_payment,
    act.DeletePayment: _delete_payment,
    act.ReplaceDataset: _replace_dataset,
    act.ClearDataset: _clear_dataset,
}


def apply_action(
    dataset: Dataset, action: act.Action, env: MutationEnv = DEFAULT_ENV,
) -> MutationResult:
    """Apply one action to a snapshot. Pure given env."""
    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise TypeError(f"Unsupported action: {type(action).__name__}")
    return handler(dataset, action, env)
