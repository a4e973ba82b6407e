"""Dashboard Stats — pure aggregate computations over a Dataset snapshot.

Invariants:
    - All inputs come from the snapshot (no IO, no clock; reference dates are passed in)
    - Rates are percentages in 0..100; an empty denominator yields 0.0, never raises
    - Group report counts only sessions that still belong to the group

Design Decisions:
    - Pure functions, not Dataset methods (the snapshot is storage, stats are presentation)
    - Returns flat dicts so the HTTP layer can serialize them as-is
"""

from teacherhub.core.domain_types import AttendanceStatus, PaymentStatus
from teacherhub.core.entities import Dataset
from teacherhub.core.queries import (
    attendance_for_session, parse_instant, sessions_for_group, students_in_group,
)


def _rate(part: float, whole: float) -> float:
    return (part / whole) * 100 if whole > 0 else 0.0


def compute_dashboard_counts(dataset: Dataset) -> dict:
    return {
        "students": len(dataset.students),
        "groups": len(dataset.groups),
        "sessions": len(dataset.sessions),
        "assessments": len(dataset.assessments),
    }


def payment_rate_for_month(dataset: Dataset, month: str) -> float:
    """Paid amount over billed amount for the month, as a percentage."""
    payments = [p for p in dataset.payment_records if p.month == month]
    total = sum(p.amount for p in payments)
    paid = sum(p.amount for p in payments if p.status is PaymentStatus.PAID)
    return _rate(paid, total)


def overall_attendance_rate(dataset: Dataset) -> float:
    records = dataset.attendance_records
    present = sum(1 for r in records if r.status is AttendanceStatus.PRESENT)
    return _rate(present, len(records))


def overdue_payments(dataset: Dataset, as_of: str) -> list:
    """Unpaid records whose due date is strictly before as_of."""
    cutoff = parse_instant(as_of)
    return [
        p for p in dataset.payment_records
        if p.status is PaymentStatus.UNPAID and parse_instant(p.due_date) < cutoff
    ]


def recent_activity(dataset: Dataset, limit: int = 3) -> dict:
    """Most recent sessions and assessments, with their group name when it exists."""
    groups = {g.id: g.name for g in dataset.groups}
    sessions = sorted(
        dataset.sessions, key=lambda s: parse_instant(s.date_time), reverse=True,
    )[:limit]
    assessments = sorted(
        dataset.assessments, key=lambda a: parse_instant(a.date), reverse=True,
    )[:limit]
    return {
        "sessions": [
            {
                "session_id": s.id, "topic": s.topic, "date_time": s.date_time,
                "group_name": groups.get(s.group_id),
            }
            for s in sessions
        ],
        "assessments": [
            {
                "assessment_id": a.id, "name": a.name, "date": a.date,
                "group_name": groups.get(a.group_id),
            }
            for a in assessments
        ],
    }


def compute_dashboard(dataset: Dataset, month: str, as_of: str) -> dict:
    return {
        "counts": compute_dashboard_counts(dataset),
        "payment_rate": payment_rate_for_month(dataset, month),
        "attendance_rate": overall_attendance_rate(dataset),
        "overdue_payments": len(overdue_payments(dataset, as_of)),
        "recent_activity": recent_activity(dataset),
    }


def compute_group_report(dataset: Dataset, group_id: str) -> dict:
    """Per-student attendance across the group's sessions."""
    sessions = sessions_for_group(dataset, group_id)
    attendance = {s.id: attendance_for_session(dataset, s.id) for s in sessions}
    total_records = sum(len(records) for records in attendance.values())
    total_present = sum(
        1 for records in attendance.values() for r in records
        if r.status is AttendanceStatus.PRESENT
    )

    students = []
    for student in students_in_group(dataset, group_id):
        marked = [
            r for records in attendance.values() for r in records
            if r.student_id == student.id
        ]
        present = sum(1 for r in marked if r.status is AttendanceStatus.PRESENT)
        students.append({
            "student_id": student.id,
            "full_name": student.full_name,
            "present": present,
            "total": len(marked),
            "rate": _rate(present, len(marked)),
        })

    return {
        "group_id": group_id,
        "sessions": len(sessions),
        "attendance_rate": _rate(total_present, total_records),
        "students": students,
    }
