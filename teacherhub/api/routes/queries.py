"""Query Routes — read-only views over the store's latest snapshot.

Invariants:
    - Every request reads store.snapshot once and answers from that snapshot only
    - Entities serialized in the snapshot's camelCase shape
    - By-id and payment-status lookups return 404 when absent; list queries
      return [] for unknown parents
    - Routes never dispatch

Design Decisions:
    - Joined rows nest the parent under a key (grade.assessment,
      attendance.session.group), matching the shape the UI already renders
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, Query

from teacherhub.api.dependencies import get_store
from teacherhub.core import dashboard_stats, queries
from teacherhub.core.dataset_snapshot import record_to_dict
from teacherhub.core.errors import ResourceNotFoundError
from teacherhub.schemas.entities import MONTH_PATTERN
from teacherhub.services.entity_store import EntityStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["queries"])


def _dump(records) -> list[dict]:
    return [record_to_dict(r) for r in records]


def _one_or_404(record, resource_type: str, record_id: str) -> dict:
    if record is None:
        raise ResourceNotFoundError(resource_type, record_id)
    return record_to_dict(record)


# --- Lookups by id -------------------------------------------------------------

@router.get("/students/{student_id}")
async def get_student(student_id: str, store: EntityStore = Depends(get_store)):
    return _one_or_404(
        queries.student_by_id(store.snapshot, student_id), "Student", student_id,
    )


@router.get("/groups/{group_id}")
async def get_group(group_id: str, store: EntityStore = Depends(get_store)):
    return _one_or_404(
        queries.group_by_id(store.snapshot, group_id), "Group", group_id,
    )


@router.get("/sessions/{session_id}")
async def get_session(session_id: str, store: EntityStore = Depends(get_store)):
    return _one_or_404(
        queries.session_by_id(store.snapshot, session_id), "Session", session_id,
    )


@router.get("/assessments/{assessment_id}")
async def get_assessment(assessment_id: str, store: EntityStore = Depends(get_store)):
    return _one_or_404(
        queries.assessment_by_id(store.snapshot, assessment_id),
        "Assessment", assessment_id,
    )


@router.get("/payments/{payment_id}")
async def get_payment(payment_id: str, store: EntityStore = Depends(get_store)):
    return _one_or_404(
        queries.payment_by_id(store.snapshot, payment_id), "Payment", payment_id,
    )


# --- Membership ----------------------------------------------------------------

@router.get("/groups/{group_id}/students")
async def list_group_students(group_id: str, store: EntityStore = Depends(get_store)):
    return _dump(queries.students_in_group(store.snapshot, group_id))


@router.get("/students/{student_id}/groups")
async def list_student_groups(student_id: str, store: EntityStore = Depends(get_store)):
    return _dump(queries.groups_for_student(store.snapshot, student_id))


# --- Sessions & attendance -----------------------------------------------------

@router.get("/groups/{group_id}/sessions")
async def list_group_sessions(group_id: str, store: EntityStore = Depends(get_store)):
    return _dump(queries.sessions_for_group(store.snapshot, group_id))


@router.get("/sessions/{session_id}/attendance")
async def list_session_attendance(session_id: str, store: EntityStore = Depends(get_store)):
    return _dump(queries.attendance_for_session(store.snapshot, session_id))


@router.get("/sessions/{session_id}/reports")
async def list_session_reports(session_id: str, store: EntityStore = Depends(get_store)):
    return _dump(queries.session_reports_for_session(store.snapshot, session_id))


@router.get("/students/{student_id}/attendance")
async def list_student_attendance(student_id: str, store: EntityStore = Depends(get_store)):
    return [
        {
            **record_to_dict(row.record),
            "session": {
                **record_to_dict(row.session),
                "group": record_to_dict(row.group),
            },
        }
        for row in queries.attendance_for_student(store.snapshot, student_id)
    ]


# --- Assessments & grades ------------------------------------------------------

@router.get("/groups/{group_id}/assessments")
async def list_group_assessments(group_id: str, store: EntityStore = Depends(get_store)):
    return _dump(queries.assessments_for_group(store.snapshot, group_id))


@router.get("/assessments/{assessment_id}/grades")
async def list_assessment_grades(assessment_id: str, store: EntityStore = Depends(get_store)):
    return _dump(queries.grades_for_assessment(store.snapshot, assessment_id))


@router.get("/students/{student_id}/grades")
async def list_student_grades(student_id: str, store: EntityStore = Depends(get_store)):
    return [
        {**record_to_dict(row.grade), "assessment": record_to_dict(row.assessment)}
        for row in queries.grades_for_student(store.snapshot, student_id)
    ]


# --- Payments ------------------------------------------------------------------

@router.get("/students/{student_id}/payments")
async def list_student_payments(student_id: str, store: EntityStore = Depends(get_store)):
    return _dump(queries.payments_for_student(store.snapshot, student_id))


@router.get("/groups/{group_id}/payments")
async def list_group_payments(group_id: str, store: EntityStore = Depends(get_store)):
    return _dump(queries.payments_for_group(store.snapshot, group_id))


@router.get("/payments")
async def list_month_payments(
    month: str = Query(pattern=MONTH_PATTERN),
    store: EntityStore = Depends(get_store),
):
    return _dump(queries.payments_for_month(store.snapshot, month))


@router.get("/students/{student_id}/groups/{group_id}/payments")
async def list_student_group_payments(
    student_id: str, group_id: str, store: EntityStore = Depends(get_store),
):
    return _dump(
        queries.payments_for_student_in_group(store.snapshot, student_id, group_id),
    )


@router.get("/students/{student_id}/groups/{group_id}/payments/{month}")
async def get_payment_status(
    student_id: str, group_id: str, month: str,
    store: EntityStore = Depends(get_store),
):
    """Exact (student, group, month) record; 404 lets the UI apply its default."""
    record = queries.payment_status_for_student_in_month(
        store.snapshot, student_id, group_id, month,
    )
    return _one_or_404(record, "Payment", f"{student_id}/{group_id}/{month}")


# --- Aggregates ----------------------------------------------------------------

@router.get("/dashboard")
async def get_dashboard(
    month: str | None = Query(None, pattern=MONTH_PATTERN),
    as_of: date | None = Query(None),
    store: EntityStore = Depends(get_store),
):
    today = as_of or date.today()
    return dashboard_stats.compute_dashboard(
        store.snapshot, month or today.isoformat()[:7], today.isoformat(),
    )


@router.get("/groups/{group_id}/report")
async def get_group_report(group_id: str, store: EntityStore = Depends(get_store)):
    if queries.group_by_id(store.snapshot, group_id) is None:
        raise ResourceNotFoundError("Group", group_id)
    return dashboard_stats.compute_group_report(store.snapshot, group_id)
