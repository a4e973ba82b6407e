"""Dispatch Guards — caller-side precondition checks run before an action is dispatched.

Invariants:
    - Create/upsert actions must reference parents that exist in the current snapshot
    - A grade's score must lie within 0..assessment.max_score
    - Update/delete actions are never guarded: unknown ids are a store no-op
    - Guards read the snapshot only; they never mutate or dispatch

Design Decisions:
    - The store accepts anything (dangling references are tolerated downstream), so
      validation sits with the caller. This module is the HTTP surface's caller logic
    - Explicit per-action reference table instead of introspection
"""

from teacherhub.core import actions as act
from teacherhub.core import queries
from teacherhub.core.entities import Dataset
from teacherhub.core.errors import ActionRejectedError, ResourceNotFoundError

# action class -> ((resource label, attribute on the action, lookup), ...)
_REFERENCES = {
    act.AddSession: (("Group", "group_id", queries.group_by_id),),
    act.AddAssessment: (("Group", "group_id", queries.group_by_id),),
    act.AddStudentToGroup: (
        ("Student", "student_id", queries.student_by_id),
        ("Group", "group_id", queries.group_by_id),
    ),
    act.RecordAttendance: (
        ("Session", "session_id", queries.session_by_id),
        ("Student", "student_id", queries.student_by_id),
    ),
    act.AddSessionReport: (
        ("Session", "session_id", queries.session_by_id),
        ("Student", "student_id", queries.student_by_id),
    ),
    act.RecordGrade: (
        ("Assessment", "assessment_id", queries.assessment_by_id),
        ("Student", "student_id", queries.student_by_id),
    ),
    act.AddPayment: (
        ("Student", "student_id", queries.student_by_id),
        ("Group", "group_id", queries.group_by_id),
    ),
}


def check_action_preconditions(dataset: Dataset, action: act.Action) -> None:
    """Raise ResourceNotFoundError / ActionRejectedError when action is unsafe."""
    for label, attribute, lookup in _REFERENCES.get(type(action), ()):
        record_id = getattr(action, attribute)
        if lookup(dataset, record_id) is None:
            raise ResourceNotFoundError(label, record_id)

    if isinstance(action, act.RecordGrade):
        assessment = queries.assessment_by_id(dataset, action.assessment_id)
        if not 0 <= action.score <= assessment.max_score:
            raise ActionRejectedError(
                f"Score {action.score} outside 0..{assessment.max_score} "
                f"for assessment '{assessment.name}'",
            )
