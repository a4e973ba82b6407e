"""Test factories — deterministic MutationEnv and small ready-made datasets.

Invariants:
    - Ids are "<prefix>-1", "<prefix>-2", ... in creation order (never uuids)
    - Clock returns a fixed instant unless a test supplies its own
"""

import itertools

from teacherhub.core import actions as act
from teacherhub.core.domain_types import AttendanceStatus, CascadeMode, PaymentStatus
from teacherhub.core.entities import Dataset
from teacherhub.core.mutations import MutationEnv, apply_action

FIXED_NOW = "2024-03-01T09:00:00+00:00"


def make_env(
    prefix: str = "id", cascade_mode: CascadeMode = CascadeMode.LEGACY,
    now: str = FIXED_NOW,
) -> MutationEnv:
    counter = itertools.count(1)
    return MutationEnv(
        new_id=lambda: f"{prefix}-{next(counter)}",
        now=lambda: now,
        cascade_mode=cascade_mode,
    )


def apply_all(dataset: Dataset, actions: list, env: MutationEnv) -> Dataset:
    for action in actions:
        dataset = apply_action(dataset, action, env).dataset
    return dataset


def seeded_dataset(env: MutationEnv | None = None) -> Dataset:
    """Two students, one group, one session, one assessment, one payment.

    With a fresh make_env() the ids are:
        id-1 Alice, id-2 Bob, id-3 group "Math 101", id-4 session,
        id-5 attendance (Alice present), id-6 assessment "Quiz 1",
        id-7 grade (Alice 87), id-8 payment (Alice, 2024-03, paid)
    """
    env = env or make_env()
    return apply_all(Dataset(), [
        act.AddStudent(full_name="Alice"),
        act.AddStudent(full_name="Bob"),
        act.AddGroup(name="Math 101"),
        act.AddStudentToGroup("id-1", "id-3"),
        act.AddStudentToGroup("id-2", "id-3"),
        act.AddSession("id-3", "2024-03-04T10:00:00Z", topic="Fractions"),
        act.RecordAttendance("id-4", "id-1", AttendanceStatus.PRESENT),
        act.AddAssessment("id-3", "Quiz 1", 100, "2024-03-10"),
        act.RecordGrade("id-6", "id-1", 87),
        act.AddPayment(
            student_id="id-1", group_id="id-3", month="2024-03",
            status=PaymentStatus.PAID, amount=50, due_date="2024-03-05",
        ),
    ], env)
