"""Mutation Engine — tests for apply_action over every action kind.

Invariants:
    - Create actions assign env ids and timestamps; input snapshot never mutated
    - Update/delete of an unknown id is NOT_FOUND and returns the same snapshot
    - Attendance and grade upserts keep one record per natural key and keep its id
    - Cascades follow the configured CascadeMode for Group delete

Design Decisions:
    - Pure tests (no IO, no store) with a counter-based env for stable ids
"""

from dataclasses import replace

import pytest

from teacherhub.core import actions as act
from teacherhub.core.domain_types import (
    AttendanceStatus, CascadeMode, MutationOutcome, PaymentStatus, Performance,
)
from teacherhub.core.entities import AttendanceRecord, Dataset, Grade, StudentGroup
from teacherhub.core.mutations import MutationResult, apply_action
from tests.factories import FIXED_NOW, apply_all, make_env, seeded_dataset


# -- Create --------------------------------------------------------------------

def test_add_student_assigns_id_and_created_at():
    """New student gets the env's id and clock; optional fields carried over."""
    env = make_env()
    result = apply_action(
        Dataset(), act.AddStudent(full_name="Alice", parent_phone="555"), env,
    )

    assert result.outcome is MutationOutcome.APPLIED
    assert result.changed is True
    student = result.dataset.students[0]
    assert student.id == "id-1"
    assert student.full_name == "Alice"
    assert student.created_at == FIXED_NOW
    assert student.parent_phone == "555"
    assert student.notes is None


def test_add_does_not_mutate_input_snapshot():
    """The original snapshot keeps its collections after a create."""
    env = make_env()
    before = apply_action(Dataset(), act.AddGroup(name="G"), env).dataset
    after = apply_action(before, act.AddGroup(name="H"), env).dataset

    assert len(before.groups) == 1
    assert len(after.groups) == 2
    assert [g.name for g in after.groups] == ["G", "H"]


def test_add_session_report_stamps_created_and_updated():
    """Both timestamps equal the env clock on creation."""
    data = seeded_dataset()
    result = apply_action(
        data, act.AddSessionReport("id-4", "id-1", Performance.GOOD, strengths="focus"),
        make_env("r"),
    )

    report = result.dataset.session_reports[0]
    assert report.id == "r-1"
    assert report.performance is Performance.GOOD
    assert report.created_at == report.updated_at == FIXED_NOW
    assert report.improvements == ""


def test_add_payment_does_not_enforce_month_uniqueness():
    """A second record for the same (student, group, month) is stored as given."""
    data = seeded_dataset()
    result = apply_action(data, act.AddPayment(
        student_id="id-1", group_id="id-3", month="2024-03",
        status=PaymentStatus.UNPAID, amount=50, due_date="2024-03-05",
    ), make_env("p"))

    assert len(result.dataset.payment_records) == 2


def test_add_with_dangling_reference_is_stored():
    """The engine does not validate parents; that is the caller's job."""
    result = apply_action(
        Dataset(), act.AddSession("missing-group", "2024-01-01T10:00:00Z"), make_env(),
    )

    assert result.outcome is MutationOutcome.APPLIED
    assert result.dataset.sessions[0].group_id == "missing-group"


# -- Update --------------------------------------------------------------------

def test_update_student_replaces_record_by_id():
    data = seeded_dataset()
    renamed = replace(data.students[0], full_name="Alice Smith")
    result = apply_action(data, act.UpdateStudent(renamed))

    assert result.outcome is MutationOutcome.APPLIED
    assert result.dataset.students[0].full_name == "Alice Smith"
    assert result.dataset.students[1] == data.students[1]


def test_update_unknown_id_is_not_found():
    """Unknown id leaves the snapshot identical (same object)."""
    data = seeded_dataset()
    ghost = replace(data.groups[0], id="nope", name="Ghost")
    result = apply_action(data, act.UpdateGroup(ghost))

    assert result.outcome is MutationOutcome.NOT_FOUND
    assert result.changed is False
    assert result.dataset is data


def test_update_session_report_replaces_verbatim():
    """updatedAt is whatever the caller sent; the engine does not restamp it."""
    data = apply_action(
        seeded_dataset(), act.AddSessionReport("id-4", "id-1"), make_env("r"),
    ).dataset
    edited = replace(
        data.session_reports[0], notes="late", updated_at="2024-03-05T00:00:00Z",
    )
    result = apply_action(data, act.UpdateSessionReport(edited))

    assert result.dataset.session_reports[0].notes == "late"
    assert result.dataset.session_reports[0].updated_at == "2024-03-05T00:00:00Z"


def test_update_attendance_by_id_rebuilds_index():
    """Moving a record to another student re-keys the natural-key index."""
    data = seeded_dataset()
    moved = replace(data.attendance_records[0], student_id="id-2")
    result = apply_action(data, act.UpdateAttendance(moved))

    assert ("id-4", "id-2") in result.dataset.attendance_keys
    assert ("id-4", "id-1") not in result.dataset.attendance_keys


# -- Upserts -------------------------------------------------------------------

def test_record_attendance_upserts_by_session_and_student():
    """Second mark for the same key replaces status and keeps the id."""
    data = seeded_dataset()
    original_id = data.attendance_records[0].id
    result = apply_action(
        data, act.RecordAttendance("id-4", "id-1", AttendanceStatus.ABSENT), make_env("x"),
    )

    records = result.dataset.attendance_records
    assert len(records) == 1
    assert records[0].id == original_id
    assert records[0].status is AttendanceStatus.ABSENT


def test_record_attendance_new_key_appends():
    data = seeded_dataset()
    result = apply_action(
        data, act.RecordAttendance("id-4", "id-2", AttendanceStatus.EXCUSED), make_env("x"),
    )

    records = result.dataset.attendance_records
    assert [r.student_id for r in records] == ["id-1", "id-2"]
    assert records[1].id == "x-1"
    assert result.dataset.attendance_keys[("id-4", "id-2")] == 1


def test_record_grade_upsert_keeps_id_and_replaces_score():
    """Scenario: grade 87 then re-record 92 -> one grade, score 92, same id."""
    data = seeded_dataset()
    original = data.grades[0]
    result = apply_action(
        data, act.RecordGrade("id-6", "id-1", 92, comments="better"), make_env("x"),
    )

    assert len(result.dataset.grades) == 1
    assert result.dataset.grades[0].id == original.id
    assert result.dataset.grades[0].score == 92
    assert result.dataset.grades[0].comments == "better"


def test_repeated_upserts_never_duplicate():
    env = make_env()
    data = seeded_dataset(env)
    data = apply_all(data, [
        act.RecordAttendance("id-4", "id-2", AttendanceStatus.PRESENT),
        act.RecordAttendance("id-4", "id-2", AttendanceStatus.ABSENT),
        act.RecordAttendance("id-4", "id-2", AttendanceStatus.PRESENT),
    ], env)

    keys = [(r.session_id, r.student_id) for r in data.attendance_records]
    assert len(keys) == len(set(keys)) == 2


def test_record_attendance_collapses_loaded_duplicates():
    """Two loaded records for one key: the upsert keeps the first id only."""
    data = Dataset(attendance_records=(
        AttendanceRecord("a-1", "s", "x", AttendanceStatus.PRESENT),
        AttendanceRecord("a-2", "t", "x", AttendanceStatus.EXCUSED),
        AttendanceRecord("a-3", "s", "x", AttendanceStatus.PRESENT),
    ))

    result = apply_action(data, act.RecordAttendance("s", "x", AttendanceStatus.ABSENT), make_env())

    records = result.dataset.attendance_records
    assert [(r.id, r.status) for r in records] == [
        ("a-1", AttendanceStatus.ABSENT), ("a-2", AttendanceStatus.EXCUSED),
    ]
    assert dict(result.dataset.attendance_keys) == {("s", "x"): 0, ("t", "x"): 1}


def test_record_grade_collapses_key_moved_by_update():
    """Update by id may move a grade onto a taken key; the next upsert merges them."""
    data = Dataset(grades=(
        Grade("g-1", "quiz", "x", 70),
        Grade("g-2", "quiz", "y", 80),
    ))
    data = apply_action(data, act.UpdateGrade(Grade("g-2", "quiz", "x", 80)), make_env()).dataset

    result = apply_action(data, act.RecordGrade("quiz", "x", 95), make_env())

    assert [(g.id, g.score) for g in result.dataset.grades] == [("g-1", 95)]


# -- Membership ----------------------------------------------------------------

def test_add_existing_link_is_unchanged():
    """Scenario: adding Alice to Math 101 twice keeps exactly one link."""
    data = seeded_dataset()
    result = apply_action(data, act.AddStudentToGroup("id-1", "id-3"))

    assert result.outcome is MutationOutcome.UNCHANGED
    assert result.dataset.student_groups.count(StudentGroup("id-1", "id-3")) == 1


def test_remove_link():
    data = seeded_dataset()
    result = apply_action(data, act.RemoveStudentFromGroup("id-2", "id-3"))

    assert result.outcome is MutationOutcome.APPLIED
    assert result.dataset.student_groups == (StudentGroup("id-1", "id-3"),)


def test_remove_missing_link_is_unchanged():
    data = seeded_dataset()
    result = apply_action(data, act.RemoveStudentFromGroup("id-2", "nope"))

    assert result.outcome is MutationOutcome.UNCHANGED
    assert result.dataset is data


# -- Delete cascades -----------------------------------------------------------

def test_delete_student_cascades_links_attendance_grades():
    data = apply_action(
        seeded_dataset(), act.AddSessionReport("id-4", "id-1"), make_env("r"),
    ).dataset
    result = apply_action(data, act.DeleteStudent("id-1"))

    out = result.dataset
    assert [s.id for s in out.students] == ["id-2"]
    assert all(link.student_id != "id-1" for link in out.student_groups)
    assert out.attendance_records == ()
    assert out.grades == ()
    # Reports and payments are left in place
    assert len(out.session_reports) == 1
    assert len(out.payment_records) == 1


def test_delete_student_unknown_id_is_not_found():
    data = seeded_dataset()
    result = apply_action(data, act.DeleteStudent("nope"))

    assert result.outcome is MutationOutcome.NOT_FOUND
    assert result.dataset is data


def test_delete_group_legacy_cascade_leaves_orphans():
    """Legacy: links, sessions, assessments go; attendance and grades remain."""
    data = seeded_dataset(make_env())
    result = apply_action(data, act.DeleteGroup("id-3"), make_env())

    out = result.dataset
    assert out.groups == ()
    assert out.student_groups == ()
    assert out.sessions == ()
    assert out.assessments == ()
    assert len(out.attendance_records) == 1
    assert len(out.grades) == 1
    assert len(out.payment_records) == 1


def test_delete_group_strict_cascade_removes_dependents():
    data = apply_action(
        seeded_dataset(), act.AddSessionReport("id-4", "id-1"), make_env("r"),
    ).dataset
    result = apply_action(
        data, act.DeleteGroup("id-3"), make_env(cascade_mode=CascadeMode.STRICT),
    )

    out = result.dataset
    assert out.attendance_records == ()
    assert out.session_reports == ()
    assert out.grades == ()
    assert out.attendance_keys == {}
    assert len(out.students) == 2
    assert len(out.payment_records) == 1


def test_delete_session_cascades_attendance_and_reports():
    data = apply_action(
        seeded_dataset(), act.AddSessionReport("id-4", "id-2"), make_env("r"),
    ).dataset
    result = apply_action(data, act.DeleteSession("id-4"))

    out = result.dataset
    assert out.sessions == ()
    assert out.attendance_records == ()
    assert out.session_reports == ()
    assert len(out.grades) == 1


def test_delete_assessment_cascades_grades():
    result = apply_action(seeded_dataset(), act.DeleteAssessment("id-6"))

    assert result.dataset.assessments == ()
    assert result.dataset.grades == ()
    assert result.dataset.grade_keys == {}


def test_delete_then_record_grade_creates_fresh_record():
    """After its grade is deleted, the same key gets a new id."""
    data = apply_action(seeded_dataset(), act.DeleteGrade("id-7")).dataset
    result = apply_action(data, act.RecordGrade("id-6", "id-1", 50), make_env("x"))

    assert result.dataset.grades[0].id == "x-1"


@pytest.mark.parametrize("action", [
    act.DeleteSession("nope"),
    act.DeleteAssessment("nope"),
    act.DeleteSessionReport("nope"),
    act.DeleteGrade("nope"),
    act.DeletePayment("nope"),
    act.DeleteGroup("nope"),
])
def test_delete_unknown_id_is_not_found(action):
    data = seeded_dataset()
    result = apply_action(data, action)

    assert result.outcome is MutationOutcome.NOT_FOUND
    assert result.dataset is data


def test_delete_payment():
    result = apply_action(seeded_dataset(), act.DeletePayment("id-8"))

    assert result.outcome is MutationOutcome.APPLIED
    assert result.dataset.payment_records == ()


# -- Whole dataset -------------------------------------------------------------

def test_replace_dataset_is_verbatim():
    incoming = seeded_dataset(make_env("other"))
    result = apply_action(seeded_dataset(), act.ReplaceDataset(incoming))

    assert result.dataset is incoming


def test_clear_dataset_empties_every_collection():
    result = apply_action(seeded_dataset(), act.ClearDataset())

    assert result.dataset == Dataset()
    assert result.outcome is MutationOutcome.APPLIED


def test_unknown_action_type_raises():
    with pytest.raises(TypeError, match="Unsupported action"):
        apply_action(Dataset(), object())


def test_result_changed_reflects_outcome():
    assert MutationResult(Dataset(), MutationOutcome.UNCHANGED).changed is False
    assert MutationResult(Dataset(), MutationOutcome.APPLIED).changed is True
