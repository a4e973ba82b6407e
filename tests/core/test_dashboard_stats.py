"""Dashboard Stats — tests for aggregate counts, rates and the group report.

Invariants:
    - Empty denominators give 0.0
    - Overdue means unpaid with due date strictly before the reference date
    - Group report only counts sessions of that group
"""

import pytest

from teacherhub.core import actions as act
from teacherhub.core.dashboard_stats import (
    compute_dashboard, compute_dashboard_counts, compute_group_report,
    overall_attendance_rate, overdue_payments, payment_rate_for_month,
    recent_activity,
)
from teacherhub.core.domain_types import AttendanceStatus, PaymentStatus
from teacherhub.core.entities import Dataset
from tests.factories import apply_all, make_env, seeded_dataset


def _busier_dataset():
    """Seeded data plus Bob absent, a second session and two more payments."""
    env = make_env()
    data = seeded_dataset(env)
    return apply_all(data, [
        act.RecordAttendance("id-4", "id-2", AttendanceStatus.ABSENT),   # id-9
        act.AddSession("id-3", "2024-03-11T10:00:00Z", topic="Decimals"),  # id-10
        act.RecordAttendance("id-10", "id-1", AttendanceStatus.PRESENT),  # id-11
        act.AddPayment(
            student_id="id-2", group_id="id-3", month="2024-03",
            status=PaymentStatus.UNPAID, amount=150, due_date="2024-03-05",
        ),
        act.AddPayment(
            student_id="id-2", group_id="id-3", month="2024-04",
            status=PaymentStatus.UNPAID, amount=50, due_date="2024-04-05",
        ),
    ], env)


def test_counts():
    counts = compute_dashboard_counts(seeded_dataset())

    assert counts == {"students": 2, "groups": 1, "sessions": 1, "assessments": 1}


def test_empty_dataset_rates_are_zero():
    assert payment_rate_for_month(Dataset(), "2024-03") == 0.0
    assert overall_attendance_rate(Dataset()) == 0.0


def test_payment_rate_weighs_amounts():
    """March: 50 paid out of 200 billed."""
    assert payment_rate_for_month(_busier_dataset(), "2024-03") == pytest.approx(25.0)


def test_attendance_rate():
    """Two present out of three marks."""
    assert overall_attendance_rate(_busier_dataset()) == pytest.approx(200 / 3)


def test_overdue_is_strictly_before_reference_date():
    data = _busier_dataset()

    assert [p.month for p in overdue_payments(data, "2024-03-06")] == ["2024-03"]
    assert overdue_payments(data, "2024-03-05") == []
    assert len(overdue_payments(data, "2024-05-01")) == 2


def test_recent_activity_limits_and_orders():
    activity = recent_activity(_busier_dataset(), limit=1)

    assert [s["topic"] for s in activity["sessions"]] == ["Decimals"]
    assert activity["sessions"][0]["group_name"] == "Math 101"
    assert [a["name"] for a in activity["assessments"]] == ["Quiz 1"]


def test_recent_activity_tolerates_missing_group():
    data = apply_all(Dataset(), [act.AddSession("gone", "2024-01-01T10:00:00Z")], make_env())

    assert recent_activity(data)["sessions"][0]["group_name"] is None


def test_compute_dashboard_shape():
    dashboard = compute_dashboard(_busier_dataset(), "2024-03", "2024-03-06")

    assert dashboard["counts"]["sessions"] == 2
    assert dashboard["payment_rate"] == pytest.approx(25.0)
    assert dashboard["overdue_payments"] == 1
    assert set(dashboard["recent_activity"]) == {"sessions", "assessments"}


def test_group_report_per_student():
    report = compute_group_report(_busier_dataset(), "id-3")

    assert report["sessions"] == 2
    assert report["attendance_rate"] == pytest.approx(200 / 3)
    by_name = {row["full_name"]: row for row in report["students"]}
    assert by_name["Alice"]["present"] == 2
    assert by_name["Alice"]["rate"] == pytest.approx(100.0)
    assert by_name["Bob"]["total"] == 1
    assert by_name["Bob"]["rate"] == 0.0


def test_group_report_unknown_group_is_empty():
    report = compute_group_report(seeded_dataset(), "nope")

    assert report["sessions"] == 0
    assert report["students"] == []
    assert report["attendance_rate"] == 0.0
