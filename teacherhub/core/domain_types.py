"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - Every entity id is an opaque non-empty string, never parsed, never ordered
    - All closed value sets encoded as str Enums, no raw string matching
    - Month values are zero-padded "YYYY-MM" (lexicographic order == time order)

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (snapshot is plain JSON)
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

StudentId = NewType("StudentId", str)
GroupId = NewType("GroupId", str)
SessionId = NewType("SessionId", str)
AttendanceId = NewType("AttendanceId", str)
SessionReportId = NewType("SessionReportId", str)
AssessmentId = NewType("AssessmentId", str)
GradeId = NewType("GradeId", str)
PaymentId = NewType("PaymentId", str)


# ─── Value Types ─────────────────────────────────────────────────

Month = NewType("Month", str)           # "YYYY-MM"
IsoTimestamp = NewType("IsoTimestamp", str)


# ─── Enums ───────────────────────────────────────────────────────

class AttendanceStatus(str, Enum):
    """Attendance outcome for one student in one session."""
    PRESENT = "present"
    ABSENT = "absent"
    EXCUSED = "excused"


class PaymentStatus(str, Enum):
    """Monthly fee status for one student in one group."""
    PAID = "paid"
    UNPAID = "unpaid"
    PARTIAL = "partial"
    WAIVED = "waived"


class Performance(str, Enum):
    """Per-student rating written into a session report."""
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    NEEDS_IMPROVEMENT = "needs_improvement"
    POOR = "poor"


class CascadeMode(str, Enum):
    """How far a Group delete reaches.

    LEGACY removes links, sessions and assessments only; STRICT also removes
    the attendance, reports and grades hanging off those sessions/assessments.
    """
    LEGACY = "legacy"
    STRICT = "strict"


class MutationOutcome(str, Enum):
    """What a dispatched action did to the snapshot."""
    APPLIED = "applied"
    NOT_FOUND = "not_found"
    UNCHANGED = "unchanged"
