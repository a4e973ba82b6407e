"""Action Schemas — the action-dispatch request body, one variant per action kind.

Invariants:
    - `type` discriminates the variant; unknown types are rejected by Pydantic (400)
    - Every variant converts to exactly one core action via to_action()
    - Whole-dataset replace is NOT dispatchable here (import has its own route)

Design Decisions:
    - Discriminated union over a single loose model: Pydantic picks the variant
      and reports field errors against it
    - Literal type tags in snake_case, field names camelCase like the snapshot
"""

from typing import Annotated, Literal, Union

from pydantic import Field

from teacherhub.core import actions as act
from teacherhub.core.domain_types import AttendanceStatus, PaymentStatus, Performance
from teacherhub.schemas.entities import (
    MONTH_PATTERN, AssessmentBody, AttendanceBody, CamelModel, GradeBody,
    GroupBody, PaymentBody, SessionBody, SessionReportBody, StudentBody,
)

_Id = Annotated[str, Field(min_length=1)]


# --- Students ------------------------------------------------------------------

class AddStudentRequest(CamelModel):
    type: Literal["add_student"]
    full_name: str = Field(min_length=1, max_length=200)
    contact_info: str | None = None
    parent_phone: str | None = None
    notes: str | None = None

    def to_action(self) -> act.AddStudent:
        return act.AddStudent(
            full_name=self.full_name.strip(), contact_info=self.contact_info,
            parent_phone=self.parent_phone, notes=self.notes,
        )


class UpdateStudentRequest(CamelModel):
    type: Literal["update_student"]
    student: StudentBody

    def to_action(self) -> act.UpdateStudent:
        return act.UpdateStudent(self.student.to_entity())


class DeleteStudentRequest(CamelModel):
    type: Literal["delete_student"]
    student_id: _Id

    def to_action(self) -> act.DeleteStudent:
        return act.DeleteStudent(self.student_id)


# --- Groups & membership -------------------------------------------------------

class AddGroupRequest(CamelModel):
    type: Literal["add_group"]
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None

    def to_action(self) -> act.AddGroup:
        return act.AddGroup(name=self.name.strip(), description=self.description)


class UpdateGroupRequest(CamelModel):
    type: Literal["update_group"]
    group: GroupBody

    def to_action(self) -> act.UpdateGroup:
        return act.UpdateGroup(self.group.to_entity())


class DeleteGroupRequest(CamelModel):
    type: Literal["delete_group"]
    group_id: _Id

    def to_action(self) -> act.DeleteGroup:
        return act.DeleteGroup(self.group_id)


class AddStudentToGroupRequest(CamelModel):
    type: Literal["add_student_to_group"]
    student_id: _Id
    group_id: _Id

    def to_action(self) -> act.AddStudentToGroup:
        return act.AddStudentToGroup(self.student_id, self.group_id)


class RemoveStudentFromGroupRequest(CamelModel):
    type: Literal["remove_student_from_group"]
    student_id: _Id
    group_id: _Id

    def to_action(self) -> act.RemoveStudentFromGroup:
        return act.RemoveStudentFromGroup(self.student_id, self.group_id)


# --- Sessions, attendance, reports ---------------------------------------------

class AddSessionRequest(CamelModel):
    type: Literal["add_session"]
    group_id: _Id
    date_time: str = Field(min_length=1)
    topic: str | None = None

    def to_action(self) -> act.AddSession:
        return act.AddSession(self.group_id, self.date_time, self.topic)


class UpdateSessionRequest(CamelModel):
    type: Literal["update_session"]
    session: SessionBody

    def to_action(self) -> act.UpdateSession:
        return act.UpdateSession(self.session.to_entity())


class DeleteSessionRequest(CamelModel):
    type: Literal["delete_session"]
    session_id: _Id

    def to_action(self) -> act.DeleteSession:
        return act.DeleteSession(self.session_id)


class RecordAttendanceRequest(CamelModel):
    type: Literal["record_attendance"]
    session_id: _Id
    student_id: _Id
    status: AttendanceStatus

    def to_action(self) -> act.RecordAttendance:
        return act.RecordAttendance(self.session_id, self.student_id, self.status)


class UpdateAttendanceRequest(CamelModel):
    type: Literal["update_attendance"]
    record: AttendanceBody

    def to_action(self) -> act.UpdateAttendance:
        return act.UpdateAttendance(self.record.to_entity())


class AddSessionReportRequest(CamelModel):
    type: Literal["add_session_report"]
    session_id: _Id
    student_id: _Id
    performance: Performance = Performance.AVERAGE
    strengths: str = ""
    improvements: str = ""
    notes: str = ""

    def to_action(self) -> act.AddSessionReport:
        return act.AddSessionReport(
            session_id=self.session_id, student_id=self.student_id,
            performance=self.performance, strengths=self.strengths,
            improvements=self.improvements, notes=self.notes,
        )


class UpdateSessionReportRequest(CamelModel):
    type: Literal["update_session_report"]
    report: SessionReportBody

    def to_action(self) -> act.UpdateSessionReport:
        return act.UpdateSessionReport(self.report.to_entity())


class DeleteSessionReportRequest(CamelModel):
    type: Literal["delete_session_report"]
    report_id: _Id

    def to_action(self) -> act.DeleteSessionReport:
        return act.DeleteSessionReport(self.report_id)


# --- Assessments & grades ------------------------------------------------------

class AddAssessmentRequest(CamelModel):
    type: Literal["add_assessment"]
    group_id: _Id
    name: str = Field(min_length=1, max_length=200)
    max_score: float = Field(gt=0)
    date: str = Field(min_length=1)

    def to_action(self) -> act.AddAssessment:
        return act.AddAssessment(
            self.group_id, self.name.strip(), self.max_score, self.date,
        )


class UpdateAssessmentRequest(CamelModel):
    type: Literal["update_assessment"]
    assessment: AssessmentBody

    def to_action(self) -> act.UpdateAssessment:
        return act.UpdateAssessment(self.assessment.to_entity())


class DeleteAssessmentRequest(CamelModel):
    type: Literal["delete_assessment"]
    assessment_id: _Id

    def to_action(self) -> act.DeleteAssessment:
        return act.DeleteAssessment(self.assessment_id)


class RecordGradeRequest(CamelModel):
    type: Literal["record_grade"]
    assessment_id: _Id
    student_id: _Id
    score: float = Field(ge=0)  # upper bound checked against the assessment
    comments: str | None = None

    def to_action(self) -> act.RecordGrade:
        return act.RecordGrade(
            self.assessment_id, self.student_id, self.score, self.comments,
        )


class UpdateGradeRequest(CamelModel):
    type: Literal["update_grade"]
    grade: GradeBody

    def to_action(self) -> act.UpdateGrade:
        return act.UpdateGrade(self.grade.to_entity())


class DeleteGradeRequest(CamelModel):
    type: Literal["delete_grade"]
    grade_id: _Id

    def to_action(self) -> act.DeleteGrade:
        return act.DeleteGrade(self.grade_id)


# --- Payments ------------------------------------------------------------------

class AddPaymentRequest(CamelModel):
    type: Literal["add_payment"]
    student_id: _Id
    group_id: _Id
    month: str = Field(pattern=MONTH_PATTERN)
    status: PaymentStatus = PaymentStatus.UNPAID
    amount: float = Field(ge=0)
    due_date: str = Field(min_length=1)
    paid_date: str | None = None
    notes: str | None = None

    def to_action(self) -> act.AddPayment:
        return act.AddPayment(
            student_id=self.student_id, group_id=self.group_id,
            month=self.month, status=self.status, amount=self.amount,
            due_date=self.due_date, paid_date=self.paid_date, notes=self.notes,
        )


class UpdatePaymentRequest(CamelModel):
    type: Literal["update_payment"]
    payment: PaymentBody

    def to_action(self) -> act.UpdatePayment:
        return act.UpdatePayment(self.payment.to_entity())


class DeletePaymentRequest(CamelModel):
    type: Literal["delete_payment"]
    payment_id: _Id

    def to_action(self) -> act.DeletePayment:
        return act.DeletePayment(self.payment_id)


ActionRequest = Annotated[
    Union[
        AddStudentRequest, UpdateStudentRequest, DeleteStudentRequest,
        AddGroupRequest, UpdateGroupRequest, DeleteGroupRequest,
        AddStudentToGroupRequest, RemoveStudentFromGroupRequest,
        AddSessionRequest, UpdateSessionRequest, DeleteSessionRequest,
        RecordAttendanceRequest, UpdateAttendanceRequest,
        AddSessionReportRequest, UpdateSessionReportRequest,
        DeleteSessionReportRequest,
        AddAssessmentRequest, UpdateAssessmentRequest, DeleteAssessmentRequest,
        RecordGradeRequest, UpdateGradeRequest, DeleteGradeRequest,
        AddPaymentRequest, UpdatePaymentRequest, DeletePaymentRequest,
    ],
    Field(discriminator="type"),
]


class DispatchRequest(CamelModel):
    """Request envelope: {"action": {"type": ..., ...}}."""
    action: ActionRequest
