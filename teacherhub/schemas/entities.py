"""Entity Schemas — Pydantic mirrors of the core records for the HTTP boundary.

Invariants:
    - Wire names are camelCase, identical to the persisted snapshot keys
    - to_entity() returns the frozen core dataclass; schemas never reach core/

Design Decisions:
    - alias_generator + populate_by_name: clients send camelCase, tests may use
      either spelling
    - Required-field and range checks live here because the store itself never
      validates; the HTTP layer is one of its callers
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from teacherhub.core.domain_types import (
    AttendanceStatus, PaymentStatus, Performance,
)
from teacherhub.core.entities import (
    Assessment, AttendanceRecord, Grade, Group, PaymentRecord, Session,
    SessionReport, Student,
)

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, allow_inf_nan=False,
    )


class StudentBody(CamelModel):
    id: str = Field(min_length=1)
    full_name: str = Field(min_length=1, max_length=200)
    created_at: str
    contact_info: str | None = None
    parent_phone: str | None = None
    notes: str | None = None

    def to_entity(self) -> Student:
        return Student(**self.model_dump())


class GroupBody(CamelModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=200)
    created_at: str
    description: str | None = None

    def to_entity(self) -> Group:
        return Group(**self.model_dump())


class SessionBody(CamelModel):
    id: str = Field(min_length=1)
    group_id: str = Field(min_length=1)
    date_time: str
    created_at: str
    topic: str | None = None

    def to_entity(self) -> Session:
        return Session(**self.model_dump())


class AttendanceBody(CamelModel):
    id: str = Field(min_length=1)
    session_id: str = Field(min_length=1)
    student_id: str = Field(min_length=1)
    status: AttendanceStatus

    def to_entity(self) -> AttendanceRecord:
        return AttendanceRecord(**self.model_dump())


class SessionReportBody(CamelModel):
    id: str = Field(min_length=1)
    session_id: str = Field(min_length=1)
    student_id: str = Field(min_length=1)
    performance: Performance
    created_at: str
    updated_at: str
    strengths: str = ""
    improvements: str = ""
    notes: str = ""

    def to_entity(self) -> SessionReport:
        return SessionReport(**self.model_dump())


class AssessmentBody(CamelModel):
    id: str = Field(min_length=1)
    group_id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=200)
    max_score: float = Field(gt=0)
    date: str
    created_at: str

    def to_entity(self) -> Assessment:
        return Assessment(**self.model_dump())


class GradeBody(CamelModel):
    id: str = Field(min_length=1)
    assessment_id: str = Field(min_length=1)
    student_id: str = Field(min_length=1)
    score: float = Field(ge=0)
    comments: str | None = None

    def to_entity(self) -> Grade:
        return Grade(**self.model_dump())


class PaymentBody(CamelModel):
    id: str = Field(min_length=1)
    student_id: str = Field(min_length=1)
    group_id: str = Field(min_length=1)
    month: str = Field(pattern=MONTH_PATTERN)
    status: PaymentStatus
    amount: float = Field(ge=0)
    due_date: str
    created_at: str
    paid_date: str | None = None
    notes: str | None = None

    def to_entity(self) -> PaymentRecord:
        return PaymentRecord(**self.model_dump())
