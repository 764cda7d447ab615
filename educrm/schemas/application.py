from __future__ import annotations

from datetime import date, datetime
from enum import Enum, IntEnum
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field


class DecisionStatus(str, Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    WAITLISTED = "Waitlisted"


class VerificationStatus(IntEnum):
    PENDING = 0
    VERIFIED = 1


class Stage(str, Enum):
    """Pipeline stages, in increasing order of progress."""

    APPLICATION = "Application"
    INTERVIEW = "Interview"
    VISA = "Visa"

    @property
    def flag(self) -> str:
        return _STAGE_FLAGS[self]


_STAGE_FLAGS = {
    Stage.APPLICATION: "application_stage",
    Stage.INTERVIEW: "interview",
    Stage.VISA: "visa_process",
}


def _stage_field(wire_name: str, attr: str):
    return Field(
        default=None,
        validation_alias=AliasChoices(attr, wire_name),
        serialization_alias=wire_name,
    )


class ApplicationCreate(BaseModel):
    # Required fields are checked by ApplicationTracker so that the error can
    # name the field the same way for HTTP and library callers.
    student_id: str | UUID | None = None
    university_id: str | UUID | None = None
    program_name: str | None = None

    application_date: date | None = None
    decision_status: DecisionStatus | None = None
    offer_letter: str | None = None


class ApplicationUpdate(BaseModel):
    """Editable fields only; identity, assignment and verification are not."""

    program_name: str | None = None
    application_date: date | None = None
    decision_status: DecisionStatus | None = None
    offer_letter: str | None = None

    class Config:
        extra = "forbid"


class ApplicationProgress(BaseModel):
    application_stage: bool | None = _stage_field("Application_stage", "application_stage")
    interview: bool | None = _stage_field("Interview", "interview")
    visa_process: bool | None = _stage_field("Visa_process", "visa_process")

    travel_insurance: bool | None = None
    proof_of_income: bool | None = None

    class Config:
        extra = "forbid"
        populate_by_name = True


class ApplicationRead(BaseModel):
    id: UUID

    student_id: UUID
    university_id: UUID
    counselor_id: UUID | None = None
    processor_id: UUID | None = None

    student_name: str | None = None
    university_name: str | None = None

    program_name: str
    application_date: date
    decision_status: DecisionStatus = DecisionStatus.PENDING
    offer_letter: str | None = None

    application_stage: bool | None = _stage_field("Application_stage", "application_stage")
    interview: bool | None = _stage_field("Interview", "interview")
    visa_process: bool | None = _stage_field("Visa_process", "visa_process")

    travel_insurance: bool = False
    proof_of_income: bool = False
    status: VerificationStatus = VerificationStatus.PENDING

    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True
        populate_by_name = True


class ApplicationDetail(ApplicationRead):
    status_badge: str


class ApplicationFilter(BaseModel):
    """Display filter; every field left as None is inactive."""

    university: str | None = None
    student: str | None = None
    travel_insurance: bool | None = None
    stage: Stage | None = None

    def is_empty(self) -> bool:
        return all(v is None for v in (self.university, self.student, self.travel_insurance, self.stage))


class FilterOptions(BaseModel):
    universities: list[str]
    students: list[str]


class ApplicationListResponse(BaseModel):
    items: list[ApplicationRead]
    total: int


class VerificationRead(BaseModel):
    application_id: UUID
    status: VerificationStatus
