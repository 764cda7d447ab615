from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel


class CounselorAssignment(BaseModel):
    # Loose types: presence and format are validated by the tracker so the
    # error names the missing field.
    counselor_id: str | UUID | None = None
    follow_up: str | date | None = None
    notes: str | None = None


class ProcessorAssignment(BaseModel):
    processor_id: str | UUID | None = None


class FollowUpRead(BaseModel):
    id: UUID
    application_id: UUID
    counselor_id: UUID

    follow_up: date
    notes: str | None = None

    created_by: UUID | None = None
    reminded_at: datetime | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True
