from __future__ import annotations

import datetime as dt
import uuid

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String, Uuid, false, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base
from .follow_up import FollowUp
from .student import Student
from .university import University


class Application(Base):
    __tablename__ = "applications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    student_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("students.id"), nullable=False)
    university_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("universities.id"), nullable=False)
    counselor_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("staff_users.id"), nullable=True)
    processor_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("staff_users.id"), nullable=True)

    program_name: Mapped[str] = mapped_column(String(255), nullable=False)
    application_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    decision_status: Mapped[str] = mapped_column(String(20), nullable=False, server_default="Pending")
    offer_letter: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Stage flags; NULL means the stage has not been touched yet.
    application_stage: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    interview: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    visa_process: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    travel_insurance: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    proof_of_income: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    # 0 = pending verification, 1 = verified
    status: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))

    created_at: Mapped[object] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[object] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    student: Mapped[Student] = relationship(lazy="selectin")
    university: Mapped[University] = relationship(lazy="selectin")
    follow_ups: Mapped[list[FollowUp]] = relationship(
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by=FollowUp.created_at,
    )

    @property
    def student_name(self) -> str | None:
        return self.student.full_name if self.student is not None else None

    @property
    def university_name(self) -> str | None:
        return self.university.name if self.university is not None else None
