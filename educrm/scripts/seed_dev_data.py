from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from educrm.config import settings
from educrm.models.student import Student
from educrm.models.university import University
from educrm.models.user import StaffUser


@dataclass(frozen=True)
class SeedStaffSpec:
    email: str
    role: str
    full_name: str


@dataclass(frozen=True)
class SeedStudentSpec:
    email: str
    full_name: str
    phone_number: str


@dataclass
class SeedResult:
    students: dict[str, uuid.UUID] = field(default_factory=dict)
    universities: dict[str, uuid.UUID] = field(default_factory=dict)
    staff: dict[str, uuid.UUID] = field(default_factory=dict)


DEMO_STAFF: tuple[SeedStaffSpec, ...] = (
    SeedStaffSpec(email="admin@demo.local", role="admin", full_name="Demo Admin"),
    SeedStaffSpec(email="counselor@demo.local", role="counselor", full_name="Demo Counselor"),
    SeedStaffSpec(email="processor@demo.local", role="processor", full_name="Demo Processor"),
)

DEMO_STUDENTS: tuple[SeedStudentSpec, ...] = (
    SeedStudentSpec(email="asha@demo.local", full_name="Asha Verma", phone_number="+91 90000 00001"),
    SeedStudentSpec(email="rahul@demo.local", full_name="Rahul Iyer", phone_number="+91 90000 00002"),
)

DEMO_UNIVERSITIES: tuple[tuple[str, str], ...] = (
    ("University of Toronto", "Canada"),
    ("University of Melbourne", "Australia"),
)


async def _get_or_create_staff(session: AsyncSession, spec: SeedStaffSpec) -> StaffUser:
    res = await session.execute(select(StaffUser).where(StaffUser.email == spec.email))
    user = res.scalar_one_or_none()

    if user is None:
        user = StaffUser(email=spec.email, role=spec.role, full_name=spec.full_name, is_active=True)
        session.add(user)
        await session.flush()
    else:
        # Keep demo users active with the expected role.
        user.is_active = True
        user.role = spec.role

    return user


async def _get_or_create_student(session: AsyncSession, spec: SeedStudentSpec) -> Student:
    res = await session.execute(select(Student).where(Student.email == spec.email))
    student = res.scalar_one_or_none()

    if student is None:
        student = Student(email=spec.email, full_name=spec.full_name, phone_number=spec.phone_number)
        session.add(student)
        await session.flush()

    return student


async def _get_or_create_university(session: AsyncSession, *, name: str, country: str) -> University:
    res = await session.execute(select(University).where(University.name == name))
    university = res.scalar_one_or_none()

    if university is None:
        university = University(name=name, country=country)
        session.add(university)
        await session.flush()

    return university


async def seed_session(session: AsyncSession) -> SeedResult:
    """Seed reference data inside the caller's transaction."""

    result = SeedResult()

    for spec in DEMO_STAFF:
        user = await _get_or_create_staff(session, spec)
        result.staff[spec.role] = user.id

    for spec in DEMO_STUDENTS:
        student = await _get_or_create_student(session, spec)
        result.students[spec.full_name] = student.id

    for name, country in DEMO_UNIVERSITIES:
        university = await _get_or_create_university(session, name=name, country=country)
        result.universities[name] = university.id

    return result


async def _seed(database_url: str) -> SeedResult:
    engine = create_async_engine(database_url, poolclass=NullPool)
    session_maker = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    try:
        async with session_maker() as session:
            async with session.begin():
                result = await seed_session(session)
    finally:
        await engine.dispose()

    return result


def seed_dev_data(database_url: str | None = None) -> SeedResult:
    return asyncio.run(_seed(database_url or settings.database_url))


def main() -> None:
    result = seed_dev_data()
    print(
        f"Seeded staff={len(result.staff)} students={len(result.students)} "
        f"universities={len(result.universities)}"
    )


if __name__ == "__main__":
    main()
