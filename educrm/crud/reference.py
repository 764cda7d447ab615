from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from educrm.models.student import Student
from educrm.models.university import University
from educrm.models.user import StaffUser


async def list_students(session: AsyncSession) -> list[Student]:
    res = await session.execute(select(Student).order_by(Student.full_name.asc()))
    return list(res.scalars().all())


async def list_universities(session: AsyncSession) -> list[University]:
    res = await session.execute(select(University).order_by(University.name.asc()))
    return list(res.scalars().all())


async def list_staff(session: AsyncSession, *, role: str) -> list[StaffUser]:
    stmt = (
        select(StaffUser)
        .where(StaffUser.role == role, StaffUser.is_active.is_(True))
        .order_by(StaffUser.full_name.asc())
    )
    res = await session.execute(stmt)
    return list(res.scalars().all())


async def get_staff(session: AsyncSession, *, user_id: UUID, role: str) -> StaffUser | None:
    stmt = select(StaffUser).where(
        StaffUser.id == user_id,
        StaffUser.role == role,
        StaffUser.is_active.is_(True),
    )
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def get_active_staff(session: AsyncSession, *, user_id: UUID) -> StaffUser | None:
    stmt = select(StaffUser).where(StaffUser.id == user_id, StaffUser.is_active.is_(True))
    res = await session.execute(stmt)
    return res.scalar_one_or_none()
