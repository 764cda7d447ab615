from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from educrm.crud.base import add_audit_entry, snapshot
from educrm.models.application import Application
from educrm.models.follow_up import FollowUp


async def get_application(
    session: AsyncSession,
    *,
    application_id: UUID,
    reload: bool = False,
) -> Application | None:
    """Load one application with its student, university and follow-ups.

    ``reload`` forces server-generated columns (timestamps) and relationships
    to be re-read for an object already in the session.
    """

    stmt = select(Application).where(Application.id == application_id)
    if reload:
        stmt = stmt.execution_options(populate_existing=True)

    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def list_applications(session: AsyncSession) -> list[Application]:
    stmt = select(Application).order_by(Application.created_at.desc(), Application.id.desc())
    res = await session.execute(stmt)
    return list(res.scalars().all())


async def create_application(
    session: AsyncSession,
    *,
    data: dict[str, Any],
    acting_user: UUID | None = None,
) -> Application:
    app = Application(**data)
    session.add(app)
    await session.flush()  # ensure app.id is available

    add_audit_entry(
        session,
        entity_type="application",
        entity_id=app.id,
        action="create",
        user_id=acting_user,
        new_value=data,
        change_summary="application created",
    )

    await session.commit()
    return await get_application(session, application_id=app.id, reload=True)  # type: ignore[return-value]


async def update_application(
    session: AsyncSession,
    *,
    db_obj: Application,
    data: dict[str, Any],
    action: str = "update",
    acting_user: UUID | None = None,
) -> Application:
    old_value = snapshot(db_obj, list(data))

    for field, value in data.items():
        if hasattr(db_obj, field):
            setattr(db_obj, field, value)

    add_audit_entry(
        session,
        entity_type="application",
        entity_id=db_obj.id,
        action=action,
        user_id=acting_user,
        old_value=old_value,
        new_value=data,
        change_summary=f"application {action}: {', '.join(sorted(data))}",
    )

    await session.commit()
    return await get_application(session, application_id=db_obj.id, reload=True)  # type: ignore[return-value]


async def delete_application(
    session: AsyncSession,
    *,
    db_obj: Application,
    acting_user: UUID | None = None,
) -> None:
    add_audit_entry(
        session,
        entity_type="application",
        entity_id=db_obj.id,
        action="delete",
        user_id=acting_user,
        old_value=snapshot(db_obj, ("student_id", "university_id", "program_name", "decision_status")),
        change_summary="application deleted",
    )

    await session.delete(db_obj)
    await session.commit()


async def create_follow_up(
    session: AsyncSession,
    *,
    db_obj: Application,
    counselor_id: UUID,
    follow_up,
    notes: str | None,
    acting_user: UUID | None = None,
) -> FollowUp:
    """Assign the counselor and record the follow-up in one transaction."""

    old_value = snapshot(db_obj, ("counselor_id",))
    db_obj.counselor_id = counselor_id

    entry = FollowUp(
        application_id=db_obj.id,
        counselor_id=counselor_id,
        follow_up=follow_up,
        notes=notes,
        created_by=acting_user,
    )
    session.add(entry)

    add_audit_entry(
        session,
        entity_type="application",
        entity_id=db_obj.id,
        action="assign_counselor",
        user_id=acting_user,
        old_value=old_value,
        new_value={"counselor_id": counselor_id, "follow_up": follow_up, "notes": notes},
        change_summary="counselor assigned",
    )

    await session.commit()

    res = await session.execute(
        select(FollowUp).where(FollowUp.id == entry.id).execution_options(populate_existing=True)
    )
    return res.scalar_one()


async def list_follow_ups(session: AsyncSession, *, application_id: UUID) -> list[FollowUp]:
    stmt = (
        select(FollowUp)
        .where(FollowUp.application_id == application_id)
        .order_by(FollowUp.follow_up.asc(), FollowUp.created_at.asc())
    )
    res = await session.execute(stmt)
    return list(res.scalars().all())


async def mark_follow_up_reminded(session: AsyncSession, *, follow_up_id: UUID) -> FollowUp | None:
    entry = await session.get(FollowUp, follow_up_id)
    if entry is None:
        return None

    entry.reminded_at = datetime.now(timezone.utc)
    await session.commit()
    return entry
