from __future__ import annotations

import uuid

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from educrm.crud.store import SqlApplicationStore, SqlInvoiceStore, SqlReferenceStore
from educrm.database import get_db
from educrm.errors import ValidationError
from educrm.services.application_tracker import ApplicationTracker
from educrm.services.invoice_service import InvoiceService


async def get_reference_store(session: AsyncSession = Depends(get_db)) -> SqlReferenceStore:
    return SqlReferenceStore(session)


async def get_acting_user(
    x_acting_user: str | None = Header(None, description="UUID of the staff user making the change"),
    store: SqlReferenceStore = Depends(get_reference_store),
) -> uuid.UUID | None:
    """Resolve the acting user; it must be an active staff member."""

    if x_acting_user is None or not x_acting_user.strip():
        return None
    try:
        user_id = uuid.UUID(x_acting_user.strip())
    except ValueError:
        raise HTTPException(status_code=422, detail="Invalid X-Acting-User header")

    if not await store.is_active_staff(user_id):
        raise ValidationError("acting_user", "X-Acting-User does not name an active staff user")
    return user_id


async def get_application_tracker(session: AsyncSession = Depends(get_db)) -> ApplicationTracker:
    return ApplicationTracker(SqlApplicationStore(session))


async def get_invoice_service(session: AsyncSession = Depends(get_db)) -> InvoiceService:
    return InvoiceService(SqlInvoiceStore(session))
