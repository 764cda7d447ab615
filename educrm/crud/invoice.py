from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from educrm.crud.base import jsonable
from educrm.models.invoice import Invoice


# Derived values the caller may send along; they are never persisted.
_DERIVED_FIELDS = frozenset({"tax", "total"})


async def get_invoice(
    session: AsyncSession,
    *,
    invoice_id: str,
    reload: bool = False,
) -> Invoice | None:
    stmt = select(Invoice).where(Invoice.invoice_id == invoice_id)
    if reload:
        stmt = stmt.execution_options(populate_existing=True)

    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def invoice_id_exists(session: AsyncSession, *, invoice_id: str) -> bool:
    res = await session.execute(select(func.count()).select_from(Invoice).where(Invoice.invoice_id == invoice_id))
    return int(res.scalar_one()) > 0


async def list_invoices(session: AsyncSession, *, created_by: UUID | None = None) -> list[Invoice]:
    stmt = select(Invoice)
    if created_by is not None:
        stmt = stmt.where(Invoice.created_by == created_by)
    stmt = stmt.order_by(Invoice.payment_date.desc(), Invoice.created_at.desc())

    res = await session.execute(stmt)
    return list(res.scalars().all())


async def create_invoice(session: AsyncSession, *, data: dict[str, Any]) -> Invoice:
    values = {k: v for k, v in data.items() if k not in _DERIVED_FIELDS}
    values["items"] = jsonable(values.get("items") or [])

    invoice = Invoice(**values)
    session.add(invoice)
    await session.commit()
    return await get_invoice(session, invoice_id=invoice.invoice_id, reload=True)  # type: ignore[return-value]
