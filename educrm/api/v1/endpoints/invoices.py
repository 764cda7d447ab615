from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status

from educrm.api.deps import get_acting_user, get_invoice_service
from educrm.schemas.invoice import (
    InvoiceCreate,
    InvoiceListResponse,
    InvoicePreview,
    InvoiceRead,
    InvoiceStatus,
)
from educrm.services.invoice_service import InvoiceService


router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.post("", response_model=InvoiceRead, status_code=status.HTTP_201_CREATED)
async def create_invoice_endpoint(
    payload: InvoiceCreate,
    service: InvoiceService = Depends(get_invoice_service),
    acting_user: uuid.UUID | None = Depends(get_acting_user),
) -> InvoiceRead:
    return await service.create_invoice(payload, payload.items, created_by=acting_user)


@router.post("/preview", response_model=InvoicePreview)
async def preview_invoice_endpoint(
    payload: InvoiceCreate,
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoicePreview:
    return service.preview_totals(payload, payload.items)


@router.get("", response_model=InvoiceListResponse)
async def list_invoices_endpoint(
    created_by: str | None = Query(None, description="Only invoices created by this staff user"),
    search: str | None = Query(None, description="Student name or invoice id"),
    start_date: date | None = Query(None, description="Filter: payment_date >= start_date"),
    end_date: date | None = Query(None, description="Filter: payment_date <= end_date"),
    status: InvoiceStatus | None = Query(None, description="pending | paid | overdue | cancelled"),
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceListResponse:
    created_by_uuid = None
    if created_by is not None:
        try:
            created_by_uuid = uuid.UUID(created_by)
        except ValueError:
            raise HTTPException(status_code=422, detail="Invalid created_by")

    if start_date is not None and end_date is not None and start_date > end_date:
        raise HTTPException(status_code=422, detail="start_date must be <= end_date")

    items = await service.list_invoices(
        created_by=created_by_uuid,
        search=search,
        start_date=start_date,
        end_date=end_date,
        status=status,
    )
    return InvoiceListResponse(items=items, total=len(items))


@router.get("/{invoice_id}", response_model=InvoiceRead)
async def get_invoice_endpoint(
    invoice_id: str,
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceRead:
    return await service.get_invoice(invoice_id)
