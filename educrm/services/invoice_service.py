from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from datetime import date
from typing import Any
from uuid import UUID

from educrm.config import settings
from educrm.errors import PersistenceError, ValidationError
from educrm.schemas.invoice import (
    TAX_RATES,
    InvoiceForm,
    InvoicePreview,
    InvoiceRead,
    InvoiceStatus,
    LineItem,
)
from educrm.services.application_tracker import require_id
from educrm.services.collaborators import InvoiceStore
from educrm.services.invoice_engine import (
    ZERO,
    InvoiceTotals,
    build_invoice_payload,
    compute_totals,
    generate_invoice_id,
    has_priced_items,
    is_line_item_empty,
    money,
    next_invoice_id,
    normalize_line_item,
    to_decimal,
)


logger = logging.getLogger("educrm.services")


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def effective_invoice_status(invoice: InvoiceRead, today: date) -> InvoiceStatus:
    """Stored status, except a pending invoice past its due date is overdue."""

    if invoice.status == InvoiceStatus.PENDING and invoice.due_date is not None and invoice.due_date < today:
        return InvoiceStatus.OVERDUE
    return InvoiceStatus(invoice.status)


def filter_invoices(
    invoices: Iterable[InvoiceRead],
    *,
    search: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[InvoiceRead]:
    """Search on student name / invoice id, then an inclusive payment date range."""

    result = list(invoices)
    if search:
        needle = search.lower()
        result = [
            i
            for i in result
            if needle in (i.student_name or "").lower() or needle in i.invoice_id.lower()
        ]
    if start_date is not None:
        result = [i for i in result if i.payment_date >= start_date]
    if end_date is not None:
        result = [i for i in result if i.payment_date <= end_date]
    return result


def prepare_line_items(items: Iterable[Any]) -> list[LineItem]:
    """Recompute every line and drop lines with neither description nor amount."""

    lines = [LineItem(**normalize_line_item(i)) for i in items]
    return [line for line in lines if not is_line_item_empty(line)]


def validate_invoice_form(form: InvoiceForm, items: list[LineItem], totals: InvoiceTotals) -> tuple[UUID, UUID]:
    """Check the form in display order; the first failure wins."""

    student_id = require_id(form.student_id, "student_id")
    university_id = require_id(form.university_id, "university_id")

    if not has_priced_items(items) and money(form.amount) <= ZERO:
        raise ValidationError("amount", "enter an amount or add priced invoice items")

    if to_decimal(form.tax_rate) not in TAX_RATES:
        allowed = ", ".join(str(r) for r in TAX_RATES)
        raise ValidationError("tax_rate", f"tax_rate must be one of: {allowed}")

    discount = money(form.discount)
    if discount < ZERO:
        raise ValidationError("discount", "discount must not be negative")
    if discount > totals.subtotal + totals.tax_amount:
        raise ValidationError("discount", "discount must not exceed subtotal plus tax")

    return student_id, university_id


class InvoiceService:
    def __init__(
        self,
        store: InvoiceStore,
        *,
        today: Callable[[], date] = date.today,
        clock_ms: Callable[[], int] = _now_ms,
        id_attempts: int | None = None,
    ) -> None:
        self._store = store
        self._today = today
        self._clock_ms = clock_ms
        self._id_attempts = id_attempts or settings.invoice_id_attempts

    def preview_totals(self, form: InvoiceForm, items: Iterable[Any]) -> InvoicePreview:
        lines = prepare_line_items(items)
        totals = compute_totals(lines, form.amount, form.tax_rate, form.discount)
        return InvoicePreview(
            items=lines,
            subtotal=totals.subtotal,
            tax_amount=totals.tax_amount,
            grand_total=totals.grand_total,
        )

    async def create_invoice(
        self,
        form: InvoiceForm,
        items: Iterable[Any],
        created_by: UUID | None = None,
    ) -> InvoiceRead:
        """Validate, price and submit an invoice.

        ``form`` is never modified, so after a ``PersistenceError`` the caller
        can resubmit the same form as is.
        """

        lines = prepare_line_items(items)
        totals = compute_totals(lines, form.amount, form.tax_rate, form.discount)
        student_id, university_id = validate_invoice_form(form, lines, totals)

        invoice_id = await self._allocate_invoice_id()
        payload = build_invoice_payload(
            form.model_copy(update={"student_id": student_id, "university_id": university_id}),
            lines,
            totals,
            created_by,
            invoice_id=invoice_id,
            today=self._today(),
        )

        invoice = await self._store.create_invoice_record(payload)
        logger.info(
            "invoice created invoice_id=%s student_id=%s total=%s",
            invoice.invoice_id,
            student_id,
            invoice.total,
        )
        return invoice

    async def get_invoice(self, invoice_id: str) -> InvoiceRead:
        return await self._store.get_invoice(invoice_id)

    async def list_invoices(
        self,
        *,
        created_by: UUID | None = None,
        search: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        status: InvoiceStatus | None = None,
    ) -> list[InvoiceRead]:
        invoices = await self._store.fetch_invoices(created_by=created_by)
        invoices = filter_invoices(invoices, search=search, start_date=start_date, end_date=end_date)
        if status is not None:
            today = self._today()
            invoices = [i for i in invoices if effective_invoice_status(i, today) == status]
        return invoices

    async def _allocate_invoice_id(self) -> str:
        candidate = generate_invoice_id(self._clock_ms())
        for _ in range(self._id_attempts):
            if not await self._store.invoice_id_exists(candidate):
                return candidate
            logger.warning("invoice id collision invoice_id=%s", candidate)
            candidate = next_invoice_id(candidate)
        raise PersistenceError(f"could not allocate a unique invoice id after {self._id_attempts} attempts")
