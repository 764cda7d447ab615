from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, computed_field, field_validator

from educrm.services.invoice_engine import InvoiceTotals, compute_totals, to_decimal


TAX_RATES: tuple[Decimal, ...] = (Decimal("0"), Decimal("5"), Decimal("10"), Decimal("15"), Decimal("18"))


class PaymentMethod(str, Enum):
    BANK_TRANSFER = "bank_transfer"
    CASH = "cash"
    CREDIT_CARD = "credit_card"
    MOBILE_BANKING = "mobile_banking"
    CHEQUE = "cheque"


class PaymentType(str, Enum):
    APPLICATION_FEE = "application_fee"
    TUITION_FEE = "tuition_fee"
    VISA_FEE = "visa_fee"
    SERVICE_CHARGE = "service_charge"
    CONSULTATION_FEE = "consultation_fee"
    OTHER = "other"


class InvoiceStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class LineItemInput(BaseModel):
    """A line exactly as typed; numbers may be empty or garbage."""

    description: str = ""
    quantity: Any = "1"
    unit_price: Any = ""


class LineItem(BaseModel):
    description: str = ""
    quantity: Decimal = Decimal("0")
    unit_price: Decimal = Decimal("0")
    amount: Decimal = Decimal("0")

    @field_validator("quantity", "unit_price", "amount", mode="before")
    @classmethod
    def _forgiving_number(cls, v: Any) -> Decimal:
        return to_decimal(v)

    def is_empty(self) -> bool:
        return not self.description.strip() and self.amount == 0


class InvoiceForm(BaseModel):
    """Invoice form as entered. Loose types; InvoiceService validates."""

    student_id: str | UUID | None = None
    university_id: str | UUID | None = None
    payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER
    payment_type: PaymentType = PaymentType.APPLICATION_FEE

    amount: Any = ""
    tax_rate: Any = "0"
    discount: Any = "0"

    notes: str = ""
    due_date: date | None = None


class InvoiceCreate(InvoiceForm):
    items: list[LineItemInput] = Field(default_factory=list)


class InvoicePreview(BaseModel):
    items: list[LineItem]
    subtotal: Decimal
    tax_amount: Decimal
    grand_total: Decimal


class InvoiceRead(BaseModel):
    id: UUID
    invoice_id: str

    student_id: UUID
    university_id: UUID
    created_by: UUID | None = None

    student_name: str | None = None
    university_name: str | None = None

    payment_method: PaymentMethod
    payment_type: PaymentType

    items: list[LineItem] = Field(default_factory=list)
    payment_amount: Decimal
    tax_rate: Decimal
    discount: Decimal

    notes: str | None = None
    due_date: date | None = None
    payment_date: date
    status: InvoiceStatus = InvoiceStatus.PENDING

    created_at: datetime | None = None

    class Config:
        from_attributes = True

    @computed_field  # type: ignore[prop-decorator]
    @property
    def tax(self) -> Decimal:
        return self.totals().tax_amount

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total(self) -> Decimal:
        return self.totals().grand_total

    def totals(self) -> InvoiceTotals:
        return compute_totals(self.items, self.payment_amount, self.tax_rate, self.discount)


class InvoiceListResponse(BaseModel):
    items: list[InvoiceRead]
    total: int
