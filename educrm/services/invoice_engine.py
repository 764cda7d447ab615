"""Invoice arithmetic.

Everything here is pure and never raises on bad numeric input: empty or
malformed numbers count as zero. All money math is done in ``Decimal`` and
rounded half-up to cents only when a displayed or stored value is produced (a
line amount, the subtotal, the discount, the tax amount and the grand total).
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any


CENT = Decimal("0.01")
ZERO = Decimal("0")

INVOICE_ID_PREFIX = "INV-"
INVOICE_ID_DIGITS = 8


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal
    tax_amount: Decimal
    grand_total: Decimal


def to_decimal(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, int):
        d = Decimal(value)
    elif isinstance(value, float):
        d = Decimal(str(value))
    else:
        text = str(value).strip()
        if not text:
            return ZERO
        try:
            d = Decimal(text)
        except InvalidOperation:
            return ZERO
    if not d.is_finite():
        return ZERO
    return d


def round2(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _field(item: Any, name: str, default: Any = None) -> Any:
    if isinstance(item, Mapping):
        return item.get(name, default)
    return getattr(item, name, default)


def recompute_line_amount(item: Any) -> Decimal:
    """``round2(quantity * unit_price)`` for a mapping or an object."""

    qty = to_decimal(_field(item, "quantity"))
    price = to_decimal(_field(item, "unit_price"))
    return round2(qty * price)


def normalize_line_item(item: Any) -> dict[str, Any]:
    """Parse a raw line and attach its recomputed amount.

    Any ``amount`` carried by the input is discarded.
    """

    return {
        "description": str(_field(item, "description") or "").strip(),
        "quantity": to_decimal(_field(item, "quantity")),
        "unit_price": to_decimal(_field(item, "unit_price")),
        "amount": recompute_line_amount(item),
    }


def is_line_item_empty(item: Any) -> bool:
    description = str(_field(item, "description") or "").strip()
    return not description and to_decimal(_field(item, "amount")) == ZERO


def has_priced_items(items: Iterable[Any]) -> bool:
    """True when at least one line carries a non-zero amount."""

    return any(to_decimal(_field(i, "amount")) != ZERO for i in items)


def money(value: Any) -> Decimal:
    """A user-entered money value as stored: parsed, then rounded to cents."""

    return round2(to_decimal(value))


def compute_totals(
    items: Iterable[Any],
    flat_amount: Any,
    tax_rate: Any,
    discount: Any,
) -> InvoiceTotals:
    # Lines without a price (description only) do not replace the flat amount.
    items = list(items)
    if has_priced_items(items):
        subtotal = sum((to_decimal(_field(i, "amount")) for i in items), ZERO)
    else:
        subtotal = to_decimal(flat_amount)
    subtotal = round2(subtotal)

    tax_amount = round2(subtotal * to_decimal(tax_rate) / Decimal(100))
    grand_total = round2(subtotal + tax_amount - money(discount))

    return InvoiceTotals(subtotal=subtotal, tax_amount=tax_amount, grand_total=grand_total)


def generate_invoice_id(now_ms: int | None = None) -> str:
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    digits = str(int(now_ms)).zfill(INVOICE_ID_DIGITS)[-INVOICE_ID_DIGITS:]
    return f"{INVOICE_ID_PREFIX}{digits}"


def next_invoice_id(invoice_id: str) -> str:
    """Following candidate after ``invoice_id`` collided (wraps at 10**8)."""

    suffix = int(invoice_id[len(INVOICE_ID_PREFIX):])
    return f"{INVOICE_ID_PREFIX}{(suffix + 1) % 10**INVOICE_ID_DIGITS:0{INVOICE_ID_DIGITS}d}"


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def build_invoice_payload(
    form: Any,
    items: Iterable[Any],
    totals: InvoiceTotals,
    created_by: Any,
    *,
    invoice_id: str | None = None,
    today: date | None = None,
) -> dict[str, Any]:
    """Assemble the record handed to the persistence collaborator."""

    return {
        "invoice_id": invoice_id or generate_invoice_id(),
        "student_id": _field(form, "student_id"),
        "university_id": _field(form, "university_id"),
        "payment_method": _plain(_field(form, "payment_method")),
        "payment_type": _plain(_field(form, "payment_type")),
        "payment_amount": totals.subtotal,
        "tax_rate": to_decimal(_field(form, "tax_rate")),
        "tax": totals.tax_amount,
        "discount": money(_field(form, "discount")),
        "total": totals.grand_total,
        "notes": _field(form, "notes") or "",
        "due_date": _field(form, "due_date") or None,
        "items": [normalize_line_item(i) for i in items if not is_line_item_empty(i)],
        "created_by": created_by,
        "payment_date": today or date.today(),
        "status": "pending",
    }
