import uuid
from datetime import date
from decimal import Decimal

import pytest

from educrm.errors import PersistenceError, ValidationError
from educrm.schemas.invoice import InvoiceForm, InvoiceStatus
from educrm.services.invoice_service import InvoiceService
from tests._fakes import FakeInvoiceStore


TODAY = date(2025, 3, 1)
NOW_MS = 1700000012345


def _service(store=None, **kwargs):
    store = store or FakeInvoiceStore()
    return InvoiceService(store, today=lambda: TODAY, clock_ms=lambda: NOW_MS, **kwargs), store


def _form(**overrides):
    data = {
        "student_id": str(uuid.uuid4()),
        "university_id": str(uuid.uuid4()),
        "amount": "",
        "tax_rate": "10",
        "discount": "5",
    }
    data.update(overrides)
    return InvoiceForm(**data)


ITEMS = [
    {"description": "Application fee", "quantity": "2", "unit_price": "50.00"},
    {"description": "Courier", "quantity": "1", "unit_price": "25.50"},
]


@pytest.mark.anyio
@pytest.mark.parametrize(
    "overrides,items,field",
    [
        ({"student_id": ""}, ITEMS, "student_id"),
        ({"student_id": None, "university_id": None, "tax_rate": "7"}, [], "student_id"),
        ({"university_id": "  "}, ITEMS, "university_id"),
        ({"amount": "0"}, [], "amount"),
        ({"amount": "abc", "tax_rate": "7"}, [], "amount"),
        ({"tax_rate": "7"}, ITEMS, "tax_rate"),
        ({"discount": "-1"}, ITEMS, "discount"),
        ({"discount": "138.06"}, ITEMS, "discount"),
    ],
)
async def test_validation_reports_first_failing_field_without_submitting(overrides, items, field):
    service, store = _service()

    with pytest.raises(ValidationError) as excinfo:
        await service.create_invoice(_form(**overrides), items)

    assert excinfo.value.field == field
    assert store.payloads == []


@pytest.mark.anyio
async def test_empty_lines_do_not_count_as_items():
    service, store = _service()
    blank = [{"description": "", "quantity": "", "unit_price": ""}]

    with pytest.raises(ValidationError) as excinfo:
        await service.create_invoice(_form(amount=""), blank)

    assert excinfo.value.field == "amount"


@pytest.mark.anyio
async def test_discount_up_to_subtotal_plus_tax_is_allowed():
    service, _ = _service()

    invoice = await service.create_invoice(_form(discount="138.05"), ITEMS)
    assert invoice.total == Decimal("0.00")


@pytest.mark.anyio
async def test_create_invoice_builds_payload_from_recomputed_values():
    service, store = _service()
    created_by = uuid.uuid4()
    items = ITEMS + [{"description": "", "quantity": "", "unit_price": ""}]

    invoice = await service.create_invoice(_form(notes="Spring intake"), items, created_by=created_by)

    payload = store.payloads[0]
    assert payload["invoice_id"] == "INV-00012345"
    assert payload["payment_amount"] == Decimal("125.50")
    assert payload["tax"] == Decimal("12.55")
    assert payload["total"] == Decimal("133.05")
    assert payload["tax_rate"] == Decimal("10")
    assert payload["discount"] == Decimal("5")
    assert payload["payment_date"] == TODAY
    assert payload["status"] == "pending"
    assert payload["created_by"] == created_by
    assert payload["notes"] == "Spring intake"
    assert isinstance(payload["student_id"], uuid.UUID)
    assert [i["amount"] for i in payload["items"]] == [Decimal("100.00"), Decimal("25.50")]

    # Reading the stored invoice back gives the same totals.
    assert invoice.tax == Decimal("12.55")
    assert invoice.total == Decimal("133.05")
    assert invoice.status == InvoiceStatus.PENDING


@pytest.mark.anyio
async def test_flat_amount_invoice():
    service, store = _service()

    invoice = await service.create_invoice(_form(amount="200", tax_rate="0", discount="0"), [])

    assert store.payloads[0]["items"] == []
    assert invoice.payment_amount == Decimal("200.00")
    assert invoice.total == Decimal("200.00")


@pytest.mark.anyio
async def test_form_is_untouched_when_submission_fails():
    service, store = _service(FakeInvoiceStore(fail=True))
    form = _form()
    before = form.model_dump()

    with pytest.raises(PersistenceError):
        await service.create_invoice(form, ITEMS)

    assert form.model_dump() == before
    assert isinstance(form.student_id, str)
    assert len(store.payloads) == 1


@pytest.mark.anyio
async def test_invoice_id_collision_moves_to_next_candidate():
    service, store = _service(FakeInvoiceStore(taken_ids={"INV-00012345"}))

    invoice = await service.create_invoice(_form(), ITEMS)
    assert invoice.invoice_id == "INV-00012346"


@pytest.mark.anyio
async def test_invoice_id_allocation_gives_up_after_configured_attempts():
    store = FakeInvoiceStore(taken_ids={"INV-00012345", "INV-00012346"})
    service, _ = _service(store, id_attempts=2)

    with pytest.raises(PersistenceError):
        await service.create_invoice(_form(), ITEMS)
    assert store.payloads == []


def test_preview_matches_submission_totals():
    service, _ = _service()

    preview = service.preview_totals(_form(), ITEMS + [{"description": " ", "quantity": "", "unit_price": ""}])

    assert len(preview.items) == 2
    assert preview.subtotal == Decimal("125.50")
    assert preview.tax_amount == Decimal("12.55")
    assert preview.grand_total == Decimal("133.05")


@pytest.mark.anyio
async def test_list_invoices_filters_by_search_dates_and_effective_status():
    ids = iter([1700000000001, 1700000000002])
    store = FakeInvoiceStore()
    service = InvoiceService(store, today=lambda: TODAY, clock_ms=lambda: next(ids))

    late = await service.create_invoice(_form(due_date=date(2025, 2, 1)), ITEMS)
    on_time = await service.create_invoice(_form(due_date=date(2025, 4, 1)), ITEMS)

    overdue = await service.list_invoices(status=InvoiceStatus.OVERDUE)
    assert [i.invoice_id for i in overdue] == [late.invoice_id]

    pending = await service.list_invoices(status=InvoiceStatus.PENDING)
    assert [i.invoice_id for i in pending] == [on_time.invoice_id]

    found = await service.list_invoices(search=on_time.invoice_id.lower())
    assert [i.invoice_id for i in found] == [on_time.invoice_id]

    assert await service.list_invoices(start_date=date(2025, 3, 2)) == []
    assert len(await service.list_invoices(start_date=TODAY, end_date=TODAY)) == 2


@pytest.mark.anyio
async def test_description_only_lines_keep_the_flat_amount():
    service, store = _service()
    items = [{"description": "Visa fee", "quantity": "1", "unit_price": ""}]

    invoice = await service.create_invoice(_form(amount="200", tax_rate="0", discount="0"), items)

    assert store.payloads[0]["payment_amount"] == Decimal("200.00")
    assert [i.description for i in invoice.items] == ["Visa fee"]
    assert invoice.total == Decimal("200.00")


@pytest.mark.anyio
async def test_description_only_lines_without_flat_amount_fail_on_amount():
    service, store = _service()
    items = [{"description": "Visa fee", "quantity": "1", "unit_price": ""}]

    with pytest.raises(ValidationError) as excinfo:
        await service.create_invoice(_form(amount=""), items)

    assert excinfo.value.field == "amount"
    assert store.payloads == []


@pytest.mark.anyio
async def test_sub_cent_discount_is_stored_as_priced():
    service, store = _service()
    form = _form(amount="100", tax_rate="0", discount="0.005")

    preview = service.preview_totals(form, [])
    invoice = await service.create_invoice(form, [])

    assert store.payloads[0]["discount"] == Decimal("0.01")
    assert preview.grand_total == Decimal("99.99")
    assert invoice.total == preview.grand_total
