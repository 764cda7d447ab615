import itertools
import re
from decimal import Decimal

import pytest

from educrm.services.invoice_engine import (
    compute_totals,
    generate_invoice_id,
    is_line_item_empty,
    next_invoice_id,
    normalize_line_item,
    recompute_line_amount,
    to_decimal,
)


def _lines(*pairs):
    return [
        normalize_line_item({"description": f"line {n}", "quantity": q, "unit_price": p})
        for n, (q, p) in enumerate(pairs)
    ]


def test_itemized_totals_with_tax_and_discount():
    totals = compute_totals(_lines((2, "50.00"), (1, "25.50")), "", 10, 5)

    assert totals.subtotal == Decimal("125.50")
    assert totals.tax_amount == Decimal("12.55")
    assert totals.grand_total == Decimal("133.05")


def test_flat_amount_used_when_there_are_no_items():
    totals = compute_totals([], 200, 0, 0)

    assert totals.subtotal == Decimal("200.00")
    assert totals.tax_amount == Decimal("0.00")
    assert totals.grand_total == Decimal("200.00")


def test_items_take_precedence_over_flat_amount():
    totals = compute_totals(_lines((1, 10)), 999, 0, 0)
    assert totals.subtotal == Decimal("10.00")


def test_subtotal_does_not_depend_on_item_order():
    lines = _lines((3, "19.99"), (1, "0.005"), (2, "7.35"), ("1.5", "12.10"))
    expected = compute_totals(lines, 0, 18, 0)

    for perm in itertools.permutations(lines):
        assert compute_totals(perm, 0, 18, 0) == expected


def test_tax_rounds_half_up_to_cents():
    # 10.10 * 5% = 0.505
    totals = compute_totals([], "10.10", 5, 0)
    assert totals.tax_amount == Decimal("0.51")
    assert totals.grand_total == Decimal("10.61")


def test_grand_total_is_subtotal_plus_tax_minus_discount():
    totals = compute_totals(_lines((4, "12.34"), (1, "0.99")), 0, 15, "3.21")
    assert totals.grand_total == totals.subtotal + totals.tax_amount - Decimal("3.21")


@pytest.mark.parametrize("bad", ["", "abc", None, "1,000", "NaN", "Infinity"])
def test_non_numeric_input_counts_as_zero(bad):
    assert to_decimal(bad) == Decimal("0")
    assert recompute_line_amount({"quantity": bad, "unit_price": "5"}) == Decimal("0.00")

    totals = compute_totals([], bad, bad, bad)
    assert totals.grand_total == Decimal("0.00")


def test_line_amount_is_recomputed_and_input_amount_ignored():
    line = normalize_line_item({"description": " Visa fee ", "quantity": "3", "unit_price": "33.333", "amount": "1"})

    assert line["description"] == "Visa fee"
    assert line["amount"] == Decimal("100.00")


def test_empty_line_detection():
    assert is_line_item_empty(normalize_line_item({"description": "  ", "quantity": "", "unit_price": ""}))
    assert not is_line_item_empty(normalize_line_item({"description": "Courier", "quantity": "", "unit_price": ""}))
    assert not is_line_item_empty(normalize_line_item({"description": "", "quantity": 1, "unit_price": 5}))


def test_invoice_id_format():
    assert generate_invoice_id(1700000012345) == "INV-00012345"
    assert generate_invoice_id(42) == "INV-00000042"
    assert re.fullmatch(r"INV-\d{8}", generate_invoice_id())


def test_next_invoice_id_increments_and_wraps():
    assert next_invoice_id("INV-00012345") == "INV-00012346"
    assert next_invoice_id("INV-99999999") == "INV-00000000"


def test_unpriced_lines_fall_back_to_flat_amount():
    lines = [normalize_line_item({"description": "Visa fee", "quantity": "1", "unit_price": ""})]

    totals = compute_totals(lines, "200", 0, 0)
    assert totals.subtotal == Decimal("200.00")
    assert totals.grand_total == Decimal("200.00")


def test_discount_is_rounded_to_cents_before_subtracting():
    # 0.005 rounds half-up to 0.01, the value a NUMERIC(12, 2) column keeps.
    totals = compute_totals([], "100", 0, "0.005")
    assert totals.grand_total == Decimal("99.99")

    assert compute_totals([], "100", 0, "0.004").grand_total == Decimal("100.00")
