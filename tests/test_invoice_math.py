import random
from dataclasses import dataclass
from decimal import Decimal

import pytest

from app.core.errors import InvalidAmount
from app.core.money import format_money, format_quantity, to_money
from app.services.invoice_math import grand_total, line_total, parse_amount, subtotal, tax_amount


@dataclass
class _Line:
    quantity: Decimal
    price_per_unit: Decimal


def test_line_total_is_exact_for_decimal_prices():
    assert line_total(Decimal("3"), Decimal("0.10")) == Decimal("0.30")
    assert line_total("2.5", "19.99") == Decimal("49.975")
    assert line_total(4, 5) == Decimal("20")


def test_line_total_accepts_floats_without_binary_noise():
    assert line_total(3, 0.1) == Decimal("0.3")


@pytest.mark.parametrize("quantity", [0, -1, "-0.5"])
def test_line_total_rejects_non_positive_quantity(quantity):
    with pytest.raises(InvalidAmount) as exc_info:
        line_total(quantity, Decimal("10"))
    assert exc_info.value.message == "Please enter a valid quantity."
    assert exc_info.value.field == "quantity"


def test_line_total_rejects_negative_price():
    with pytest.raises(InvalidAmount) as exc_info:
        line_total(1, Decimal("-0.01"))
    assert exc_info.value.field == "price_per_unit"


@pytest.mark.parametrize("value", ["NaN", "Infinity", "-Infinity", "abc", None, True])
def test_parse_amount_rejects_non_finite_and_non_numeric(value):
    with pytest.raises(InvalidAmount):
        parse_amount(value, field="quantity")


def test_subtotal_of_empty_list_is_zero():
    assert subtotal([]) == Decimal("0")


def test_subtotal_matches_sum_of_line_totals_for_random_lines():
    rng = random.Random(20261019)
    for _ in range(200):
        lines = [
            _Line(
                quantity=Decimal(rng.randint(1, 50_000)) / Decimal(1000),
                price_per_unit=Decimal(rng.randint(0, 1_000_000)) / Decimal(100),
            )
            for _ in range(rng.randint(1, 12))
        ]
        expected = sum((line.quantity * line.price_per_unit for line in lines), Decimal("0"))
        assert subtotal(lines) == expected


def test_tax_amount_defaults_to_zero_without_percent():
    assert tax_amount(Decimal("150")) == Decimal("0")
    assert tax_amount(Decimal("150"), 0) == Decimal("0")


def test_tax_amount_is_percent_of_base():
    assert tax_amount(Decimal("90"), Decimal("10")) == Decimal("9")
    assert tax_amount(Decimal("33.33"), Decimal("17")) == Decimal("5.6661")


def test_tax_amount_rejects_negative_percent():
    with pytest.raises(InvalidAmount):
        tax_amount(Decimal("100"), Decimal("-5"))


def test_grand_total_is_not_clamped():
    assert grand_total(Decimal("100"), Decimal("10"), Decimal("9")) == Decimal("99")
    assert grand_total(Decimal("10"), Decimal("20"), Decimal("0")) == Decimal("-10")


def test_money_rounds_half_up_only_for_display():
    assert to_money(Decimal("2.675")) == Decimal("2.68")
    assert format_money(Decimal("5.6661")) == "5.67"
    assert format_money(Decimal("1234567.5")) == "1234567.50"


def test_format_quantity_drops_trailing_zeros():
    assert format_quantity(Decimal("4.000")) == "4"
    assert format_quantity(Decimal("2.500")) == "2.5"
    assert format_quantity(Decimal("0.125")) == "0.125"
