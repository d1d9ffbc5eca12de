from collections.abc import Iterable
from decimal import Decimal, InvalidOperation
from typing import Protocol

from app.core.errors import InvalidAmount
from app.core.money import ZERO, to_decimal

HUNDRED = Decimal("100")


class PricedLine(Protocol):
    quantity: Decimal
    price_per_unit: Decimal


def parse_amount(value: Decimal | int | float | str | None, *, field: str) -> Decimal:
    """Exact Decimal for ``value``; rejects missing, non-numeric and non-finite input."""
    if value is None:
        raise InvalidAmount(f"{field} is required", field=field)
    try:
        amount = to_decimal(value)
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise InvalidAmount(f"{field} must be a number", field=field) from exc
    if not amount.is_finite():
        raise InvalidAmount(f"{field} must be a finite number", field=field)
    return amount


def line_total(quantity: Decimal | int | str, price_per_unit: Decimal | int | str) -> Decimal:
    qty = parse_amount(quantity, field="quantity")
    price = parse_amount(price_per_unit, field="price_per_unit")
    if qty <= ZERO:
        raise InvalidAmount("Please enter a valid quantity.", field="quantity")
    if price < ZERO:
        raise InvalidAmount("Price per unit cannot be negative.", field="price_per_unit")
    return qty * price


def subtotal(items: Iterable[PricedLine]) -> Decimal:
    return sum((line_total(item.quantity, item.price_per_unit) for item in items), ZERO)


def tax_amount(base: Decimal, percent: Decimal | int | str | None = None) -> Decimal:
    if percent is None:
        return ZERO
    rate = parse_amount(percent, field="tax_percent")
    if rate < ZERO:
        raise InvalidAmount("Tax percent cannot be negative.", field="tax_percent")
    return parse_amount(base, field="base") * rate / HUNDRED


def grand_total(subtotal_amount: Decimal, discount: Decimal, tax: Decimal) -> Decimal:
    # Not clamped: a negative result must be rejected by the caller before commit.
    return subtotal_amount - discount + tax
