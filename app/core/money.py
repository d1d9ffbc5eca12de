from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

MONEY_QUANT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Exact conversion; floats go through ``str`` so 0.1 stays 0.1."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidOperation(f"not a number: {value!r}")
    return Decimal(str(value))


def to_money(value: Decimal | int | float | str) -> Decimal:
    return to_decimal(value).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def format_money(value: Decimal | int | float | str) -> str:
    return f"{to_money(value):.2f}"


def format_quantity(value: Decimal | int | float | str) -> str:
    quantity = to_decimal(value)
    if quantity == quantity.to_integral_value():
        return str(quantity.quantize(Decimal(1)))
    return format(quantity.normalize(), "f")
