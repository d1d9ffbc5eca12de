from decimal import Decimal

from sqlalchemy import Numeric, String
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator

from app.core.money import to_decimal

EXACT_PRECISION = 24
EXACT_SCALE = 10


class Base(DeclarativeBase):
    pass


class ExactDecimal(TypeDecorator):
    """
    NUMERIC on databases that have it. SQLite only has binary floats for
    numeric columns, so there the decimal's text form is stored instead.
    """

    impl = Numeric
    cache_ok = True

    def load_dialect_impl(self, dialect: Dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(EXACT_PRECISION + 8))
        return dialect.type_descriptor(Numeric(EXACT_PRECISION, EXACT_SCALE, asdecimal=True))

    def process_bind_param(self, value, dialect: Dialect):
        if value is None or dialect.name != "sqlite":
            return value
        return format(to_decimal(value), "f")

    def process_result_value(self, value, dialect: Dialect) -> Decimal | None:
        if value is None:
            return None
        return to_decimal(value)


def exact_numeric() -> ExactDecimal:
    """Column type for quantities and money: wide enough that no derived value is rounded on write."""
    return ExactDecimal(EXACT_PRECISION, EXACT_SCALE)
