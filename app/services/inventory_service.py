from collections.abc import Iterable
from decimal import Decimal

from app.core.money import ZERO
from app.models.inventory import InventoryItem


def stock_value(items: Iterable[InventoryItem]) -> Decimal:
    return sum((item.quantity * item.price_per_unit for item in items), ZERO)


def low_stock_items(items: Iterable[InventoryItem], threshold: int | Decimal) -> list[InventoryItem]:
    limit = Decimal(threshold)
    return [item for item in items if item.quantity <= limit]
