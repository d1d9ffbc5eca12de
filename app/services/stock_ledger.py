from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from app.core.money import ZERO


class StockedItem(Protocol):
    id: str
    name: str
    unit: str
    quantity: Decimal


class StagedQuantity(Protocol):
    inventory_item_id: str
    quantity: Decimal


@dataclass(frozen=True)
class StockAvailability:
    inventory_item_id: str
    name: str
    unit: str
    committed: Decimal
    staged: Decimal
    available: Decimal


def staged_quantity(
    item_id: str,
    staged_lines: Sequence[StagedQuantity],
    *,
    exclude_index: int | None = None,
) -> Decimal:
    return sum(
        (
            line.quantity
            for index, line in enumerate(staged_lines)
            if line.inventory_item_id == item_id and index != exclude_index
        ),
        ZERO,
    )


def available_quantity(
    item: StockedItem,
    staged_lines: Sequence[StagedQuantity],
    *,
    exclude_index: int | None = None,
) -> Decimal:
    """Committed stock minus what this draft already holds, ignoring the line being edited."""
    return item.quantity - staged_quantity(item.id, staged_lines, exclude_index=exclude_index)


def availability(
    inventory: Iterable[StockedItem],
    staged_lines: Sequence[StagedQuantity],
) -> list[StockAvailability]:
    rows: list[StockAvailability] = []
    for item in inventory:
        staged = staged_quantity(item.id, staged_lines)
        rows.append(
            StockAvailability(
                inventory_item_id=item.id,
                name=item.name,
                unit=item.unit,
                committed=item.quantity,
                staged=staged,
                available=item.quantity - staged,
            )
        )
    return rows
