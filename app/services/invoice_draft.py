"""In-memory invoice under construction.

A draft holds buyer details and staged line items. It never talks to the
store: callers pass the current inventory snapshot in when staging items, and
hand the finished draft to ``InvoiceCommitCoordinator`` to persist it.
"""
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Protocol

from app.core.errors import (
    EmptyItemList,
    IndexOutOfRange,
    InvalidAmount,
    ItemNotFound,
    InsufficientStock,
    MissingBuyerField,
)
from app.core.id_utils import new_record_id
from app.core.money import ZERO
from app.services.invoice_math import grand_total, line_total, parse_amount, subtotal, tax_amount
from app.services.stock_ledger import available_quantity

REQUIRED_BUYER_FIELDS = ("name", "address", "phone")


class InventorySnapshotItem(Protocol):
    id: str
    name: str
    unit: str
    quantity: Decimal
    price_per_unit: Decimal


@dataclass(frozen=True)
class BuyerDetails:
    name: str = ""
    address: str = ""
    phone: str = ""
    email: str | None = None
    gstin: str | None = None

    def missing_fields(self) -> list[str]:
        return [name for name in REQUIRED_BUYER_FIELDS if not (getattr(self, name) or "").strip()]


@dataclass
class StagedLine:
    inventory_item_id: str
    name: str
    unit: str
    price_per_unit: Decimal
    quantity: Decimal
    total: Decimal


@dataclass(frozen=True)
class DraftTotals:
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total: Decimal


@dataclass
class DraftInvoice:
    id: str = field(default_factory=new_record_id)
    buyer: BuyerDetails = field(default_factory=BuyerDetails)
    items: list[StagedLine] = field(default_factory=list)
    notes: str | None = None
    discount: Decimal = ZERO
    tax_percent: Decimal = ZERO
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def add_or_merge_item(
        self,
        inventory_item_id: str,
        quantity: Decimal | int | str,
        *,
        inventory: Mapping[str, InventorySnapshotItem],
    ) -> StagedLine:
        item = inventory.get(inventory_item_id)
        if item is None:
            raise ItemNotFound(inventory_item_id)

        requested = parse_amount(quantity, field="quantity")
        if requested <= ZERO:
            raise InvalidAmount("Please enter a valid quantity.", field="quantity")

        available = available_quantity(item, self.items)
        if requested > available:
            raise InsufficientStock(item_id=item.id, available=max(available, ZERO), unit=item.unit)

        index = self._line_index(inventory_item_id)
        if index is not None:
            line = self.items[index]
            merged_quantity = line.quantity + requested
            merged = replace(
                line,
                quantity=merged_quantity,
                total=line_total(merged_quantity, line.price_per_unit),
            )
            self.items[index] = merged
            return merged

        line = StagedLine(
            inventory_item_id=item.id,
            name=item.name,
            unit=item.unit,
            price_per_unit=item.price_per_unit,
            quantity=requested,
            total=line_total(requested, item.price_per_unit),
        )
        self.items.append(line)
        return line

    def remove_item(self, index: int) -> StagedLine:
        if index < 0 or index >= len(self.items):
            raise IndexOutOfRange(index, len(self.items))
        return self.items.pop(index)

    def set_buyer(self, buyer: BuyerDetails) -> None:
        self.buyer = buyer

    def set_notes(self, notes: str | None) -> None:
        cleaned = (notes or "").strip()
        self.notes = cleaned or None

    def set_discount(self, amount: Decimal | int | str) -> None:
        value = parse_amount(amount, field="discount")
        if value < ZERO:
            raise InvalidAmount("Discount cannot be negative.", field="discount")
        self.discount = value

    def set_tax_percent(self, percent: Decimal | int | str) -> None:
        value = parse_amount(percent, field="tax_percent")
        if value < ZERO:
            raise InvalidAmount("Tax percent cannot be negative.", field="tax_percent")
        self.tax_percent = value

    def compute_totals(self) -> DraftTotals:
        items_subtotal = subtotal(self.items)
        tax = tax_amount(items_subtotal - self.discount, self.tax_percent)
        return DraftTotals(
            subtotal=items_subtotal,
            discount_amount=self.discount,
            tax_amount=tax,
            total=grand_total(items_subtotal, self.discount, tax),
        )

    def validate_for_commit(self) -> DraftTotals:
        if not self.items:
            raise EmptyItemList()
        missing = self.buyer.missing_fields()
        if missing:
            raise MissingBuyerField(missing)
        totals = self.compute_totals()
        if totals.discount_amount > totals.subtotal:
            raise InvalidAmount("Discount cannot exceed the subtotal.", field="discount")
        return totals

    def _line_index(self, inventory_item_id: str) -> int | None:
        for index, line in enumerate(self.items):
            if line.inventory_item_id == inventory_item_id:
                return index
        return None
