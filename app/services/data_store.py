import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import AuthRequired, DataIntegrityError, ItemNotFound, PersistenceError
from app.models.business import BusinessProfile
from app.models.inventory import InventoryItem
from app.models.invoice import INVOICE_STATUSES, Invoice, InvoiceItem

logger = logging.getLogger("invoicedesk.api.store")

T = TypeVar("T")


@dataclass(frozen=True)
class InvoiceRecord:
    """An invoice header together with its line items in insertion order."""

    invoice: Invoice
    items: list[InvoiceItem] = field(default_factory=list)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _checked_invoice(invoice: Invoice) -> Invoice:
    if invoice.status not in INVOICE_STATUSES:
        raise DataIntegrityError(
            f"Invoice {invoice.invoice_number} has unknown status {invoice.status!r}"
        )
    return invoice


class DataStore:
    """
    CRUD surface over the database for one user's records.

    Every write is committed on its own. There is no cross-call transaction:
    callers that need several writes sequence them and handle a failure part
    way through themselves.
    """

    def __init__(self, db: Session, *, user_id: str | None):
        if not user_id:
            raise AuthRequired()
        self.db = db
        self.user_id = user_id

    # -- plumbing -----------------------------------------------------------

    def _read(self, operation: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except SQLAlchemyError as exc:
            self._log_failure(operation, exc)
            raise PersistenceError(f"Could not load {operation.split('.')[0]} data") from exc

    def _write(self, operation: str, fn: Callable[[], T], *, refresh: bool = False) -> T:
        try:
            result = fn()
            self.db.commit()
            if refresh:
                self.db.refresh(result)
            return result
        except SQLAlchemyError as exc:
            self.db.rollback()
            self._log_failure(operation, exc)
            raise PersistenceError(f"Could not save {operation.split('.')[0]} data") from exc

    def _log_failure(self, operation: str, exc: Exception) -> None:
        logger.error(
            json.dumps(
                {
                    "event": "store.failure",
                    "operation": operation,
                    "user_id": self.user_id,
                    "error": str(exc),
                }
            )
        )

    # -- inventory ----------------------------------------------------------

    def list_inventory_items(self, *, search: str | None = None) -> list[InventoryItem]:
        def run() -> list[InventoryItem]:
            stmt = select(InventoryItem).where(InventoryItem.user_id == self.user_id)
            if search and search.strip():
                stmt = stmt.where(func.lower(InventoryItem.name).contains(search.strip().lower()))
            stmt = stmt.order_by(InventoryItem.created_at.desc(), InventoryItem.id.desc())
            return list(self.db.execute(stmt).scalars().all())

        return self._read("inventory.list", run)

    def get_inventory_item(self, item_id: str) -> InventoryItem | None:
        return self._read(
            "inventory.get",
            lambda: self.db.execute(
                select(InventoryItem).where(
                    InventoryItem.id == item_id,
                    InventoryItem.user_id == self.user_id,
                )
            ).scalar_one_or_none(),
        )

    def require_inventory_item(self, item_id: str) -> InventoryItem:
        item = self.get_inventory_item(item_id)
        if item is None:
            raise ItemNotFound(item_id)
        return item

    def insert_inventory_item(self, values: Mapping[str, Any]) -> InventoryItem:
        def run() -> InventoryItem:
            item = InventoryItem(user_id=self.user_id, **values)
            self.db.add(item)
            self.db.flush()
            return item

        return self._write("inventory.insert", run, refresh=True)

    def update_inventory_item(self, item_id: str, values: Mapping[str, Any]) -> InventoryItem:
        item = self.require_inventory_item(item_id)

        def run() -> InventoryItem:
            for column, value in values.items():
                setattr(item, column, value)
            self.db.flush()
            return item

        return self._write("inventory.update", run, refresh=True)

    def delete_inventory_item(self, item_id: str) -> None:
        item = self.require_inventory_item(item_id)
        self._write("inventory.delete", lambda: self.db.delete(item))

    # -- invoices -----------------------------------------------------------

    def count_invoices(self) -> int:
        return self._read(
            "invoice.count",
            lambda: int(
                self.db.execute(
                    select(func.count(Invoice.id)).where(Invoice.user_id == self.user_id)
                ).scalar_one()
            ),
        )

    def list_invoices(self, *, limit: int | None = None, offset: int = 0) -> list[Invoice]:
        def run() -> list[Invoice]:
            stmt = (
                select(Invoice)
                .where(Invoice.user_id == self.user_id)
                .order_by(Invoice.date.desc(), Invoice.invoice_number.desc())
                .offset(offset)
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            return list(self.db.execute(stmt).scalars().all())

        return [_checked_invoice(row) for row in self._read("invoice.list", run)]

    def get_invoice(self, invoice_id: str) -> Invoice | None:
        row = self._read(
            "invoice.get",
            lambda: self.db.execute(
                select(Invoice).where(Invoice.id == invoice_id, Invoice.user_id == self.user_id)
            ).scalar_one_or_none(),
        )
        return _checked_invoice(row) if row is not None else None

    def list_invoice_items(self, invoice_ids: list[str]) -> dict[str, list[InvoiceItem]]:
        if not invoice_ids:
            return {}

        def run() -> list[InvoiceItem]:
            return list(
                self.db.execute(
                    select(InvoiceItem)
                    .where(InvoiceItem.invoice_id.in_(invoice_ids))
                    .order_by(InvoiceItem.invoice_id, InvoiceItem.position.asc())
                ).scalars().all()
            )

        grouped: dict[str, list[InvoiceItem]] = {invoice_id: [] for invoice_id in invoice_ids}
        for item in self._read("invoice_item.list", run):
            grouped[item.invoice_id].append(item)
        return grouped

    def load_invoice(self, invoice_id: str) -> InvoiceRecord | None:
        invoice = self.get_invoice(invoice_id)
        if invoice is None:
            return None
        items = self.list_invoice_items([invoice.id])[invoice.id]
        return InvoiceRecord(invoice=invoice, items=items)

    def insert_invoice(self, values: Mapping[str, Any]) -> Invoice:
        def run() -> Invoice:
            invoice = Invoice(user_id=self.user_id, **values)
            self.db.add(invoice)
            self.db.flush()
            return invoice

        return _checked_invoice(self._write("invoice.insert", run))

    def insert_invoice_items(self, invoice_id: str, rows: list[Mapping[str, Any]]) -> list[InvoiceItem]:
        def run() -> list[InvoiceItem]:
            items = [
                InvoiceItem(invoice_id=invoice_id, position=position, **values)
                for position, values in enumerate(rows)
            ]
            self.db.add_all(items)
            self.db.flush()
            return items

        return self._write("invoice_item.insert", run)

    def update_invoice_status(self, invoice: Invoice, status: str) -> Invoice:
        if status not in INVOICE_STATUSES:
            raise DataIntegrityError(f"Unknown invoice status {status!r}")

        def run() -> Invoice:
            invoice.status = status
            self.db.flush()
            return invoice

        return _checked_invoice(self._write("invoice.update", run))

    # -- business profile ---------------------------------------------------

    def get_business_profile(self) -> BusinessProfile | None:
        return self._read(
            "profile.get",
            lambda: self.db.execute(
                select(BusinessProfile).where(BusinessProfile.user_id == self.user_id)
            ).scalar_one_or_none(),
        )

    def upsert_business_profile(self, values: Mapping[str, Any]) -> BusinessProfile:
        profile = self.get_business_profile()

        def run() -> BusinessProfile:
            target = profile
            if target is None:
                target = BusinessProfile(user_id=self.user_id)
                self.db.add(target)
            for column, value in values.items():
                setattr(target, column, value)
            self.db.flush()
            return target

        return self._write("profile.upsert", run)
