"""Turns a finished draft into a stored invoice and takes its items out of stock.

The commit is an ordered pipeline of independent store writes:

    numbering -> header -> items -> inventory

A failure stops the pipeline and raises ``PersistenceError`` naming the step.
Writes that already happened are kept, so a failure after ``header`` leaves an
invoice without (all of) its items or stock movements; the error carries the
invoice id so the caller can tell the user which invoice needs attention.

Calling ``commit`` twice with the same draft creates two invoices.
"""
import json
import logging
from collections.abc import Callable
from datetime import datetime, timezone

from app.core.errors import ItemNotFound, PersistenceError
from app.core.money import ZERO
from app.services.data_store import DataStore, InvoiceRecord
from app.services.invoice_draft import DraftInvoice, DraftTotals
from app.services.invoice_numbering import next_invoice_number

logger = logging.getLogger("invoicedesk.api.invoices")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InvoiceCommitCoordinator:
    def __init__(self, store: DataStore, *, clock: Callable[[], datetime] = _utc_now):
        self.store = store
        self.clock = clock

    def commit(self, draft: DraftInvoice) -> InvoiceRecord:
        totals = draft.validate_for_commit()
        issued_at = self.clock().astimezone(timezone.utc)

        invoice_number = self._assign_number(issued_at)
        invoice = self._persist_header(draft, totals, invoice_number, issued_at)
        items = self._persist_items(draft, invoice.id)
        self._decrement_inventory(draft, invoice.id)

        self._log("invoice.commit.completed", invoice_id=invoice.id, invoice_number=invoice_number)
        return InvoiceRecord(invoice=invoice, items=items)

    def _assign_number(self, issued_at: datetime) -> str:
        try:
            count = self.store.count_invoices()
        except PersistenceError as exc:
            raise PersistenceError(
                "Could not assign an invoice number. Nothing was saved.",
                step="numbering",
            ) from exc
        return next_invoice_number(count, issued_at.year)

    def _persist_header(
        self,
        draft: DraftInvoice,
        totals: DraftTotals,
        invoice_number: str,
        issued_at: datetime,
    ):
        buyer = draft.buyer
        try:
            return self.store.insert_invoice(
                {
                    "invoice_number": invoice_number,
                    "date": issued_at,
                    "status": "draft",
                    "buyer_name": buyer.name.strip(),
                    "buyer_address": buyer.address.strip(),
                    "buyer_phone": buyer.phone.strip(),
                    "buyer_email": buyer.email,
                    "buyer_gstin": buyer.gstin,
                    "subtotal": totals.subtotal,
                    "discount": totals.discount_amount,
                    "tax_percent": draft.tax_percent,
                    "tax": totals.tax_amount,
                    "total": totals.total,
                    "notes": draft.notes,
                }
            )
        except PersistenceError as exc:
            raise PersistenceError(
                "Failed to create invoice. Nothing was saved.",
                step="header",
            ) from exc

    def _persist_items(self, draft: DraftInvoice, invoice_id: str):
        try:
            return self.store.insert_invoice_items(
                invoice_id,
                [
                    {
                        "inventory_item_id": line.inventory_item_id,
                        "name": line.name,
                        "unit": line.unit,
                        "quantity": line.quantity,
                        "price_per_unit": line.price_per_unit,
                        "total": line.total,
                    }
                    for line in draft.items
                ],
            )
        except PersistenceError as exc:
            self._log("invoice.commit.items_failed", invoice_id=invoice_id, level=logging.ERROR)
            raise PersistenceError(
                "Invoice was created but its line items could not be saved.",
                step="items",
                invoice_id=invoice_id,
            ) from exc

    def _decrement_inventory(self, draft: DraftInvoice, invoice_id: str) -> None:
        failed: list[str] = []
        for line in draft.items:
            try:
                item = self.store.require_inventory_item(line.inventory_item_id)
                remaining = max(ZERO, item.quantity - line.quantity)
                self.store.update_inventory_item(item.id, {"quantity": remaining})
            except ItemNotFound:
                # Deleted since it was staged; the invoice keeps its snapshot.
                self._log(
                    "inventory.decrement.skipped",
                    invoice_id=invoice_id,
                    inventory_item_id=line.inventory_item_id,
                    level=logging.WARNING,
                )
            except PersistenceError:
                failed.append(line.inventory_item_id)

        if failed:
            self._log(
                "invoice.commit.inventory_failed",
                invoice_id=invoice_id,
                inventory_item_ids=failed,
                level=logging.ERROR,
            )
            raise PersistenceError(
                "Invoice was saved but stock could not be updated for some items.",
                step="inventory",
                invoice_id=invoice_id,
                details=[
                    {"field": "inventoryItemId", "message": item_id, "type": "stock_not_updated"}
                    for item_id in failed
                ],
            )

    def _log(self, event: str, *, level: int = logging.INFO, **fields: object) -> None:
        payload = {"event": event, "user_id": self.store.user_id, **fields}
        logger.log(level, json.dumps(payload, default=str))
