"""Domain errors raised by the invoicing core.

Each error carries a stable ``code`` and an HTTP ``status_code`` so the API
layer can render it with the common error envelope, plus a short message that
is safe to show to the user as-is.
"""
from decimal import Decimal
from typing import Any

from app.core.money import format_quantity


class InvoiceDeskError(Exception):
    code = "bad_request"
    status_code = 400

    def __init__(self, message: str, *, details: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidAmount(InvoiceDeskError):
    code = "invalid_amount"
    status_code = 400

    def __init__(self, message: str, *, field: str | None = None):
        details = [{"field": field, "message": message, "type": self.code}] if field else None
        super().__init__(message, details=details)
        self.field = field


class ItemNotFound(InvoiceDeskError):
    code = "item_not_found"
    status_code = 404

    def __init__(self, item_id: str):
        super().__init__("Inventory item not found")
        self.item_id = item_id


class InsufficientStock(InvoiceDeskError):
    code = "insufficient_stock"
    status_code = 409

    def __init__(self, *, item_id: str, available: Decimal, unit: str):
        super().__init__(
            f"Only {format_quantity(available)} {unit} available.",
            details=[
                {"field": "inventoryItemId", "message": item_id, "type": self.code},
                {"field": "available", "message": format_quantity(available), "type": self.code},
                {"field": "unit", "message": unit, "type": self.code},
            ],
        )
        self.item_id = item_id
        self.available = available
        self.unit = unit


class IndexOutOfRange(InvoiceDeskError):
    code = "index_out_of_range"
    status_code = 400

    def __init__(self, index: int, size: int):
        super().__init__(f"No line item at position {index}; the draft has {size} line(s).")
        self.index = index
        self.size = size


class MissingBuyerField(InvoiceDeskError):
    code = "missing_buyer_field"
    status_code = 422

    def __init__(self, fields: list[str]):
        super().__init__(
            "Please fill in all required buyer details.",
            details=[
                {"field": f"buyer.{name}", "message": f"{name} is required", "type": self.code}
                for name in fields
            ],
        )
        self.fields = fields


class EmptyItemList(InvoiceDeskError):
    code = "empty_item_list"
    status_code = 400

    def __init__(self):
        super().__init__("Please add at least one item to the invoice.")


class PersistenceError(InvoiceDeskError):
    """A store read or write failed.

    ``step`` names the commit stage that failed (``numbering``, ``header``,
    ``items``, ``inventory``) and ``invoice_id`` is set once the invoice header
    exists, so callers can report a partially created invoice.
    """

    code = "persistence_error"
    status_code = 502

    def __init__(
        self,
        message: str,
        *,
        step: str | None = None,
        invoice_id: str | None = None,
        details: list[dict[str, Any]] | None = None,
    ):
        super().__init__(message, details=details)
        self.step = step
        self.invoice_id = invoice_id


class AuthRequired(InvoiceDeskError):
    code = "auth_required"
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class DataIntegrityError(InvoiceDeskError):
    code = "data_integrity_error"
    status_code = 500


class DraftNotFound(InvoiceDeskError):
    code = "not_found"
    status_code = 404

    def __init__(self, draft_id: str):
        super().__init__("Draft not found")
        self.draft_id = draft_id


class DraftLimitReached(InvoiceDeskError):
    code = "draft_limit_reached"
    status_code = 409

    def __init__(self, limit: int):
        super().__init__(
            f"You already have {limit} open drafts. Commit or delete one before starting another.",
            details=[{"field": "limit", "message": str(limit), "type": self.code}],
        )
        self.limit = limit
