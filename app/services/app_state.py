from dataclasses import dataclass, field

from app.models.business import BusinessProfile
from app.models.inventory import InventoryItem
from app.services.data_store import DataStore, InvoiceRecord


@dataclass
class AppState:
    """
    One user's inventory, invoices and business profile as last read from the store.

    Built per request and handed to whatever needs it; call ``refresh()`` after
    writes instead of patching the cached lists by hand.
    """

    store: DataStore
    inventory: list[InventoryItem] = field(default_factory=list)
    invoices: list[InvoiceRecord] = field(default_factory=list)
    business_profile: BusinessProfile | None = None
    loaded: bool = False

    def refresh(self, *, include_invoices: bool = True) -> "AppState":
        self.inventory = self.store.list_inventory_items()
        if include_invoices:
            headers = self.store.list_invoices()
            items_by_invoice = self.store.list_invoice_items([row.id for row in headers])
            self.invoices = [
                InvoiceRecord(invoice=row, items=items_by_invoice.get(row.id, []))
                for row in headers
            ]
        self.business_profile = self.store.get_business_profile()
        self.loaded = True
        return self

    def inventory_by_id(self) -> dict[str, InventoryItem]:
        return {item.id: item for item in self.inventory}
