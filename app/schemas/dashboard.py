from datetime import datetime

from app.schemas.common import CamelModel
from app.schemas.inventory import InventoryItemOut
from app.schemas.invoice import InvoiceStatus


class RecentInvoiceOut(CamelModel):
    id: str
    invoice_number: str
    date: datetime
    buyer_name: str
    status: InvoiceStatus
    total: float


class DashboardSummaryOut(CamelModel):
    total_products: int
    inventory_value: float
    invoice_count: int
    total_invoiced: float
    low_stock_threshold: int
    low_stock_items: list[InventoryItemOut]
    recent_invoices: list[RecentInvoiceOut]
