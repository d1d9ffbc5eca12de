from app.core.config import settings
from app.core.money import ZERO
from app.services.app_state import AppState
from app.services.data_store import as_utc
from app.services.inventory_service import low_stock_items, stock_value

RECENT_INVOICE_LIMIT = 5


def get_summary(state: AppState, *, low_stock_threshold: int | None = None) -> dict:
    if not state.loaded:
        state.refresh()

    threshold = (
        low_stock_threshold
        if low_stock_threshold is not None
        else settings.low_stock_default_threshold
    )
    recent = sorted(state.invoices, key=lambda record: as_utc(record.invoice.date), reverse=True)
    return {
        "total_products": len(state.inventory),
        "inventory_value": stock_value(state.inventory),
        "invoice_count": len(state.invoices),
        "total_invoiced": sum((record.invoice.total for record in state.invoices), ZERO),
        "low_stock_threshold": threshold,
        "low_stock_items": low_stock_items(state.inventory, threshold),
        "recent_invoices": recent[:RECENT_INVOICE_LIMIT],
    }
