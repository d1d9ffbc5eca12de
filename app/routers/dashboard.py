from fastapi import APIRouter, Depends, Query

from app.core.api_docs import error_responses
from app.core.money import to_money
from app.core.security_current import get_app_state
from app.routers.inventory import inventory_item_out
from app.schemas.dashboard import DashboardSummaryOut, RecentInvoiceOut
from app.services.app_state import AppState
from app.services.dashboard_service import get_summary
from app.services.data_store import as_utc

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get(
    "/summary",
    response_model=DashboardSummaryOut,
    summary="Get KPI summary",
    responses={
        200: {
            "description": "Dashboard summary",
            "content": {
                "application/json": {
                    "example": {
                        "totalProducts": 12,
                        "inventoryValue": 48250.0,
                        "invoiceCount": 3,
                        "totalInvoiced": 15400.0,
                        "lowStockThreshold": 5,
                        "lowStockItems": [],
                        "recentInvoices": [],
                    }
                }
            },
        },
        **error_responses(401, 422, 500, 502),
    },
)
def dashboard_summary(
    low_stock_threshold: int | None = Query(default=None, ge=0),
    state: AppState = Depends(get_app_state),
):
    summary = get_summary(state, low_stock_threshold=low_stock_threshold)
    return DashboardSummaryOut(
        total_products=summary["total_products"],
        inventory_value=float(to_money(summary["inventory_value"])),
        invoice_count=summary["invoice_count"],
        total_invoiced=float(to_money(summary["total_invoiced"])),
        low_stock_threshold=summary["low_stock_threshold"],
        low_stock_items=[inventory_item_out(item) for item in summary["low_stock_items"]],
        recent_invoices=[
            RecentInvoiceOut(
                id=record.invoice.id,
                invoice_number=record.invoice.invoice_number,
                date=as_utc(record.invoice.date),
                buyer_name=record.invoice.buyer_name,
                status=record.invoice.status,
                total=float(to_money(record.invoice.total)),
            )
            for record in summary["recent_invoices"]
        ],
    )
