from dataclasses import asdict
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from app.core.api_docs import error_responses
from app.core.field_mapping import INVOICE_FIELDS, INVOICE_ITEM_FIELDS
from app.core.money import to_money
from app.core.security_current import get_current_user, get_data_store
from app.models.invoice import InvoiceItem
from app.models.user import User
from app.schemas.common import pagination_meta
from app.schemas.invoice import (
    InvoiceDocumentOut,
    InvoiceListOut,
    InvoiceOut,
    InvoiceStatusIn,
    NextInvoiceNumberOut,
)
from app.services.data_store import DataStore, InvoiceRecord, as_utc
from app.services.invoice_document import build_invoice_document
from app.services.invoice_numbering import next_invoice_number
from app.services.pdf_export_service import build_invoice_pdf
from app.services.profile_service import resolve_business_profile

router = APIRouter(prefix="/invoices", tags=["invoices"])

MONEY_FIELDS = ("subtotal", "discount", "tax", "total")


def _invoice_item_out(item: InvoiceItem) -> dict:
    values = INVOICE_ITEM_FIELDS.from_row(item)
    values["quantity"] = float(item.quantity)
    values["pricePerUnit"] = float(to_money(item.price_per_unit))
    values["total"] = float(to_money(item.total))
    return values


def invoice_out(record: InvoiceRecord) -> InvoiceOut:
    values = INVOICE_FIELDS.from_row(record.invoice)
    for name in MONEY_FIELDS:
        values[name] = float(to_money(values[name]))
    values["taxPercent"] = float(values["taxPercent"])
    values["date"] = as_utc(values["date"])
    values["items"] = [_invoice_item_out(item) for item in record.items]
    return InvoiceOut.model_validate(values)


def _record_or_404(store: DataStore, invoice_id: str) -> InvoiceRecord:
    record = store.load_invoice(invoice_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return record


@router.get(
    "",
    response_model=InvoiceListOut,
    summary="List invoices",
    description="Newest first.",
    responses=error_responses(401, 422, 500, 502),
)
def list_invoices(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    store: DataStore = Depends(get_data_store),
):
    total = store.count_invoices()
    rows = store.list_invoices(limit=limit, offset=offset)
    items_by_invoice = store.list_invoice_items([row.id for row in rows])
    items = [
        invoice_out(InvoiceRecord(invoice=row, items=items_by_invoice.get(row.id, [])))
        for row in rows
    ]
    return InvoiceListOut(
        pagination=pagination_meta(total=total, limit=limit, offset=offset, count=len(items)),
        items=items,
    )


@router.get(
    "/next-number",
    response_model=NextInvoiceNumberOut,
    summary="Preview the next invoice number",
    description="The number is only reserved when a draft is committed.",
    responses=error_responses(401, 500, 502),
)
def preview_next_invoice_number(store: DataStore = Depends(get_data_store)):
    year = datetime.now(timezone.utc).year
    return NextInvoiceNumberOut(invoice_number=next_invoice_number(store.count_invoices(), year))


@router.get(
    "/{invoice_id}",
    response_model=InvoiceOut,
    summary="Get invoice",
    responses=error_responses(401, 404, 500, 502),
)
def get_invoice(invoice_id: str, store: DataStore = Depends(get_data_store)):
    return invoice_out(_record_or_404(store, invoice_id))


@router.patch(
    "/{invoice_id}/status",
    response_model=InvoiceOut,
    summary="Change invoice status",
    responses=error_responses(401, 404, 422, 500, 502),
)
def update_invoice_status(
    invoice_id: str,
    payload: InvoiceStatusIn,
    store: DataStore = Depends(get_data_store),
):
    record = _record_or_404(store, invoice_id)
    invoice = store.update_invoice_status(record.invoice, payload.status)
    return invoice_out(InvoiceRecord(invoice=invoice, items=record.items))


@router.get(
    "/{invoice_id}/document",
    response_model=InvoiceDocumentOut,
    summary="Printable invoice content",
    description="Every value is pre-formatted for display.",
    responses=error_responses(401, 404, 500, 502),
)
def get_invoice_document(
    invoice_id: str,
    store: DataStore = Depends(get_data_store),
    user: User = Depends(get_current_user),
):
    record = _record_or_404(store, invoice_id)
    profile = resolve_business_profile(store.get_business_profile(), user_email=user.email)
    return InvoiceDocumentOut.model_validate(asdict(build_invoice_document(record, profile)))


@router.get(
    "/{invoice_id}/pdf",
    summary="Download invoice as PDF",
    responses={
        200: {"description": "PDF file", "content": {"application/pdf": {}}},
        **error_responses(401, 404, 500, 502),
    },
)
def download_invoice_pdf(
    invoice_id: str,
    store: DataStore = Depends(get_data_store),
    user: User = Depends(get_current_user),
):
    record = _record_or_404(store, invoice_id)
    profile = resolve_business_profile(store.get_business_profile(), user_email=user.email)
    document = build_invoice_document(record, profile)
    return Response(
        content=build_invoice_pdf(document),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{document.file_name}"'},
    )
