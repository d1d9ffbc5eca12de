"""Display-ready view of a stored invoice.

Everything a renderer needs is formatted here: money as two-decimal strings
with the currency label, quantities without trailing zeros, dates spelled out.
Renderers (the PDF writer, a browser print view) only lay the strings out.
"""
from dataclasses import dataclass
from typing import Any

from app.core.config import settings
from app.core.money import ZERO, format_money, format_quantity
from app.services.data_store import InvoiceRecord, as_utc

STATUS_LABELS = {"draft": "Draft", "sent": "Sent", "paid": "Paid"}


@dataclass(frozen=True)
class DocumentParty:
    name: str
    address: str
    phone: str
    email: str | None = None
    gstin: str | None = None
    logo: str | None = None


@dataclass(frozen=True)
class DocumentLine:
    position: int
    name: str
    quantity: str
    unit: str
    unit_price: str
    total: str


@dataclass(frozen=True)
class InvoiceDocument:
    invoice_number: str
    date: str
    status: str
    seller: DocumentParty
    buyer: DocumentParty
    lines: list[DocumentLine]
    subtotal: str
    discount: str | None
    tax: str | None
    total: str
    notes: str | None
    file_name: str


def _amount(value) -> str:
    return f"{settings.currency_label} {format_money(value)}"


def build_invoice_document(record: InvoiceRecord, business_profile: dict[str, Any]) -> InvoiceDocument:
    invoice = record.invoice
    return InvoiceDocument(
        invoice_number=invoice.invoice_number,
        date=as_utc(invoice.date).strftime("%b %d, %Y"),
        status=STATUS_LABELS[invoice.status],
        seller=DocumentParty(
            name=business_profile["name"],
            address=business_profile["address"],
            phone=business_profile["phone"],
            email=business_profile.get("email"),
            gstin=business_profile.get("gstin"),
            logo=business_profile.get("logo"),
        ),
        buyer=DocumentParty(
            name=invoice.buyer_name,
            address=invoice.buyer_address,
            phone=invoice.buyer_phone,
            email=invoice.buyer_email,
            gstin=invoice.buyer_gstin,
        ),
        lines=[
            DocumentLine(
                position=index,
                name=item.name,
                quantity=format_quantity(item.quantity),
                unit=item.unit,
                unit_price=_amount(item.price_per_unit),
                total=_amount(item.total),
            )
            for index, item in enumerate(record.items, start=1)
        ],
        subtotal=_amount(invoice.subtotal),
        # Zero adjustments are left off the printed invoice.
        discount=f"-{_amount(invoice.discount)}" if invoice.discount > ZERO else None,
        tax=_amount(invoice.tax) if invoice.tax > ZERO else None,
        total=_amount(invoice.total),
        notes=invoice.notes,
        file_name=f"{invoice.invoice_number}.pdf",
    )


def document_lines(document: InvoiceDocument) -> list[str]:
    """Plain text layout of the document, one printed line per entry."""
    seller, buyer = document.seller, document.buyer
    lines = [
        seller.name,
        seller.address,
        f"Phone: {seller.phone}",
    ]
    if seller.email:
        lines.append(f"Email: {seller.email}")
    if seller.gstin:
        lines.append(f"GSTIN: {seller.gstin}")
    lines += [
        "",
        f"Invoice {document.invoice_number}",
        f"Date: {document.date}",
        f"Status: {document.status}",
        "",
        "Bill To:",
        buyer.name,
        buyer.address,
        f"Phone: {buyer.phone}",
    ]
    if buyer.email:
        lines.append(f"Email: {buyer.email}")
    if buyer.gstin:
        lines.append(f"GSTIN: {buyer.gstin}")
    lines.append("")
    for line in document.lines:
        lines.append(
            f"{line.position}. {line.name} - {line.quantity} {line.unit} x {line.unit_price} = {line.total}"
        )
    lines += ["", f"Subtotal: {document.subtotal}"]
    if document.discount:
        lines.append(f"Discount: {document.discount}")
    if document.tax:
        lines.append(f"Tax: {document.tax}")
    lines.append(f"Total: {document.total}")
    if document.notes:
        lines += ["", f"Notes: {document.notes}"]
    return lines
