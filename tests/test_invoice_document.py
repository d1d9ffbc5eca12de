from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

from app.services.data_store import InvoiceRecord
from app.services.invoice_document import build_invoice_document, document_lines
from app.services.pdf_export_service import LINES_PER_PAGE, build_invoice_pdf
from app.services.profile_service import DEFAULT_BUSINESS_PROFILE, resolve_business_profile


def _record(line_count: int = 1, **overrides) -> InvoiceRecord:
    values = {
        "invoice_number": "INV-2025-0004",
        "date": datetime(2025, 3, 7, 22, 15),
        "status": "paid",
        "buyer_name": "Bilal Stores",
        "buyer_address": "12 Mall Road (Gulberg)",
        "buyer_phone": "+92 321 5550000",
        "buyer_email": None,
        "buyer_gstin": "GST-777",
        "subtotal": Decimal("49.975"),
        "discount": Decimal("0"),
        "tax_percent": Decimal("0"),
        "tax": Decimal("0"),
        "total": Decimal("49.975"),
        "notes": None,
    }
    values.update(overrides)
    items = [
        SimpleNamespace(
            name=f"Ghee {index}",
            quantity=Decimal("2.500"),
            unit="kg",
            price_per_unit=Decimal("19.99"),
            total=Decimal("49.975"),
        )
        for index in range(line_count)
    ]
    return InvoiceRecord(invoice=SimpleNamespace(**values), items=items)


def test_resolve_business_profile_fills_placeholders():
    resolved = resolve_business_profile(None, user_email="owner@example.com")
    assert resolved["name"] == DEFAULT_BUSINESS_PROFILE["name"]
    assert resolved["email"] == "owner@example.com"

    stored = SimpleNamespace(
        business_name="Khan Traders",
        business_address=None,
        business_phone="",
        business_email=None,
        logo_url=None,
        gstin="GST-1",
    )
    resolved = resolve_business_profile(stored, user_email=None)
    assert resolved["name"] == "Khan Traders"
    assert resolved["phone"] == DEFAULT_BUSINESS_PROFILE["phone"]
    assert resolved["email"] == DEFAULT_BUSINESS_PROFILE["email"]
    assert resolved["gstin"] == "GST-1"


def test_document_formats_every_display_value():
    profile = resolve_business_profile(None, user_email="owner@example.com")

    document = build_invoice_document(_record(), profile)

    assert document.date == "Mar 07, 2025"
    assert document.status == "Paid"
    assert document.lines[0].quantity == "2.5"
    assert document.lines[0].unit_price == "PKR 19.99"
    assert document.lines[0].total == "PKR 49.98"
    assert document.subtotal == "PKR 49.98"
    assert document.discount is None
    assert document.tax is None
    assert document.file_name == "INV-2025-0004.pdf"

    lines = document_lines(document)
    assert "GSTIN: GST-777" in lines
    assert "1. Ghee 0 - 2.5 kg x PKR 19.99 = PKR 49.98" in lines
    assert lines[-1] == "Total: PKR 49.98"


def test_pdf_escapes_parentheses_and_paginates():
    profile = resolve_business_profile(None, user_email=None)
    document = build_invoice_document(_record(line_count=LINES_PER_PAGE + 10), profile)

    pdf = build_invoice_pdf(document)

    assert pdf.startswith(b"%PDF-1.4")
    assert b"12 Mall Road \\(Gulberg\\)" in pdf
    assert b"/Count 2" in pdf
    assert b"(Page 2 of 2) Tj" in pdf


def test_single_page_pdf_has_no_page_footer():
    profile = resolve_business_profile(None, user_email=None)

    pdf = build_invoice_pdf(build_invoice_document(_record(), profile))

    assert b"/Count 1" in pdf
    assert b"Page 1 of" not in pdf
