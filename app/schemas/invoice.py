from datetime import datetime
from typing import Literal, Optional

from pydantic import ConfigDict

from app.schemas.common import CamelModel, PaginationMeta

InvoiceStatus = Literal["draft", "sent", "paid"]


class InvoiceItemOut(CamelModel):
    inventory_item_id: Optional[str] = None
    name: str
    quantity: float
    price_per_unit: float
    unit: str
    total: float


class InvoiceOut(CamelModel):
    id: str
    invoice_number: str
    date: datetime
    status: InvoiceStatus
    buyer_name: str
    buyer_address: str
    buyer_phone: str
    buyer_email: Optional[str] = None
    buyer_gstin: Optional[str] = None
    items: list[InvoiceItemOut]
    subtotal: float
    discount: float
    tax_percent: float
    tax: float
    total: float
    notes: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "inv-id-here",
                "invoiceNumber": "INV-2026-0001",
                "date": "2026-10-19T09:30:00Z",
                "status": "draft",
                "buyerName": "Bilal Stores",
                "buyerAddress": "12 Mall Road, Lahore",
                "buyerPhone": "+92 321 5550000",
                "buyerEmail": None,
                "buyerGstin": None,
                "items": [
                    {
                        "inventoryItemId": "item-id-here",
                        "name": "Basmati Rice",
                        "quantity": 4,
                        "pricePerUnit": 1250.0,
                        "unit": "bag",
                        "total": 5000.0,
                    }
                ],
                "subtotal": 5000.0,
                "discount": 0.0,
                "taxPercent": 0.0,
                "tax": 0.0,
                "total": 5000.0,
                "notes": None,
            }
        }
    )


class InvoiceListOut(CamelModel):
    pagination: PaginationMeta
    items: list[InvoiceOut]


class InvoiceStatusIn(CamelModel):
    status: InvoiceStatus

    model_config = ConfigDict(json_schema_extra={"example": {"status": "sent"}})


class NextInvoiceNumberOut(CamelModel):
    invoice_number: str


class DocumentPartyOut(CamelModel):
    name: str
    address: str
    phone: str
    email: Optional[str] = None
    gstin: Optional[str] = None
    logo: Optional[str] = None


class DocumentLineOut(CamelModel):
    position: int
    name: str
    quantity: str
    unit: str
    unit_price: str
    total: str


class InvoiceDocumentOut(CamelModel):
    invoice_number: str
    date: str
    status: str
    seller: DocumentPartyOut
    buyer: DocumentPartyOut
    lines: list[DocumentLineOut]
    subtotal: str
    discount: Optional[str] = None
    tax: Optional[str] = None
    total: str
    notes: Optional[str] = None
    file_name: str
