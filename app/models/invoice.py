from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.core.id_utils import new_record_id
from app.db.base import Base, exact_numeric

INVOICE_STATUSES = ("draft", "sent", "paid")


class Invoice(Base):
    __tablename__ = "invoices"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_record_id)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), index=True)
    invoice_number: Mapped[str] = mapped_column(String(40), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft", server_default="draft")

    # Buyer details are copied by value; they are never edited after creation.
    buyer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    buyer_address: Mapped[str] = mapped_column(String(500), nullable=False)
    buyer_phone: Mapped[str] = mapped_column(String(40), nullable=False)
    buyer_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    buyer_gstin: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)

    subtotal: Mapped[Decimal] = mapped_column(exact_numeric(), nullable=False)
    discount: Mapped[Decimal] = mapped_column(exact_numeric(), nullable=False, default=Decimal("0"))
    tax_percent: Mapped[Decimal] = mapped_column(exact_numeric(), nullable=False, default=Decimal("0"))
    tax: Mapped[Decimal] = mapped_column(exact_numeric(), nullable=False, default=Decimal("0"))
    total: Mapped[Decimal] = mapped_column(exact_numeric(), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (
        UniqueConstraint("user_id", "invoice_number", name="ux_invoices_user_invoice_number"),
        Index("ix_invoices_user_date", "user_id", "date"),
    )


class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_record_id)
    invoice_id: Mapped[str] = mapped_column(String(36), ForeignKey("invoices.id"), nullable=False, index=True)
    # No foreign key: inventory rows may be edited or deleted without touching history.
    inventory_item_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    unit: Mapped[str] = mapped_column(String(20), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(exact_numeric(), nullable=False)
    price_per_unit: Mapped[Decimal] = mapped_column(exact_numeric(), nullable=False)
    total: Mapped[Decimal] = mapped_column(exact_numeric(), nullable=False)

    __table_args__ = (
        Index("ix_invoice_items_invoice_position", "invoice_id", "position"),
    )
