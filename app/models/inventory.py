from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.core.id_utils import new_record_id
from app.db.base import Base, exact_numeric


class InventoryItem(Base):
    """
    Current stock of one product. Quantity may be fractional (kg, m) and is only
    ever decreased by invoice commits, never below zero.
    """
    __tablename__ = "inventory_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_record_id)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), index=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    quantity: Mapped[Decimal] = mapped_column(exact_numeric(), nullable=False, default=Decimal("0"))
    price_per_unit: Mapped[Decimal] = mapped_column(exact_numeric(), nullable=False)
    unit: Mapped[str] = mapped_column(String(20), nullable=False, default="pcs", server_default="pcs")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (
        Index("ix_inventory_items_user_created_at", "user_id", "created_at"),
    )
