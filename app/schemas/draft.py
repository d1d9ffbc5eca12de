from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import ConfigDict, Field, field_validator, model_validator

from app.schemas.common import CamelModel


class BuyerIn(CamelModel):
    name: str = Field(default="", max_length=255)
    address: str = Field(default="", max_length=500)
    phone: str = Field(default="", max_length=40)
    email: Optional[str] = Field(default=None, max_length=255)
    gstin: Optional[str] = Field(default=None, max_length=30)

    @field_validator("name", "address", "phone")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        # Blank values are allowed while drafting and rejected at commit.
        return value.strip()

    @field_validator("email", "gstin")
    @classmethod
    def _normalize_optional_text(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Bilal Stores",
                "address": "12 Mall Road, Lahore",
                "phone": "+92 321 5550000",
                "email": "orders@bilalstores.pk",
                "gstin": None,
            }
        }
    )


class DraftCreateIn(CamelModel):
    buyer: Optional[BuyerIn] = None
    notes: Optional[str] = Field(default=None, max_length=1000)
    discount: Decimal = Field(default=Decimal("0"), decimal_places=2)
    tax_percent: Decimal = Field(default=Decimal("0"), decimal_places=2)


class DraftUpdateIn(CamelModel):
    notes: Optional[str] = Field(default=None, max_length=1000)
    discount: Optional[Decimal] = Field(default=None, decimal_places=2)
    tax_percent: Optional[Decimal] = Field(default=None, decimal_places=2)

    @field_validator("discount", "tax_percent")
    @classmethod
    def _reject_null(cls, value: Optional[Decimal]) -> Decimal:
        if value is None:
            raise ValueError("value cannot be null")
        return value

    @model_validator(mode="after")
    def validate_any_field_present(self) -> "DraftUpdateIn":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        return self

    model_config = ConfigDict(
        json_schema_extra={"example": {"discount": 100.0, "taxPercent": 17.0, "notes": "Net 15"}}
    )


class DraftItemIn(CamelModel):
    inventory_item_id: str
    quantity: Decimal = Field(decimal_places=3)

    model_config = ConfigDict(
        json_schema_extra={"example": {"inventoryItemId": "item-id-here", "quantity": 4}}
    )


class BuyerOut(CamelModel):
    name: str
    address: str
    phone: str
    email: Optional[str] = None
    gstin: Optional[str] = None


class StagedLineOut(CamelModel):
    index: int
    inventory_item_id: str
    name: str
    unit: str
    price_per_unit: float
    quantity: float
    total: float


class DraftTotalsOut(CamelModel):
    subtotal: float
    discount: float
    tax: float
    total: float


class DraftOut(CamelModel):
    id: str
    buyer: BuyerOut
    items: list[StagedLineOut]
    notes: Optional[str] = None
    discount: float
    tax_percent: float
    totals: DraftTotalsOut
    created_at: datetime


class DraftListOut(CamelModel):
    items: list[DraftOut]


class StockAvailabilityOut(CamelModel):
    inventory_item_id: str
    name: str
    unit: str
    committed: float
    staged: float
    available: float


class AvailabilityListOut(CamelModel):
    draft_id: str
    items: list[StockAvailabilityOut]
