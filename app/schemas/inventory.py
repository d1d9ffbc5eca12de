from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import ConfigDict, Field, ValidationInfo, field_validator, model_validator

from app.schemas.common import CamelModel, PaginationMeta


def _required_text(value: str, field_name: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValueError(f"{field_name} is required")
    return cleaned


class InventoryItemCreate(CamelModel):
    name: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, max_length=500)
    quantity: Decimal = Field(ge=0, decimal_places=3)
    price_per_unit: Decimal = Field(ge=0, decimal_places=2)
    unit: str = Field(default="pcs", max_length=20)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _required_text(value, "name")

    @field_validator("unit")
    @classmethod
    def validate_unit(cls, value: str) -> str:
        return _required_text(value, "unit")

    @field_validator("description")
    @classmethod
    def normalize_description(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Basmati Rice",
                "description": "5kg bag",
                "quantity": 40,
                "pricePerUnit": 1250.0,
                "unit": "bag",
            }
        }
    )


class InventoryItemUpdate(CamelModel):
    """Only the fields present in the request body are written."""

    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, max_length=500)
    quantity: Optional[Decimal] = Field(default=None, ge=0, decimal_places=3)
    price_per_unit: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    unit: Optional[str] = Field(default=None, max_length=20)

    @field_validator("name", "unit")
    @classmethod
    def validate_required_text(cls, value: Optional[str], info: ValidationInfo) -> str:
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return _required_text(value, info.field_name)

    @field_validator("quantity", "price_per_unit")
    @classmethod
    def validate_required_number(cls, value: Optional[Decimal], info: ValidationInfo) -> Decimal:
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value

    @field_validator("description")
    @classmethod
    def normalize_description(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    @model_validator(mode="after")
    def validate_any_field_present(self) -> "InventoryItemUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        return self

    model_config = ConfigDict(
        json_schema_extra={"example": {"quantity": 35, "pricePerUnit": 1300.0}}
    )


class InventoryItemOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    quantity: float
    price_per_unit: float
    unit: str
    created_at: datetime
    updated_at: datetime


class InventoryListOut(CamelModel):
    pagination: PaginationMeta
    q: Optional[str] = None
    items: list[InventoryItemOut]


class LowStockListOut(CamelModel):
    threshold: int
    items: list[InventoryItemOut]
