from typing import Optional

from pydantic import ConfigDict, Field, field_validator, model_validator

from app.schemas.common import CamelModel


class BusinessProfileOut(CamelModel):
    name: str
    address: str
    phone: str
    email: Optional[str] = None
    logo: Optional[str] = None
    gstin: Optional[str] = None


class BusinessProfileUpdate(CamelModel):
    """Blank or null values clear a field, which then falls back to its placeholder."""

    name: Optional[str] = Field(default=None, max_length=255)
    address: Optional[str] = Field(default=None, max_length=500)
    phone: Optional[str] = Field(default=None, max_length=40)
    email: Optional[str] = Field(default=None, max_length=255)
    logo: Optional[str] = Field(default=None, max_length=500)
    gstin: Optional[str] = Field(default=None, max_length=30)

    @field_validator("name", "address", "phone", "email", "logo", "gstin")
    @classmethod
    def _normalize_optional_text(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    @model_validator(mode="after")
    def validate_any_field_present(self) -> "BusinessProfileUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        return self

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Khan Traders",
                "address": "45 Shahrah-e-Faisal, Karachi",
                "phone": "+92 300 7654321",
                "gstin": "GST-12345",
            }
        }
    )
