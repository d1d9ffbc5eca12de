from typing import Any

from app.core.field_mapping import BUSINESS_PROFILE_FIELDS
from app.models.business import BusinessProfile

DEFAULT_BUSINESS_PROFILE: dict[str, Any] = {
    "name": "Your Business Name",
    "address": "123 Business Street, City, State 12345",
    "phone": "+92 300 1234567",
    "email": "contact@yourbusiness.com",
    "logo": None,
    "gstin": None,
}


def resolve_business_profile(profile: BusinessProfile | None, *, user_email: str | None) -> dict[str, Any]:
    """Stored profile fields with placeholders for anything never filled in, keyed by API name."""
    stored = BUSINESS_PROFILE_FIELDS.from_row(profile) if profile is not None else {}
    resolved: dict[str, Any] = {}
    for name, default in DEFAULT_BUSINESS_PROFILE.items():
        value = stored.get(name)
        if name == "email":
            resolved[name] = value or user_email or default
        else:
            resolved[name] = value or default
    return resolved
