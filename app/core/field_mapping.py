"""Name translation between API records (camelCase) and store columns (snake_case).

Each ``FieldMap`` lists every field of one entity explicitly. Translation is
total over those fields and raises on anything else, so a typo can never turn
into a silently dropped update.
"""
from collections.abc import Mapping
from typing import Any


class FieldMap:
    def __init__(self, entity: str, pairs: Mapping[str, str]):
        api_to_store = dict(pairs)
        store_to_api = {column: name for name, column in api_to_store.items()}
        if len(store_to_api) != len(api_to_store):
            raise ValueError(f"{entity}: field map must be one-to-one")
        self.entity = entity
        self._api_to_store = api_to_store
        self._store_to_api = store_to_api

    @property
    def api_fields(self) -> tuple[str, ...]:
        return tuple(self._api_to_store)

    @property
    def store_fields(self) -> tuple[str, ...]:
        return tuple(self._store_to_api)

    def to_store(self, values: Mapping[str, Any]) -> dict[str, Any]:
        unknown = sorted(set(values) - set(self._api_to_store))
        if unknown:
            raise KeyError(f"{self.entity}: unknown field(s) {', '.join(unknown)}")
        return {self._api_to_store[name]: value for name, value in values.items()}

    def from_store(self, values: Mapping[str, Any]) -> dict[str, Any]:
        unknown = sorted(set(values) - set(self._store_to_api))
        if unknown:
            raise KeyError(f"{self.entity}: unknown column(s) {', '.join(unknown)}")
        return {self._store_to_api[column]: value for column, value in values.items()}

    def from_row(self, row: object) -> dict[str, Any]:
        return {name: getattr(row, column) for name, column in self._api_to_store.items()}


INVENTORY_ITEM_FIELDS = FieldMap(
    "inventory_item",
    {
        "id": "id",
        "name": "name",
        "description": "description",
        "quantity": "quantity",
        "pricePerUnit": "price_per_unit",
        "unit": "unit",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    },
)

INVOICE_FIELDS = FieldMap(
    "invoice",
    {
        "id": "id",
        "invoiceNumber": "invoice_number",
        "date": "date",
        "status": "status",
        "buyerName": "buyer_name",
        "buyerAddress": "buyer_address",
        "buyerPhone": "buyer_phone",
        "buyerEmail": "buyer_email",
        "buyerGstin": "buyer_gstin",
        "subtotal": "subtotal",
        "discount": "discount",
        "taxPercent": "tax_percent",
        "tax": "tax",
        "total": "total",
        "notes": "notes",
    },
)

INVOICE_ITEM_FIELDS = FieldMap(
    "invoice_item",
    {
        "inventoryItemId": "inventory_item_id",
        "name": "name",
        "quantity": "quantity",
        "pricePerUnit": "price_per_unit",
        "unit": "unit",
        "total": "total",
    },
)

BUSINESS_PROFILE_FIELDS = FieldMap(
    "business_profile",
    {
        "name": "business_name",
        "address": "business_address",
        "phone": "business_phone",
        "email": "business_email",
        "logo": "logo_url",
        "gstin": "gstin",
    },
)
