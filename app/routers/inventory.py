from fastapi import APIRouter, Depends, Query, Response

from app.core.api_docs import error_responses
from app.core.config import settings
from app.core.field_mapping import INVENTORY_ITEM_FIELDS
from app.core.money import to_money
from app.core.security_current import get_data_store
from app.models.inventory import InventoryItem
from app.schemas.common import pagination_meta
from app.schemas.inventory import (
    InventoryItemCreate,
    InventoryItemOut,
    InventoryItemUpdate,
    InventoryListOut,
    LowStockListOut,
)
from app.services.data_store import DataStore
from app.services.inventory_service import low_stock_items

router = APIRouter(prefix="/inventory", tags=["inventory"])


def inventory_item_out(item: InventoryItem) -> InventoryItemOut:
    values = INVENTORY_ITEM_FIELDS.from_row(item)
    values["quantity"] = float(item.quantity)
    values["pricePerUnit"] = float(to_money(item.price_per_unit))
    return InventoryItemOut.model_validate(values)


@router.get(
    "",
    response_model=InventoryListOut,
    summary="List inventory items",
    description="Newest first. `q` matches item names case-insensitively.",
    responses=error_responses(401, 422, 500, 502),
)
def list_inventory(
    q: str | None = Query(default=None, max_length=100),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    store: DataStore = Depends(get_data_store),
):
    rows = store.list_inventory_items(search=q)
    page = rows[offset : offset + limit]
    return InventoryListOut(
        pagination=pagination_meta(total=len(rows), limit=limit, offset=offset, count=len(page)),
        q=q,
        items=[inventory_item_out(row) for row in page],
    )


@router.post(
    "",
    response_model=InventoryItemOut,
    status_code=201,
    summary="Create inventory item",
    responses=error_responses(401, 422, 500, 502),
)
def create_inventory_item(
    payload: InventoryItemCreate,
    store: DataStore = Depends(get_data_store),
):
    values = INVENTORY_ITEM_FIELDS.to_store(payload.model_dump(by_alias=True))
    return inventory_item_out(store.insert_inventory_item(values))


@router.get(
    "/low-stock",
    response_model=LowStockListOut,
    summary="List low-stock items",
    description="Items whose quantity is at or below the threshold.",
    responses=error_responses(401, 422, 500, 502),
)
def list_low_stock(
    threshold: int = Query(default=settings.low_stock_default_threshold, ge=0),
    store: DataStore = Depends(get_data_store),
):
    items = low_stock_items(store.list_inventory_items(), threshold)
    return LowStockListOut(threshold=threshold, items=[inventory_item_out(item) for item in items])


@router.get(
    "/{item_id}",
    response_model=InventoryItemOut,
    summary="Get inventory item",
    responses=error_responses(401, 404, 500, 502),
)
def get_inventory_item(item_id: str, store: DataStore = Depends(get_data_store)):
    return inventory_item_out(store.require_inventory_item(item_id))


@router.patch(
    "/{item_id}",
    response_model=InventoryItemOut,
    summary="Update inventory item",
    description="Partial update: only fields present in the body are changed.",
    responses=error_responses(401, 404, 422, 500, 502),
)
def update_inventory_item(
    item_id: str,
    payload: InventoryItemUpdate,
    store: DataStore = Depends(get_data_store),
):
    values = INVENTORY_ITEM_FIELDS.to_store(payload.model_dump(by_alias=True, exclude_unset=True))
    return inventory_item_out(store.update_inventory_item(item_id, values))


@router.delete(
    "/{item_id}",
    status_code=204,
    summary="Delete inventory item",
    description="Existing invoices keep their copy of the item's name, unit and price.",
    responses=error_responses(401, 404, 500, 502),
)
def delete_inventory_item(item_id: str, store: DataStore = Depends(get_data_store)):
    store.delete_inventory_item(item_id)
    return Response(status_code=204)
