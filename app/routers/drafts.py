from dataclasses import replace

from fastapi import APIRouter, Depends, Response

from app.core.api_docs import error_responses
from app.core.errors import PersistenceError
from app.core.money import to_money
from app.core.security_current import get_app_state, get_data_store
from app.schemas.draft import (
    AvailabilityListOut,
    BuyerIn,
    BuyerOut,
    DraftCreateIn,
    DraftItemIn,
    DraftListOut,
    DraftOut,
    DraftTotalsOut,
    DraftUpdateIn,
    StagedLineOut,
    StockAvailabilityOut,
)
from app.schemas.invoice import InvoiceOut
from app.routers.invoices import invoice_out
from app.services.app_state import AppState
from app.services.data_store import DataStore
from app.services.draft_registry import draft_registry
from app.services.invoice_commit import InvoiceCommitCoordinator
from app.services.invoice_draft import BuyerDetails, DraftInvoice
from app.services.stock_ledger import availability

router = APIRouter(prefix="/drafts", tags=["drafts"])


def _buyer_details(payload: BuyerIn) -> BuyerDetails:
    return BuyerDetails(
        name=payload.name,
        address=payload.address,
        phone=payload.phone,
        email=payload.email,
        gstin=payload.gstin,
    )


def _draft_out(draft: DraftInvoice) -> DraftOut:
    totals = draft.compute_totals()
    buyer = draft.buyer
    return DraftOut(
        id=draft.id,
        buyer=BuyerOut(
            name=buyer.name,
            address=buyer.address,
            phone=buyer.phone,
            email=buyer.email,
            gstin=buyer.gstin,
        ),
        items=[
            StagedLineOut(
                index=index,
                inventory_item_id=line.inventory_item_id,
                name=line.name,
                unit=line.unit,
                price_per_unit=float(to_money(line.price_per_unit)),
                quantity=float(line.quantity),
                total=float(to_money(line.total)),
            )
            for index, line in enumerate(draft.items)
        ],
        notes=draft.notes,
        discount=float(to_money(draft.discount)),
        tax_percent=float(draft.tax_percent),
        totals=DraftTotalsOut(
            subtotal=float(to_money(totals.subtotal)),
            discount=float(to_money(totals.discount_amount)),
            tax=float(to_money(totals.tax_amount)),
            total=float(to_money(totals.total)),
        ),
        created_at=draft.created_at,
    )


@router.post(
    "",
    response_model=DraftOut,
    status_code=201,
    summary="Start a draft invoice",
    description=(
        "Drafts are held in server memory until committed or deleted. Drafts left "
        "untouched for a day are dropped; each user may keep a limited number open."
    ),
    responses=error_responses(400, 401, 409, 422, 500),
)
def create_draft(payload: DraftCreateIn, store: DataStore = Depends(get_data_store)):
    draft = DraftInvoice()
    if payload.buyer is not None:
        draft.set_buyer(_buyer_details(payload.buyer))
    draft.set_notes(payload.notes)
    draft.set_discount(payload.discount)
    draft.set_tax_percent(payload.tax_percent)
    return _draft_out(draft_registry.create(store.user_id, draft))


@router.get(
    "",
    response_model=DraftListOut,
    summary="List open drafts",
    responses=error_responses(401, 500),
)
def list_drafts(store: DataStore = Depends(get_data_store)):
    return DraftListOut(items=[_draft_out(draft) for draft in draft_registry.list_for_user(store.user_id)])


@router.get(
    "/{draft_id}",
    response_model=DraftOut,
    summary="Get draft",
    responses=error_responses(401, 404, 500),
)
def get_draft(draft_id: str, store: DataStore = Depends(get_data_store)):
    with draft_registry.checkout(store.user_id, draft_id) as draft:
        return _draft_out(draft)


@router.delete(
    "/{draft_id}",
    status_code=204,
    summary="Discard draft",
    responses=error_responses(401, 404, 500),
)
def delete_draft(draft_id: str, store: DataStore = Depends(get_data_store)):
    with draft_registry.checkout(store.user_id, draft_id):
        draft_registry.discard(store.user_id, draft_id)
    return Response(status_code=204)


@router.put(
    "/{draft_id}/buyer",
    response_model=DraftOut,
    summary="Replace buyer details",
    responses=error_responses(401, 404, 422, 500),
)
def set_draft_buyer(draft_id: str, payload: BuyerIn, store: DataStore = Depends(get_data_store)):
    with draft_registry.checkout(store.user_id, draft_id) as draft:
        draft.set_buyer(_buyer_details(payload))
        return _draft_out(draft)


@router.patch(
    "/{draft_id}",
    response_model=DraftOut,
    summary="Update notes, discount or tax percent",
    description="Either every supplied field is applied or none is.",
    responses=error_responses(400, 401, 404, 422, 500),
)
def update_draft(
    draft_id: str,
    payload: DraftUpdateIn,
    store: DataStore = Depends(get_data_store),
):
    fields = payload.model_fields_set
    with draft_registry.checkout(store.user_id, draft_id) as draft:
        candidate = replace(draft)
        if "notes" in fields:
            candidate.set_notes(payload.notes)
        if "discount" in fields:
            candidate.set_discount(payload.discount)
        if "tax_percent" in fields:
            candidate.set_tax_percent(payload.tax_percent)

        draft.notes = candidate.notes
        draft.discount = candidate.discount
        draft.tax_percent = candidate.tax_percent
        return _draft_out(draft)


@router.post(
    "/{draft_id}/items",
    response_model=DraftOut,
    summary="Add an inventory item to the draft",
    description=(
        "Stages a quantity of an inventory item. Adding an item that is already staged "
        "increases that line. Stock is checked against the current inventory minus what "
        "this draft already holds; nothing is reserved in the store until commit."
    ),
    responses=error_responses(400, 401, 404, 409, 422, 500, 502),
)
def add_draft_item(
    draft_id: str,
    payload: DraftItemIn,
    state: AppState = Depends(get_app_state),
):
    user_id = state.store.user_id
    with draft_registry.checkout(user_id, draft_id) as draft:
        state.refresh(include_invoices=False)
        draft.add_or_merge_item(
            payload.inventory_item_id,
            payload.quantity,
            inventory=state.inventory_by_id(),
        )
        return _draft_out(draft)


@router.delete(
    "/{draft_id}/items/{index}",
    response_model=DraftOut,
    summary="Remove a staged line",
    responses=error_responses(400, 401, 404, 422, 500),
)
def remove_draft_item(draft_id: str, index: int, store: DataStore = Depends(get_data_store)):
    with draft_registry.checkout(store.user_id, draft_id) as draft:
        draft.remove_item(index)
        return _draft_out(draft)


@router.get(
    "/{draft_id}/availability",
    response_model=AvailabilityListOut,
    summary="Stock still available to this draft",
    responses=error_responses(401, 404, 500, 502),
)
def get_draft_availability(draft_id: str, state: AppState = Depends(get_app_state)):
    with draft_registry.checkout(state.store.user_id, draft_id) as draft:
        state.refresh(include_invoices=False)
        rows = availability(state.inventory, draft.items)
        return AvailabilityListOut(
            draft_id=draft.id,
            items=[
                StockAvailabilityOut(
                    inventory_item_id=row.inventory_item_id,
                    name=row.name,
                    unit=row.unit,
                    committed=float(row.committed),
                    staged=float(row.staged),
                    available=float(row.available),
                )
                for row in rows
            ],
        )


@router.post(
    "/{draft_id}/commit",
    response_model=InvoiceOut,
    status_code=201,
    summary="Commit draft as an invoice",
    description=(
        "Validates the draft, assigns the next invoice number, stores the invoice and its "
        "line items and takes the quantities out of stock. A 502 response names the failed "
        "step; when it carries an `invoiceId` the invoice exists and the draft is closed."
    ),
    responses=error_responses(400, 401, 404, 422, 500, 502),
)
def commit_draft(draft_id: str, store: DataStore = Depends(get_data_store)):
    with draft_registry.checkout(store.user_id, draft_id) as draft:
        try:
            record = InvoiceCommitCoordinator(store).commit(draft)
        except PersistenceError as exc:
            if exc.invoice_id:
                # The invoice exists; retrying this draft would create a second one.
                draft_registry.discard(store.user_id, draft_id)
            raise
        draft_registry.discard(store.user_id, draft_id)
    return invoice_out(record)
