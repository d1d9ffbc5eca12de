from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.core.errors import EmptyItemList, ItemNotFound, MissingBuyerField, PersistenceError
from app.models.user import User
from app.services.data_store import DataStore
from app.services.invoice_commit import InvoiceCommitCoordinator
from app.services.invoice_draft import BuyerDetails, DraftInvoice

FIXED_NOW = datetime(2025, 3, 14, 10, 30, tzinfo=timezone.utc)
BUYER = BuyerDetails(name=" Bilal Stores ", address="12 Mall Road", phone="+92 321 5550000")


class FakeStore:
    """Records every call; individual steps can be made to fail."""

    def __init__(self, inventory, *, invoice_count=0, fail_on=()):
        self.user_id = "user-1"
        self.inventory = {item.id: item for item in inventory}
        self.invoice_count = invoice_count
        self.fail_on = set(fail_on)
        self.calls: list[str] = []
        self.header = None
        self.rows = None

    def _maybe_fail(self, name):
        self.calls.append(name)
        if name in self.fail_on:
            raise PersistenceError(f"{name} failed")

    def count_invoices(self):
        self._maybe_fail("count_invoices")
        return self.invoice_count

    def insert_invoice(self, values):
        self._maybe_fail("insert_invoice")
        self.header = SimpleNamespace(id="inv-1", **values)
        return self.header

    def insert_invoice_items(self, invoice_id, rows):
        self._maybe_fail("insert_invoice_items")
        self.rows = [SimpleNamespace(invoice_id=invoice_id, **row) for row in rows]
        return self.rows

    def require_inventory_item(self, item_id):
        self.calls.append("require_inventory_item")
        item = self.inventory.get(item_id)
        if item is None:
            raise ItemNotFound(item_id)
        return item

    def update_inventory_item(self, item_id, values):
        self._maybe_fail("update_inventory_item")
        item = self.inventory[item_id]
        item.quantity = values["quantity"]
        return item


def _item(item_id, quantity, price, name=None):
    return SimpleNamespace(
        id=item_id,
        name=name or item_id.upper(),
        unit="pcs",
        quantity=Decimal(quantity),
        price_per_unit=Decimal(price),
    )


def _draft(inventory, lines):
    draft = DraftInvoice(buyer=BUYER)
    snapshot = {item.id: item for item in inventory}
    for item_id, quantity in lines:
        draft.add_or_merge_item(item_id, quantity, inventory=snapshot)
    return draft


def _coordinator(store):
    return InvoiceCommitCoordinator(store, clock=lambda: FIXED_NOW)


def test_commit_persists_header_items_and_decrements_stock():
    inventory = [_item("a", "10", "5"), _item("b", "5", "20")]
    store = FakeStore(inventory, invoice_count=3)
    draft = _draft(inventory, [("a", 4), ("b", 5)])

    record = _coordinator(store).commit(draft)

    assert record.invoice.invoice_number == "INV-2025-0004"
    assert record.invoice.date == FIXED_NOW
    assert record.invoice.status == "draft"
    assert record.invoice.buyer_name == "Bilal Stores"
    assert record.invoice.subtotal == Decimal("120")
    assert record.invoice.total == Decimal("120")
    assert [row.inventory_item_id for row in record.items] == ["a", "b"]
    assert store.inventory["a"].quantity == Decimal("6")
    assert store.inventory["b"].quantity == Decimal("0")


def test_commit_of_empty_draft_touches_nothing():
    store = FakeStore([])
    with pytest.raises(EmptyItemList):
        _coordinator(store).commit(DraftInvoice(buyer=BUYER))
    assert store.calls == []


def test_commit_with_missing_buyer_touches_nothing():
    inventory = [_item("a", "10", "5")]
    store = FakeStore(inventory)
    draft = _draft(inventory, [("a", 1)])
    draft.set_buyer(BuyerDetails(name="Bilal Stores"))

    with pytest.raises(MissingBuyerField):
        _coordinator(store).commit(draft)
    assert store.calls == []


def test_numbering_failure_writes_nothing():
    inventory = [_item("a", "10", "5")]
    store = FakeStore(inventory, fail_on={"count_invoices"})

    with pytest.raises(PersistenceError) as exc_info:
        _coordinator(store).commit(_draft(inventory, [("a", 1)]))

    assert exc_info.value.step == "numbering"
    assert exc_info.value.invoice_id is None
    assert store.calls == ["count_invoices"]


def test_header_failure_reports_step_without_invoice_id():
    inventory = [_item("a", "10", "5")]
    store = FakeStore(inventory, fail_on={"insert_invoice"})

    with pytest.raises(PersistenceError) as exc_info:
        _coordinator(store).commit(_draft(inventory, [("a", 1)]))

    assert exc_info.value.step == "header"
    assert exc_info.value.invoice_id is None
    assert store.inventory["a"].quantity == Decimal("10")


def test_items_failure_reports_the_created_invoice_and_keeps_stock():
    inventory = [_item("a", "10", "5")]
    store = FakeStore(inventory, fail_on={"insert_invoice_items"})

    with pytest.raises(PersistenceError) as exc_info:
        _coordinator(store).commit(_draft(inventory, [("a", 4)]))

    assert exc_info.value.step == "items"
    assert exc_info.value.invoice_id == "inv-1"
    assert store.header is not None
    assert "update_inventory_item" not in store.calls
    assert store.inventory["a"].quantity == Decimal("10")


def test_inventory_failure_is_reported_after_invoice_is_saved():
    inventory = [_item("a", "10", "5")]
    store = FakeStore(inventory, fail_on={"update_inventory_item"})

    with pytest.raises(PersistenceError) as exc_info:
        _coordinator(store).commit(_draft(inventory, [("a", 4)]))

    assert exc_info.value.step == "inventory"
    assert exc_info.value.invoice_id == "inv-1"
    assert exc_info.value.details[0]["message"] == "a"
    assert store.rows is not None


def test_deleted_inventory_item_is_skipped_when_decrementing():
    inventory = [_item("a", "10", "5"), _item("b", "5", "20")]
    draft = _draft(inventory, [("a", 2), ("b", 1)])
    store = FakeStore([inventory[1]])

    record = _coordinator(store).commit(draft)

    assert len(record.items) == 2
    assert store.inventory["b"].quantity == Decimal("4")


def test_stock_never_goes_below_zero():
    inventory = [_item("a", "3", "5")]
    draft = _draft(inventory, [("a", 3)])
    inventory[0].quantity = Decimal("1")
    store = FakeStore(inventory)

    _coordinator(store).commit(draft)

    assert store.inventory["a"].quantity == Decimal("0")


def test_commit_against_the_database(db_session):
    user = User(email="owner@example.com", hashed_password="x")
    db_session.add(user)
    db_session.commit()
    store = DataStore(db_session, user_id=user.id)
    widget = store.insert_inventory_item({"name": "Widget", "quantity": Decimal("10"), "price_per_unit": Decimal("5")})
    gadget = store.insert_inventory_item({"name": "Gadget", "quantity": Decimal("5"), "price_per_unit": Decimal("20")})

    draft = DraftInvoice(buyer=BUYER)
    snapshot = {item.id: item for item in store.list_inventory_items()}
    draft.add_or_merge_item(widget.id, 4, inventory=snapshot)
    draft.add_or_merge_item(gadget.id, 5, inventory=snapshot)

    record = _coordinator(store).commit(draft)

    assert record.invoice.invoice_number == "INV-2025-0001"
    assert store.count_invoices() == 1
    assert store.get_inventory_item(widget.id).quantity == Decimal("6")
    assert store.get_inventory_item(gadget.id).quantity == Decimal("0")

    loaded = store.load_invoice(record.invoice.id)
    assert [item.name for item in loaded.items] == ["Widget", "Gadget"]
    assert loaded.invoice.total == Decimal("120")


def test_committed_invoice_reloads_with_exact_fractional_values(db_session):
    user = User(email="exact@example.com", hashed_password="x")
    db_session.add(user)
    db_session.commit()
    store = DataStore(db_session, user_id=user.id)
    rice = store.insert_inventory_item(
        {"name": "Basmati Rice", "unit": "kg", "quantity": Decimal("10.125"), "price_per_unit": Decimal("12345678.99")}
    )
    oil = store.insert_inventory_item(
        {"name": "Cooking Oil", "unit": "ltr", "quantity": Decimal("7.5"), "price_per_unit": Decimal("310.25")}
    )
    db_session.expunge_all()

    snapshot = {item.id: item for item in store.list_inventory_items()}
    assert snapshot[rice.id].price_per_unit == Decimal("12345678.99")
    draft = DraftInvoice(buyer=BUYER)
    draft.add_or_merge_item(rice.id, Decimal("2.375"), inventory=snapshot)
    draft.add_or_merge_item(oil.id, Decimal("1.5"), inventory=snapshot)
    draft.add_or_merge_item(rice.id, Decimal("0.5"), inventory=snapshot)
    draft.set_discount(Decimal("1234.56"))
    draft.set_tax_percent(Decimal("17.5"))
    totals = draft.compute_totals()

    record = _coordinator(store).commit(draft)
    db_session.expunge_all()
    loaded = store.load_invoice(record.invoice.id)

    assert totals.subtotal == Decimal("35494292.47125")
    assert loaded.invoice.subtotal == totals.subtotal
    assert loaded.invoice.discount == totals.discount_amount == Decimal("1234.56")
    assert loaded.invoice.tax_percent == Decimal("17.5")
    assert loaded.invoice.tax == totals.tax_amount
    assert loaded.invoice.total == totals.total
    assert [(item.quantity, item.price_per_unit, item.total) for item in loaded.items] == [
        (line.quantity, line.price_per_unit, line.total) for line in draft.items
    ]
    assert loaded.items[0].total == Decimal("35493827.09625")
    assert store.get_inventory_item(rice.id).quantity == Decimal("7.25")
    assert store.get_inventory_item(oil.id).quantity == Decimal("6")
