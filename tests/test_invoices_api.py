from datetime import datetime, timezone

BUYER = {
    "name": "Bilal Stores",
    "address": "12 Mall Road, Lahore",
    "phone": "+92 321 5550000",
    "email": "orders@bilalstores.pk",
}


def _register(client, *, email: str, full_name: str = "Owner"):
    return client.post(
        "/auth/register",
        json={
            "email": email,
            "full_name": full_name,
            "password": "password123",
            "business_name": f"{full_name} Traders",
        },
    )


def _auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _token(client, email: str) -> str:
    res = _register(client, email=email)
    assert res.status_code == 200, res.text
    return res.json()["access_token"]


def _create_item(client, token: str, *, name: str, quantity, price, unit: str = "pcs") -> str:
    res = client.post(
        "/inventory",
        json={"name": name, "quantity": quantity, "pricePerUnit": price, "unit": unit},
        headers=_auth_headers(token),
    )
    assert res.status_code == 201, res.text
    return res.json()["id"]


def _commit_invoice(client, token: str, lines: list[tuple[str, float]], **draft_fields) -> dict:
    headers = _auth_headers(token)
    draft = client.post("/drafts", json={"buyer": BUYER, **draft_fields}, headers=headers)
    assert draft.status_code == 201, draft.text
    draft_id = draft.json()["id"]
    for item_id, quantity in lines:
        added = client.post(
            f"/drafts/{draft_id}/items",
            json={"inventoryItemId": item_id, "quantity": quantity},
            headers=headers,
        )
        assert added.status_code == 200, added.text
    committed = client.post(f"/drafts/{draft_id}/commit", headers=headers)
    assert committed.status_code == 201, committed.text
    return committed.json()


def test_invoices_list_newest_first_and_next_number(test_context):
    client, _ = test_context
    token = _token(client, "invoices-list@example.com")
    headers = _auth_headers(token)
    widget_id = _create_item(client, token, name="Widget", quantity=10, price=5)
    year = datetime.now(timezone.utc).year

    assert client.get("/invoices/next-number", headers=headers).json()["invoiceNumber"] == f"INV-{year}-0001"

    first = _commit_invoice(client, token, [(widget_id, 1)])
    second = _commit_invoice(client, token, [(widget_id, 2)])

    listing = client.get("/invoices", headers=headers)
    assert listing.status_code == 200, listing.text
    body = listing.json()
    assert body["pagination"]["total"] == 2
    assert [item["id"] for item in body["items"]] == [second["id"], first["id"]]
    assert body["items"][0]["items"][0]["quantity"] == 2

    assert client.get("/invoices/next-number", headers=headers).json()["invoiceNumber"] == f"INV-{year}-0003"


def test_invoice_detail_and_status_change(test_context):
    client, _ = test_context
    token = _token(client, "invoices-status@example.com")
    headers = _auth_headers(token)
    rice_id = _create_item(client, token, name="Rice", quantity=20, price=310.25, unit="kg")
    invoice = _commit_invoice(client, token, [(rice_id, 2.5)], taxPercent=17, notes="Deliver Friday")

    detail = client.get(f"/invoices/{invoice['id']}", headers=headers)
    assert detail.status_code == 200, detail.text
    body = detail.json()
    assert body["buyerEmail"] == "orders@bilalstores.pk"
    assert body["buyerGstin"] is None
    assert body["notes"] == "Deliver Friday"
    assert body["subtotal"] == 775.63
    assert body["taxPercent"] == 17
    assert body["tax"] == 131.86
    assert body["total"] == 907.48
    assert body["items"][0] == {
        "inventoryItemId": rice_id,
        "name": "Rice",
        "quantity": 2.5,
        "pricePerUnit": 310.25,
        "unit": "kg",
        "total": 775.63,
    }

    sent = client.patch(f"/invoices/{invoice['id']}/status", json={"status": "sent"}, headers=headers)
    assert sent.status_code == 200, sent.text
    assert sent.json()["status"] == "sent"
    assert len(sent.json()["items"]) == 1

    invalid = client.patch(f"/invoices/{invoice['id']}/status", json={"status": "void"}, headers=headers)
    assert invalid.status_code == 422


def test_invoice_not_found_and_tenant_isolation(test_context):
    client, _ = test_context
    owner_token = _token(client, "invoices-owner@example.com")
    other_token = _token(client, "invoices-other@example.com")
    widget_id = _create_item(client, owner_token, name="Widget", quantity=10, price=5)
    invoice = _commit_invoice(client, owner_token, [(widget_id, 1)])

    missing = client.get("/invoices/unknown-id", headers=_auth_headers(owner_token))
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "not_found"
    assert missing.json()["error"]["message"] == "Invoice not found"

    foreign = client.get(f"/invoices/{invoice['id']}", headers=_auth_headers(other_token))
    assert foreign.status_code == 404
    other_next = client.get("/invoices/next-number", headers=_auth_headers(other_token)).json()
    assert other_next["invoiceNumber"].endswith("-0001")


def test_deleting_inventory_keeps_invoice_history(test_context):
    client, _ = test_context
    token = _token(client, "invoices-history@example.com")
    headers = _auth_headers(token)
    widget_id = _create_item(client, token, name="Widget", quantity=10, price=5)
    invoice = _commit_invoice(client, token, [(widget_id, 3)])

    assert client.delete(f"/inventory/{widget_id}", headers=headers).status_code == 204

    detail = client.get(f"/invoices/{invoice['id']}", headers=headers).json()
    assert detail["items"][0]["name"] == "Widget"
    assert detail["items"][0]["inventoryItemId"] == widget_id
    assert detail["total"] == 15.0


def test_invoice_document_is_display_ready(test_context):
    client, _ = test_context
    token = _token(client, "invoices-doc@example.com")
    headers = _auth_headers(token)
    widget_id = _create_item(client, token, name="Widget", quantity=50, price=5)
    invoice = _commit_invoice(client, token, [(widget_id, 20)], discount=10, taxPercent=10)

    res = client.get(f"/invoices/{invoice['id']}/document", headers=headers)

    assert res.status_code == 200, res.text
    document = res.json()
    expected_date = datetime.fromisoformat(invoice["date"].replace("Z", "+00:00")).strftime("%b %d, %Y")
    assert document["date"] == expected_date
    assert document["status"] == "Draft"
    assert document["seller"]["name"] == "Owner Traders"
    assert document["seller"]["address"] == "123 Business Street, City, State 12345"
    assert document["seller"]["email"] == "invoices-doc@example.com"
    assert document["buyer"]["name"] == "Bilal Stores"
    assert document["lines"] == [
        {
            "position": 1,
            "name": "Widget",
            "quantity": "20",
            "unit": "pcs",
            "unitPrice": "PKR 5.00",
            "total": "PKR 100.00",
        }
    ]
    assert document["subtotal"] == "PKR 100.00"
    assert document["discount"] == "-PKR 10.00"
    assert document["tax"] == "PKR 9.00"
    assert document["total"] == "PKR 99.00"
    assert document["fileName"] == f"{invoice['invoiceNumber']}.pdf"


def test_invoice_document_hides_zero_adjustments(test_context):
    client, _ = test_context
    token = _token(client, "invoices-plain@example.com")
    widget_id = _create_item(client, token, name="Widget", quantity=10, price=5)
    invoice = _commit_invoice(client, token, [(widget_id, 1)])

    document = client.get(f"/invoices/{invoice['id']}/document", headers=_auth_headers(token)).json()

    assert document["discount"] is None
    assert document["tax"] is None


def test_invoice_pdf_download(test_context):
    client, _ = test_context
    token = _token(client, "invoices-pdf@example.com")
    widget_id = _create_item(client, token, name="Widget", quantity=10, price=5)
    invoice = _commit_invoice(client, token, [(widget_id, 4)])

    res = client.get(f"/invoices/{invoice['id']}/pdf", headers=_auth_headers(token))

    assert res.status_code == 200, res.text
    assert res.headers["content-type"] == "application/pdf"
    assert f'filename="{invoice["invoiceNumber"]}.pdf"' in res.headers["content-disposition"]
    assert res.content.startswith(b"%PDF-1.4")
    assert invoice["invoiceNumber"].encode("ascii") in res.content
    assert b"1. Widget - 4 pcs x PKR 5.00 = PKR 20.00" in res.content
    assert res.content.rstrip().endswith(b"%%EOF")
