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


def _create_item(client, token: str, **overrides) -> dict:
    payload = {"name": "Basmati Rice", "quantity": 40, "pricePerUnit": 1250.0, "unit": "bag"}
    payload.update(overrides)
    res = client.post("/inventory", json=payload, headers=_auth_headers(token))
    assert res.status_code == 201, res.text
    return res.json()


def test_inventory_create_get_and_list(test_context):
    client, _ = test_context
    token = _token(client, "inv-owner@example.com")

    created = _create_item(client, token, description="  5kg bag  ")
    assert created["name"] == "Basmati Rice"
    assert created["description"] == "5kg bag"
    assert created["quantity"] == 40
    assert created["pricePerUnit"] == 1250.0
    assert created["unit"] == "bag"
    assert created["createdAt"]

    fetched = client.get(f"/inventory/{created['id']}", headers=_auth_headers(token))
    assert fetched.status_code == 200, fetched.text
    assert fetched.json()["id"] == created["id"]

    _create_item(client, token, name="Cooking Oil", unit="ltr")
    listing = client.get("/inventory", headers=_auth_headers(token))
    assert listing.status_code == 200, listing.text
    body = listing.json()
    assert body["pagination"]["total"] == 2
    assert body["pagination"]["has_next"] is False
    assert {item["name"] for item in body["items"]} == {"Basmati Rice", "Cooking Oil"}

    searched = client.get("/inventory", params={"q": "oil"}, headers=_auth_headers(token))
    assert [item["name"] for item in searched.json()["items"]] == ["Cooking Oil"]

    paged = client.get("/inventory", params={"limit": 1}, headers=_auth_headers(token))
    assert paged.json()["pagination"]["count"] == 1
    assert paged.json()["pagination"]["has_next"] is True


def test_inventory_accepts_fractional_quantities(test_context):
    client, _ = test_context
    token = _token(client, "fraction@example.com")

    created = _create_item(client, token, name="Ghee", quantity=2.125, unit="kg")

    assert created["quantity"] == 2.125


def test_inventory_create_validation(test_context):
    client, _ = test_context
    token = _token(client, "inv-validate@example.com")
    headers = _auth_headers(token)

    negative_price = client.post(
        "/inventory",
        json={"name": "Rice", "quantity": 1, "pricePerUnit": -1},
        headers=headers,
    )
    assert negative_price.status_code == 422

    too_precise = client.post(
        "/inventory",
        json={"name": "Rice", "quantity": 0.1234, "pricePerUnit": 1},
        headers=headers,
    )
    assert too_precise.status_code == 422

    blank_name = client.post(
        "/inventory",
        json={"name": "   ", "quantity": 1, "pricePerUnit": 1},
        headers=headers,
    )
    assert blank_name.status_code == 422
    assert blank_name.json()["error"]["details"][0]["field"] == "name"


def test_inventory_partial_update_changes_only_given_fields(test_context):
    client, _ = test_context
    token = _token(client, "inv-update@example.com")
    headers = _auth_headers(token)
    created = _create_item(client, token)

    res = client.patch(f"/inventory/{created['id']}", json={"quantity": 35}, headers=headers)
    assert res.status_code == 200, res.text
    assert res.json()["quantity"] == 35
    assert res.json()["pricePerUnit"] == 1250.0
    assert res.json()["name"] == "Basmati Rice"

    res = client.patch(f"/inventory/{created['id']}", json={"pricePerUnit": 1300.5}, headers=headers)
    assert res.json()["pricePerUnit"] == 1300.5
    assert res.json()["quantity"] == 35

    assert client.patch(f"/inventory/{created['id']}", json={}, headers=headers).status_code == 422
    assert client.patch(f"/inventory/{created['id']}", json={"name": None}, headers=headers).status_code == 422


def test_inventory_delete_and_not_found(test_context):
    client, _ = test_context
    token = _token(client, "inv-delete@example.com")
    headers = _auth_headers(token)
    created = _create_item(client, token)

    assert client.delete(f"/inventory/{created['id']}", headers=headers).status_code == 204

    missing = client.get(f"/inventory/{created['id']}", headers=headers)
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "item_not_found"
    assert client.delete(f"/inventory/{created['id']}", headers=headers).status_code == 404


def test_inventory_is_tenant_isolated(test_context):
    client, _ = test_context
    owner_token = _token(client, "tenant-a@example.com")
    other_token = _token(client, "tenant-b@example.com")
    created = _create_item(client, owner_token)

    res = client.get(f"/inventory/{created['id']}", headers=_auth_headers(other_token))
    assert res.status_code == 404

    listing = client.get("/inventory", headers=_auth_headers(other_token))
    assert listing.json()["items"] == []

    patch = client.patch(
        f"/inventory/{created['id']}",
        json={"quantity": 0},
        headers=_auth_headers(other_token),
    )
    assert patch.status_code == 404


def test_inventory_low_stock_listing(test_context):
    client, _ = test_context
    token = _token(client, "low-stock@example.com")
    headers = _auth_headers(token)
    _create_item(client, token, name="Sugar", quantity=3)
    _create_item(client, token, name="Salt", quantity=5)
    _create_item(client, token, name="Flour", quantity=9)

    default_res = client.get("/inventory/low-stock", headers=headers)
    assert default_res.status_code == 200, default_res.text
    assert default_res.json()["threshold"] == 5
    assert {item["name"] for item in default_res.json()["items"]} == {"Sugar", "Salt"}

    custom_res = client.get("/inventory/low-stock", params={"threshold": 3}, headers=headers)
    assert [item["name"] for item in custom_res.json()["items"]] == ["Sugar"]


def test_inventory_requires_authentication(test_context):
    client, _ = test_context

    res = client.get("/inventory")

    assert res.status_code == 401
    assert res.json()["error"]["code"] == "auth_required"
