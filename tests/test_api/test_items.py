"""API testy pro /api/items endpoint."""


def _create_item(client, name="Skládací stůl", quantity=10, **kwargs):
    res = client.post("/api/items", json={"name": name, "quantity": quantity, **kwargs})
    assert res.status_code == 201, res.text
    return res.json()


def test_create_item(client):
    res = client.post("/api/items", json={"name": "Projektor", "quantity": 3, "category": "Electronics"})
    assert res.status_code == 201
    data = res.json()
    assert data["code"] == "BVGJK0001"
    assert data["quantity"] == 3
    assert data["quantity_available"] == 3
    assert data["quantity_loaned"] == 0
    assert data["quantity_damaged"] == 0
    assert data["status"] == "Available"
    assert data["category"] == "Electronics"


def test_create_item_with_code(client):
    data = _create_item(client, code="PROJ-01")
    assert data["code"] == "PROJ-01"


def test_create_item_zero_quantity(client):
    res = client.post("/api/items", json={"name": "Nic", "quantity": 0})
    assert res.status_code == 422
    assert res.json()["code"] == "VALIDATION_ERROR"


def test_duplicate_code(client):
    _create_item(client, code="DUP-001")
    res = client.post("/api/items", json={"code": "DUP-001", "name": "Second"})
    assert res.status_code == 409
    assert res.json()["code"] == "DUPLICATE_CODE"


def test_list_items(client):
    _create_item(client, name="Monitor")
    _create_item(client, name="Klávesnice")
    res = client.get("/api/items")
    assert res.status_code == 200
    data = res.json()
    assert data["total"] == 2
    assert data["pages"] == 1


def test_list_items_filter_by_status(client):
    a = _create_item(client, name="Stůl", quantity=2)
    _create_item(client, name="Židle", quantity=2)
    client.post(f"/api/items/{a['id']}/damage", json={"quantity": 2, "reason": "Prasklé"})

    res = client.get("/api/items", params={"status": "Damaged"})
    assert [i["name"] for i in res.json()["items"]] == ["Stůl"]


def test_list_items_invalid_category(client):
    res = client.get("/api/items", params={"category": "Zbraně"})
    assert res.status_code == 422


def test_get_item(client):
    item_id = _create_item(client)["id"]
    res = client.get(f"/api/items/{item_id}")
    assert res.status_code == 200
    assert res.json()["id"] == item_id


def test_get_item_not_found(client):
    res = client.get("/api/items/99999")
    assert res.status_code == 404
    assert res.json()["code"] == "NOT_FOUND"


def test_get_item_by_code(client):
    _create_item(client, code="PROJ-02")
    assert client.get("/api/items/by-code/PROJ-02").json()["code"] == "PROJ-02"
    assert client.get("/api/items/by-code/NOPE").status_code == 404


def test_update_item(client):
    item_id = _create_item(client, name="Old Name", quantity=4)["id"]
    res = client.put(f"/api/items/{item_id}", json={"name": "New Name", "quantity": 99})
    assert res.status_code == 200
    data = res.json()
    assert data["name"] == "New Name"
    # množství přes PUT měnit nelze
    assert data["quantity"] == 4


def test_update_item_rejects_null_required_fields(client):
    item_id = _create_item(client, name="Stůl")["id"]
    for body in ({"name": None}, {"name": ""}, {"category": None}, {"usage": None}):
        res = client.put(f"/api/items/{item_id}", json=body)
        assert res.status_code == 422, body
    # volitelná pole vymazat lze
    res = client.put(f"/api/items/{item_id}", json={"location": None})
    assert res.status_code == 200
    assert client.get(f"/api/items/{item_id}").json()["name"] == "Stůl"


def test_delete_item(client):
    item_id = _create_item(client)["id"]
    res = client.delete(f"/api/items/{item_id}")
    assert res.status_code == 204
    assert client.get(f"/api/items/{item_id}").status_code == 404


def test_delete_item_with_open_loan(client):
    item_id = _create_item(client)["id"]
    client.post("/api/loans", json={
        "item_id": item_id, "quantity": 1,
        "borrower_name": "Jan", "borrower_type": "Staff",
        "expected_return_date": "2099-01-01",
    })
    res = client.delete(f"/api/items/{item_id}")
    assert res.status_code == 409
    assert res.json()["code"] == "ITEM_IN_USE"


def test_damage_and_repair(client):
    item_id = _create_item(client, quantity=5)["id"]
    res = client.post(f"/api/items/{item_id}/damage", json={"quantity": 2, "reason": "Rozbito"})
    assert res.status_code == 200
    assert res.json()["quantity_damaged"] == 2
    assert res.json()["status"] == "Partially Available"

    res = client.post(f"/api/items/{item_id}/repair", json={"quantity": 2, "reason": "Opraveno"})
    assert res.json()["quantity_available"] == 5
    assert res.json()["status"] == "Available"


def test_damage_without_reason(client):
    item_id = _create_item(client, quantity=5)["id"]
    res = client.post(f"/api/items/{item_id}/damage", json={"quantity": 1})
    assert res.status_code == 422


def test_damage_insufficient(client):
    item_id = _create_item(client, quantity=1)["id"]
    res = client.post(f"/api/items/{item_id}/damage", json={"quantity": 2, "reason": "Rozbito"})
    assert res.status_code == 409
    body = res.json()
    assert body["code"] == "INSUFFICIENT_QUANTITY"
    assert body["shortages"][0]["requested"] == 2
    assert body["shortages"][0]["available"] == 1


def test_partial_delete(client):
    item_id = _create_item(client, quantity=5)["id"]
    res = client.post(f"/api/items/{item_id}/partial-delete", json={"quantity": 2})
    assert res.status_code == 200
    data = res.json()
    assert data["deleted"] is False
    assert data["item"]["quantity"] == 3


def test_partial_delete_everything(client):
    item_id = _create_item(client, quantity=2)["id"]
    res = client.post(f"/api/items/{item_id}/partial-delete", json={"quantity": 2})
    assert res.json() == {"deleted": True, "item": None}
    assert client.get(f"/api/items/{item_id}").status_code == 404


def test_partial_delete_too_many(client):
    item_id = _create_item(client, quantity=2)["id"]
    res = client.post(f"/api/items/{item_id}/partial-delete", json={"quantity": 5})
    assert res.status_code == 422


def test_item_transactions(client):
    item_id = _create_item(client, quantity=3)["id"]
    client.post(f"/api/items/{item_id}/damage", json={"quantity": 1, "reason": "Rozbito"})
    res = client.get(f"/api/items/{item_id}/transactions")
    assert res.status_code == 200
    assert [t["action"] for t in res.json()] == ["damage", "register"]


def test_stats(client):
    a = _create_item(client, quantity=4, category="Tools")
    _create_item(client, quantity=6, category="Furniture")
    client.post(f"/api/items/{a['id']}/damage", json={"quantity": 1, "reason": "Tupé"})

    data = client.get("/api/items/stats").json()
    assert data["total"] == 10
    assert data["available"] == 9
    assert data["damaged"] == 1
    assert {c["category"]: c["count"] for c in data["categories"]} == {"Furniture": 1, "Tools": 1}
