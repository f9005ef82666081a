"""API testy pro životní cyklus položek a dokumenty."""
import json


def _create_item(client, name="Židle", quantity=10):
    res = client.post("/api/items", json={"name": name, "quantity": quantity})
    assert res.status_code == 201
    return res.json()


def _lifecycle(client, item_id, **kwargs):
    payload = {
        "statuses": ["Lost Items"],
        "event_date": "2026-03-15",
        "reason": "Nevráceno po akci",
        "quantity": 1,
    }
    payload.update(kwargs)
    return client.post(f"/api/items/{item_id}/lifecycle", json=payload)


# ─── Životní cyklus ──────────────────────────────────────────────────────────

def test_record_lifecycle_event(client):
    item_id = _create_item(client, quantity=10)["id"]
    res = _lifecycle(client, item_id, quantity=2, statuses=["Decommissioned", "Written-off"])
    assert res.status_code == 201
    data = res.json()
    assert data["statuses"] == ["Decommissioned", "Written-off"]
    assert data["quantity"] == 2
    assert data["source"] == "available"

    item = client.get(f"/api/items/{item_id}").json()
    assert (item["quantity"], item["quantity_available"], item["quantity_retired"]) == (8, 8, 2)


def test_lifecycle_validation_errors(client):
    item_id = _create_item(client)["id"]
    assert _lifecycle(client, item_id, statuses=[]).status_code == 422
    assert _lifecycle(client, item_id, reason="").status_code == 422
    assert _lifecycle(client, item_id, event_date=None).status_code == 422
    assert _lifecycle(client, item_id, quantity=0).status_code == 422
    assert _lifecycle(client, item_id, statuses=["Stolen"]).status_code == 422
    assert client.get(f"/api/items/{item_id}").json()["quantity"] == 10


def test_lifecycle_insufficient(client):
    item_id = _create_item(client, quantity=1)["id"]
    res = _lifecycle(client, item_id, quantity=1, source="damaged")
    assert res.status_code == 409
    assert res.json()["code"] == "INSUFFICIENT_QUANTITY"


def test_lifecycle_history(client):
    item_id = _create_item(client)["id"]
    _lifecycle(client, item_id, event_date="2026-01-01")
    _lifecycle(client, item_id, event_date="2026-05-01")

    res = client.get(f"/api/items/{item_id}/lifecycle")
    assert [e["event_date"] for e in res.json()] == ["2026-05-01", "2026-01-01"]

    res = client.get("/api/lifecycle", params={"date_from": "2026-04-01"})
    assert res.json()["total"] == 1


# ─── Dokumenty ───────────────────────────────────────────────────────────────

def test_documents_list_and_sign(client):
    item = _create_item(client, name="Projektor", quantity=2)
    client.post("/api/loans", json={
        "item_id": item["id"], "quantity": 1,
        "borrower_name": "Jan", "borrower_type": "Member",
        "expected_return_date": "2099-01-01",
    })

    res = client.get("/api/documents", params={"related_ref": item["code"]})
    docs = res.json()["items"]
    assert {d["type"] for d in docs} == {"Acquisition", "Loan"}

    loan_doc = next(d for d in docs if d["type"] == "Loan")
    assert json.loads(loan_doc["content"])["loan"]["borrower_name"] == "Jan"

    res = client.post(f"/api/documents/{loan_doc['id']}/sign")
    assert res.status_code == 200
    assert res.json()["signed_by"] == ["Administrátor"]

    again = client.post(f"/api/documents/{loan_doc['id']}/sign")
    assert again.status_code == 409
    assert again.json()["code"] == "ALREADY_SIGNED"


def test_documents_filter_by_type(client):
    _create_item(client)
    res = client.get("/api/documents", params={"type": "Loan"})
    assert res.json()["total"] == 0
    res = client.get("/api/documents", params={"type": "Acquisition"})
    assert res.json()["total"] == 1


def test_create_document_manually(client):
    res = client.post("/api/documents", json={
        "type": "Loan", "title": "Předávací protokol", "content": "Předáno bez výhrad",
        "related_ref": "LOAN-2024-001",
    })
    assert res.status_code == 201
    data = res.json()
    assert data["code"].startswith("DOC-MISC-")
    assert data["created_by"] == 1
    assert data["signed_by"] == []

    dup = client.post("/api/documents", json={
        "code": data["code"], "type": "Acquisition", "title": "Kopie", "content": "x",
    })
    assert dup.status_code == 409
    assert dup.json()["code"] == "DUPLICATE_CODE"

    assert client.post("/api/documents", json={"type": "Loan", "title": "", "content": "x"}).status_code == 422

    activity = client.get("/api/activity", params={"entity_type": "Document"}).json()
    assert [a["action"] for a in activity["items"]] == ["Create"]


def test_create_document_requires_manager(client):
    client.post("/api/auth/logout")
    client.post("/api/auth/login", json={"username": "host", "password": "host1234"})
    res = client.post("/api/documents", json={"type": "Loan", "title": "Protokol", "content": "x"})
    assert res.status_code == 403


def test_document_not_found(client):
    assert client.get("/api/documents/999").status_code == 404
