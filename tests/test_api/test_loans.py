"""API testy pro /api/loans a /api/loan-groups."""
from datetime import date, timedelta


def _create_item(client, name="Skládací stůl", quantity=10):
    res = client.post("/api/items", json={"name": name, "quantity": quantity})
    assert res.status_code == 201
    return res.json()["id"]


def _loan_payload(item_id, quantity=1, **kwargs):
    payload = {
        "item_id": item_id,
        "quantity": quantity,
        "borrower_name": "Marie Dvořáková",
        "borrower_type": "Staff",
        "expected_return_date": (date.today() + timedelta(days=7)).isoformat(),
    }
    payload.update(kwargs)
    return payload


def _group_payload(lines, **kwargs):
    payload = {
        "borrower_name": "ZŠ Komenského",
        "borrower_type": "Other Organization",
        "expected_return_date": (date.today() + timedelta(days=3)).isoformat(),
        "items": [{"item_id": item_id, "quantity": qty} for item_id, qty in lines],
    }
    payload.update(kwargs)
    return payload


# ─── /api/loans ──────────────────────────────────────────────────────────────

def test_create_loan(client):
    item_id = _create_item(client, quantity=5)
    res = client.post("/api/loans", json=_loan_payload(item_id, quantity=2))
    assert res.status_code == 201
    data = res.json()
    assert data["status"] == "Ongoing"
    assert data["display_status"] == "Ongoing"
    assert data["loan_date"] == date.today().isoformat()
    assert data["created_by"] == 1

    item = client.get(f"/api/items/{item_id}").json()
    assert (item["quantity_available"], item["quantity_loaned"]) == (3, 2)


def test_create_loan_insufficient(client):
    item_id = _create_item(client, quantity=1)
    res = client.post("/api/loans", json=_loan_payload(item_id, quantity=2))
    assert res.status_code == 409
    assert res.json()["code"] == "INSUFFICIENT_QUANTITY"
    assert client.get("/api/loans").json()["total"] == 0


def test_create_loan_invalid_borrower_type(client):
    item_id = _create_item(client)
    res = client.post("/api/loans", json=_loan_payload(item_id, borrower_type="Alien"))
    assert res.status_code == 422


def test_return_loan(client):
    item_id = _create_item(client, quantity=2)
    loan_id = client.post("/api/loans", json=_loan_payload(item_id, quantity=2)).json()["id"]

    res = client.post(f"/api/loans/{loan_id}/return", json={"actual_return_date": "2026-02-01"})
    assert res.status_code == 200
    assert res.json()["status"] == "Returned"
    assert res.json()["actual_return_date"] == "2026-02-01"
    assert client.get(f"/api/items/{item_id}").json()["status"] == "Available"


def test_return_loan_without_body(client):
    item_id = _create_item(client)
    loan_id = client.post("/api/loans", json=_loan_payload(item_id)).json()["id"]
    res = client.post(f"/api/loans/{loan_id}/return")
    assert res.status_code == 200
    assert res.json()["actual_return_date"] == date.today().isoformat()


def test_return_loan_twice(client):
    item_id = _create_item(client)
    loan_id = client.post("/api/loans", json=_loan_payload(item_id)).json()["id"]
    client.post(f"/api/loans/{loan_id}/return")
    res = client.post(f"/api/loans/{loan_id}/return")
    assert res.status_code == 409
    assert res.json()["code"] == "ALREADY_RETURNED"


def test_overdue_filter(client):
    item_id = _create_item(client)
    past = date.today() - timedelta(days=10)
    client.post("/api/loans", json=_loan_payload(
        item_id, loan_date=past.isoformat(), expected_return_date=(past + timedelta(days=2)).isoformat(),
    ))
    client.post("/api/loans", json=_loan_payload(item_id))

    res = client.get("/api/loans", params={"status": "Overdue"})
    data = res.json()
    assert data["total"] == 1
    assert data["items"][0]["display_status"] == "Overdue"
    assert data["items"][0]["status"] == "Ongoing"


def test_recent_loans(client):
    item_id = _create_item(client)
    for _ in range(3):
        client.post("/api/loans", json=_loan_payload(item_id))
    res = client.get("/api/loans/recent", params={"limit": 2})
    assert len(res.json()) == 2


# ─── /api/loan-groups ────────────────────────────────────────────────────────

def test_create_loan_group(client):
    tables = _create_item(client, name="Stůl", quantity=10)
    chairs = _create_item(client, name="Židle", quantity=40)

    res = client.post("/api/loan-groups", json=_group_payload([(tables, 4), (chairs, 30)]))
    assert res.status_code == 201
    data = res.json()
    assert data["code"] == f"LOAN-{date.today().year}-{data['id']:03d}"
    assert data["status"] == "Ongoing"
    assert [(loan["item_id"], loan["quantity"]) for loan in data["loans"]] == [(tables, 4), (chairs, 30)]
    assert client.get(f"/api/items/{chairs}").json()["quantity_available"] == 10


def test_create_loan_group_all_or_nothing(client):
    ok = _create_item(client, name="Stůl", quantity=10)
    short = _create_item(client, name="Projektor", quantity=1)

    res = client.post("/api/loan-groups", json=_group_payload([(ok, 2), (short, 3)]))
    assert res.status_code == 409
    body = res.json()
    assert body["code"] == "INSUFFICIENT_QUANTITY"
    assert body["shortages"] == [{"item_id": short, "item_code": "BVGJK0002", "requested": 3, "available": 1}]
    assert client.get(f"/api/items/{ok}").json()["quantity_available"] == 10
    assert client.get("/api/loan-groups").json()["total"] == 0


def test_create_loan_group_empty(client):
    res = client.post("/api/loan-groups", json=_group_payload([]))
    assert res.status_code == 422


def test_return_loan_group(client):
    a = _create_item(client, quantity=3)
    b = _create_item(client, quantity=3)
    group = client.post("/api/loan-groups", json=_group_payload([(a, 3), (b, 1)])).json()

    res = client.post(f"/api/loan-groups/{group['id']}/return")
    assert res.status_code == 200
    data = res.json()
    assert data["status"] == "Returned"
    assert all(loan["status"] == "Returned" for loan in data["loans"])
    assert client.get(f"/api/items/{a}").json()["quantity_available"] == 3

    again = client.post(f"/api/loan-groups/{group['id']}/return")
    assert again.status_code == 409
    assert client.get(f"/api/items/{a}").json()["quantity_available"] == 3


def test_loan_group_by_code_and_list(client):
    item_id = _create_item(client)
    group = client.post("/api/loan-groups", json=_group_payload([(item_id, 1)])).json()

    res = client.get(f"/api/loan-groups/by-code/{group['code']}")
    assert res.status_code == 200
    assert res.json()["id"] == group["id"]
    assert client.get("/api/loan-groups", params={"status": "Ongoing"}).json()["total"] == 1
    assert client.get("/api/loan-groups/recent").json()[0]["code"] == group["code"]
    # zápůjčky ze skupiny nejsou v seznamu jednotlivých zápůjček
    assert client.get("/api/loans").json()["total"] == 0
    assert client.get("/api/loans", params={"include_grouped": True}).json()["total"] == 1


def test_loan_group_not_found(client):
    assert client.get("/api/loan-groups/999").status_code == 404
    assert client.post("/api/loan-groups/999/return").status_code == 404
