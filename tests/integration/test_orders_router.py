import pytest
from fastapi import HTTPException
from unittest.mock import MagicMock
from laundry.orders import service as orders_service
from laundry.utils.security import require_user


@pytest.fixture
def repo(monkeypatch):
    inserted = {}

    def _insert_order(row, user_token=None):
        inserted["order"] = row
        return {**row, "id": "order-1"}

    def _insert_items(rows, user_token=None):
        inserted["items"] = rows
        return True

    monkeypatch.setattr(orders_service.repository, "order_number_exists", lambda n, user_token=None: False)
    monkeypatch.setattr(orders_service.repository, "insert_order", _insert_order)
    monkeypatch.setattr(orders_service.repository, "insert_order_items", _insert_items)
    return inserted


def test_create_order(client, repo, order_details):
    response = client.post("/api/v1/orders", json={"order_number": "EZY123456", "order_details": order_details})
    assert response.status_code == 201
    body = response.json()
    assert body["order_number"] == "EZY123456"
    assert body["status"] == "pending"
    assert body["total_amount"] == "30.24"
    assert repo["order"]["user_id"] == "test-user"
    assert len(body["items"]) == 1


def test_create_order_generates_number(client, repo, order_details):
    response = client.post("/api/v1/orders", json={"order_details": order_details})
    assert response.status_code == 201
    assert response.json()["order_number"].startswith("EZY")


def test_empty_cart_is_400(client, repo, order_details):
    order_details["items"] = {}
    response = client.post("/api/v1/orders", json={"order_number": "EZY1", "order_details": order_details})
    assert response.status_code == 400
    assert response.json() == {"detail": "Panier vide"}


def test_insert_failure_is_500(client, monkeypatch, order_details):
    monkeypatch.setattr(orders_service.repository, "insert_order", lambda row, user_token=None: None)
    response = client.post("/api/v1/orders", json={"order_number": "EZY1", "order_details": order_details})
    assert response.status_code == 500


def test_order_number_endpoint(client, repo):
    response = client.post("/api/v1/orders/number")
    assert response.status_code == 200
    assert len(response.json()["order_number"]) == 9


def test_update_status(client, monkeypatch):
    update = MagicMock(return_value=[{"order_number": "EZY1", "status": "processing", "payment_status": "paid"}])
    monkeypatch.setattr(orders_service.repository, "update_order_by_number", update)
    response = client.patch("/api/v1/orders/EZY1/status", json={"payment_method": "ideal"})
    assert response.status_code == 200
    assert update.call_args.args[1] == {"status": "processing", "payment_status": "paid", "payment_method": "ideal"}


def test_update_status_unknown_method_is_400(client):
    assert client.patch("/api/v1/orders/EZY1/status", json={"payment_method": "paypal"}).status_code == 400


def test_get_unknown_order_is_404(client, monkeypatch):
    monkeypatch.setattr(orders_service.repository, "get_order_by_number", lambda n, user_token=None: None)
    assert client.get("/api/v1/orders/EZY404404").status_code == 404


def test_unauthenticated_is_401(app, client, order_details):
    app.dependency_overrides[require_user] = lambda: (_ for _ in ()).throw(HTTPException(status_code=401))
    response = client.post("/api/v1/orders", json={"order_details": order_details})
    assert response.status_code == 401
