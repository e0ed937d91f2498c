import pytest
from typing import Any, Dict, List, Optional
from laundry.errors import PersistenceError, ValidationError
from laundry.orders import service
from laundry.orders.models import customer_from_user


class FakeOrdersRepository:
    """Tables orders / order_items en mémoire."""

    def __init__(self):
        self.orders: List[Dict[str, Any]] = []
        self.items: List[Dict[str, Any]] = []
        self.fail_order = False
        self.fail_items = False
        self.calls: List[str] = []

    def order_number_exists(self, order_number, user_token=None):
        return any(o["order_number"] == order_number for o in self.orders)

    def insert_order(self, row, user_token=None):
        self.calls.append("insert_order")
        if self.fail_order:
            return None
        order = {**row, "id": f"order-{len(self.orders) + 1}"}
        self.orders.append(order)
        return order

    def insert_order_items(self, rows, user_token=None):
        self.calls.append("insert_order_items")
        if self.fail_items:
            return False
        self.items.extend(rows)
        return True

    def update_order_by_number(self, order_number, data, user_token=None, use_service=False):
        self.calls.append("update_order_by_number")
        updated = []
        for order in self.orders:
            if order["order_number"] == order_number:
                order.update(data)
                updated.append(order)
        return updated

    def get_order_by_number(self, order_number, user_token=None) -> Optional[dict]:
        return next((o for o in self.orders if o["order_number"] == order_number), None)

    def list_order_items(self, order_id, user_token=None):
        return [i for i in self.items if i["order_id"] == order_id]


@pytest.fixture
def repo(monkeypatch):
    fake = FakeOrdersRepository()
    for name in ("order_number_exists", "insert_order", "insert_order_items",
                 "update_order_by_number", "get_order_by_number", "list_order_items"):
        monkeypatch.setattr(service.repository, name, getattr(fake, name))
    return fake


@pytest.fixture
def customer(fake_user):
    return customer_from_user(fake_user)


def test_create_order_writes_order_then_items(repo, customer, order_details):
    order = service.create_order(customer, order_details, "EZY123456", user_token="t")
    assert repo.calls == ["insert_order", "insert_order_items"]
    row = repo.orders[0]
    assert row["status"] == "pending"
    assert row["payment_status"] == "pending"
    assert row["customer_name"] == "Jan Jansen"
    assert row["subtotal"] == "24.99"
    assert row["tax"] == "5.25"
    assert row["total_amount"] == "30.24"
    assert row["estimated_delivery"] == "2026-10-22"
    assert order["items"][0]["order_id"] == row["id"]
    assert order["items"][0]["subtotal"] == "24.99"


def test_invalid_product_id_gets_fresh_uuid(repo, customer, order_details):
    order_details["items"] = {
        "placeholder": {"id": "shirt-1", "name": "Shirt", "price": 2.0, "quantity": 2},
    }
    order = service.create_order(customer, order_details, "EZY000001")
    product_id = order["items"][0]["product_id"]
    assert product_id != "shirt-1"
    assert service.is_uuid4(product_id)
    assert order["items"][0]["subtotal"] == "4.00"


def test_valid_uuid_product_id_is_kept(repo, customer, order_details, cart):
    order = service.create_order(customer, order_details, "EZY000002")
    assert order["items"][0]["product_id"] == cart["shirt"]["id"]


def test_failed_order_insert_skips_items(repo, customer, order_details):
    repo.fail_order = True
    with pytest.raises(PersistenceError):
        service.create_order(customer, order_details, "EZY000003")
    assert repo.calls == ["insert_order"]


def test_failed_items_insert_raises(repo, customer, order_details):
    repo.fail_items = True
    with pytest.raises(PersistenceError):
        service.create_order(customer, order_details, "EZY000004")


def test_empty_cart_is_rejected_before_write(repo, customer, order_details):
    order_details["items"] = {}
    with pytest.raises(ValidationError):
        service.create_order(customer, order_details, "EZY000005")
    assert repo.calls == []


def test_missing_order_number_is_rejected(repo, customer, order_details):
    with pytest.raises(ValidationError):
        service.create_order(customer, order_details, "")


def test_update_status_does_not_touch_items(repo, customer, order_details):
    service.create_order(customer, order_details, "EZY000006")
    items_before = [dict(i) for i in repo.items]
    updated = service.update_order_status("EZY000006", "processing", "paid", "ideal")
    assert updated["status"] == "processing"
    assert updated["payment_status"] == "paid"
    assert updated["payment_method"] == "ideal"
    assert repo.items == items_before


def test_update_unknown_order_raises(repo):
    with pytest.raises(PersistenceError):
        service.update_order_status("EZY999999", "processing", "paid")


def test_update_failure_raises(monkeypatch, repo):
    monkeypatch.setattr(service.repository, "update_order_by_number", lambda *a, **k: None)
    with pytest.raises(PersistenceError):
        service.update_order_status("EZY000007", "processing", "paid")


def test_generate_order_number_avoids_existing(repo):
    number = service.generate_order_number()
    assert number.startswith("EZY") and len(number) == 9


def test_get_order_includes_items(repo, customer, order_details):
    service.create_order(customer, order_details, "EZY000008")
    order = service.get_order("EZY000008")
    assert len(order["items"]) == 1
    assert service.get_order("EZY404404") is None
