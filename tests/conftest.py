import os

# Avant l'import de l'app: pas de Redis ni de chargement Supabase au démarrage
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")
os.environ.setdefault("CATALOG_AUTOSTART", "0")

import pytest
from typing import Generator, Dict, Any, List, Optional
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from laundry.app_setup.factory import create_app
from laundry.catalog import CatalogProvider, ChangeFeed
from laundry.utils.security import require_user, get_optional_user

SERVICE_ID = "11111111-1111-4111-8111-111111111111"
OTHER_SERVICE_ID = "22222222-2222-4222-8222-222222222222"
CAT_SHIRTS = "33333333-3333-4333-8333-333333333333"
CAT_TROUSERS = "44444444-4444-4444-8444-444444444444"
SC_WASH_SHIRTS = "55555555-5555-4555-8555-555555555555"
SC_WASH_TROUSERS = "66666666-6666-4666-8666-666666666666"
SC_DRY_SHIRTS = "77777777-7777-4777-8777-777777777777"
ITEM_SHIRT = "88888888-8888-4888-8888-888888888888"
ITEM_BLOUSE = "99999999-9999-4999-8999-999999999999"
ITEM_OLD = "aaaaaaaa-aaaa-4aaa-8aaa-aaaaaaaaaaaa"
ITEM_SILK = "bbbbbbbb-bbbb-4bbb-8bbb-bbbbbbbbbbbb"
ITEM_JEANS = "cccccccc-cccc-4ccc-8ccc-cccccccccccc"


def catalog_rows() -> Dict[str, List[dict]]:
    """Jeu de données du catalogue: 2 services, 2 catégories, 5 articles (1 inactif)."""
    return {
        "services": [
            {"id": SERVICE_ID, "name": "Wash & Iron", "service_identifier": "wash-iron", "sequence": 1, "status": True},
            {"id": OTHER_SERVICE_ID, "name": "Dry Cleaning", "service_identifier": "dry-cleaning", "sequence": 2, "status": True},
        ],
        "categories": [
            {"id": CAT_TROUSERS, "name": "Trousers", "sequence": 2, "status": True},
            {"id": CAT_SHIRTS, "name": "Shirts", "sequence": 1, "status": True},
        ],
        "items": [
            {"id": ITEM_BLOUSE, "name": "Blouse", "price": 3.5, "sequence": 2, "status": True},
            {"id": ITEM_SHIRT, "name": "Shirt", "price": 2.99, "sequence": 1, "status": True},
            {"id": ITEM_OLD, "name": "Old shirt", "price": 1.0, "sequence": 3, "status": False},
            {"id": ITEM_SILK, "name": "Silk shirt", "price": 9.5, "sequence": 4, "status": True},
            {"id": ITEM_JEANS, "name": "Jeans", "price": 4.0, "sequence": 1, "status": True},
        ],
        "service_categories": [
            {"id": SC_WASH_SHIRTS, "service_id": SERVICE_ID, "category_id": CAT_SHIRTS},
            {"id": SC_WASH_TROUSERS, "service_id": SERVICE_ID, "category_id": CAT_TROUSERS},
            {"id": SC_DRY_SHIRTS, "service_id": OTHER_SERVICE_ID, "category_id": CAT_SHIRTS},
        ],
        "service_category_items": [
            {"id": "sci-1", "service_category_id": SC_WASH_SHIRTS, "item_id": ITEM_SHIRT},
            {"id": "sci-2", "service_category_id": SC_WASH_SHIRTS, "item_id": ITEM_BLOUSE},
            {"id": "sci-3", "service_category_id": SC_WASH_SHIRTS, "item_id": ITEM_OLD},
            {"id": "sci-4", "service_category_id": SC_DRY_SHIRTS, "item_id": ITEM_SILK},
            {"id": "sci-5", "service_category_id": SC_WASH_TROUSERS, "item_id": ITEM_JEANS},
        ],
    }


class FakeCatalogStore:
    """Source de lignes en mémoire, avec compteur d'appels et tables en échec."""

    def __init__(self, rows: Optional[Dict[str, List[dict]]] = None):
        self.rows = rows if rows is not None else catalog_rows()
        self.calls: List[str] = []
        self.failing: set = set()

    def fetch(self, table: str) -> Optional[List[dict]]:
        self.calls.append(table)
        if table in self.failing:
            return None
        return list(self.rows.get(table, []))


# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/tests/unit/" in nodeid or nodeid.startswith("tests/unit/"):
            item.add_marker(pytest.mark.unit)
        elif "/tests/integration/" in nodeid or nodeid.startswith("tests/integration/"):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def catalog_store() -> FakeCatalogStore:
    return FakeCatalogStore()


@pytest.fixture
def catalog(catalog_store) -> CatalogProvider:
    provider = CatalogProvider(fetch_rows=catalog_store.fetch, feed=ChangeFeed())
    provider.start()
    yield provider
    provider.stop()


@pytest.fixture
def app(catalog):
    return create_app(catalog=catalog)


@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def fake_user() -> Dict[str, Any]:
    return {
        "id": "test-user",
        "email": "test@example.com",
        "metadata": {"first_name": "Jan", "last_name": "Jansen", "phone": "+31600000000"},
        "token": "fake-token",
    }


# Simuler un utilisateur authentifié pour les endpoints protégés
@pytest.fixture(autouse=True)
def _override_users(request, fake_user):
    if "app" not in request.fixturenames:
        yield
        return
    app = request.getfixturevalue("app")
    app.dependency_overrides[require_user] = lambda: fake_user
    app.dependency_overrides[get_optional_user] = lambda: fake_user
    try:
        yield
    finally:
        app.dependency_overrides.clear()


# Aucun accès réseau à Supabase pendant les tests
@pytest.fixture(scope="function", autouse=True)
def mock_db_dependency(monkeypatch):
    monkeypatch.setattr("laundry.infra.supabase_client.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("laundry.infra.supabase_client.get_service_supabase", lambda: MagicMock())
    monkeypatch.setattr("laundry.infra.supabase_client.get_user_supabase", lambda token: MagicMock())


@pytest.fixture
def cart() -> Dict[str, Any]:
    return {
        "shirt": {"id": ITEM_SHIRT, "name": "Shirt", "price": 24.99, "quantity": 1},
    }


@pytest.fixture
def order_details(cart) -> Dict[str, Any]:
    return {
        "service": "wash-iron",
        "items": cart,
        "pickup_date": "2026-10-20",
        "delivery_date": "2026-10-22",
        "pickup_address": "Damrak 1, Amsterdam",
        "delivery_address": "Damrak 1, Amsterdam",
        "pickup_option": "morning",
        "delivery_option": "standard",
        "special_instructions": None,
    }
