from laundry.catalog import CatalogProvider, ChangeFeed, FETCH_ERROR


def _names(rows):
    return [r["name"] for r in rows]


def _category_id(catalog, name):
    return next(c["id"] for c in catalog.categories if c["name"] == name)


def test_start_loads_every_table_and_subscribes(catalog_store):
    feed = ChangeFeed()
    provider = CatalogProvider(fetch_rows=catalog_store.fetch, feed=feed)
    provider.start()
    assert provider.error is None
    assert provider.loading is False
    assert len(provider.services) == 2
    assert sorted(catalog_store.calls) == sorted(
        ["services", "categories", "items", "service_categories", "service_category_items"]
    )
    assert feed.subscribers("items") == 1


def test_categories_for_service_sorted_by_sequence(catalog):
    assert _names(catalog.categories_for_service("wash-iron")) == ["Shirts", "Trousers"]
    assert _names(catalog.categories_for_service("dry-cleaning")) == ["Shirts"]


def test_unknown_service_has_no_categories(catalog):
    assert catalog.categories_for_service("ironing-only") == []


def test_items_for_category_active_only_and_sorted(catalog):
    items = _names(catalog.items_for_category(_category_id(catalog, "Shirts")))
    assert items == ["Shirt", "Blouse", "Silk shirt"]
    assert "Old shirt" not in items


def test_items_for_service_category(catalog):
    shirts = _category_id(catalog, "Shirts")
    trousers = _category_id(catalog, "Trousers")
    assert _names(catalog.items_for_service_category("wash-iron", shirts)) == ["Shirt", "Blouse"]
    assert _names(catalog.items_for_service_category("dry-cleaning", shirts)) == ["Silk shirt"]
    assert _names(catalog.items_for_service_category("wash-iron", trousers)) == ["Jeans"]


def test_change_refreshes_only_the_affected_table(catalog, catalog_store):
    catalog_store.calls.clear()
    catalog_store.rows["items"].append(
        {"id": "new-item", "name": "Coat", "price": 12.0, "sequence": 9, "status": True}
    )
    catalog.feed.notify("items", {"type": "INSERT"})
    assert catalog_store.calls == ["items"]
    assert "Coat" in _names(catalog.items)


def test_failed_refresh_keeps_previous_rows(catalog, catalog_store):
    before = list(catalog.items)
    catalog_store.failing.add("items")
    catalog.feed.notify("items", {"type": "UPDATE"})
    assert catalog.items == before


def test_initial_failure_sets_error_and_empty_rows(catalog_store):
    catalog_store.failing.add("categories")
    provider = CatalogProvider(fetch_rows=catalog_store.fetch)
    provider.start()
    assert provider.error == FETCH_ERROR
    assert provider.services == []
    assert provider.loading is False


def test_stop_unsubscribes(catalog_store):
    feed = ChangeFeed()
    provider = CatalogProvider(fetch_rows=catalog_store.fetch, feed=feed)
    provider.start()
    provider.stop()
    catalog_store.calls.clear()
    assert feed.notify("items", {}) == 0
    assert catalog_store.calls == []


def test_status_counts(catalog):
    status = catalog.status()
    assert status["started"] is True
    assert status["counts"]["items"] == 5
