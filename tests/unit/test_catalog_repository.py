import pytest
from unittest.mock import patch, MagicMock
from laundry.catalog import repository


def _client(data):
    client = MagicMock()
    query = MagicMock()
    client.table.return_value = query
    query.select.return_value = query
    query.order.return_value = query
    query.execute.return_value = MagicMock(data=data)
    return client, query


def test_base_tables_ordered_by_sequence():
    client, query = _client([{"id": "s1"}])
    with patch("laundry.infra.supabase_client.get_service_supabase", return_value=client):
        assert repository.list_rows("services") == [{"id": "s1"}]
    query.order.assert_called_once_with("sequence")


def test_junction_tables_not_ordered():
    client, query = _client([])
    with patch("laundry.infra.supabase_client.get_service_supabase", return_value=client):
        assert repository.list_rows("service_categories") == []
    query.order.assert_not_called()


def test_error_returns_none():
    with patch("laundry.infra.supabase_client.get_service_supabase", side_effect=Exception("down")):
        assert repository.list_rows("items") is None


def test_unknown_table():
    with pytest.raises(ValueError):
        repository.list_rows("orders")


def test_reads_with_service_client_not_anon():
    used = []
    client, _ = _client([{"id": "s1"}])

    def _anon():
        used.append("anon")
        return client

    def _service():
        used.append("service")
        return client

    with patch("laundry.infra.supabase_client.get_supabase", side_effect=_anon), \
         patch("laundry.infra.supabase_client.get_service_supabase", side_effect=_service):
        assert repository.list_rows("services") == [{"id": "s1"}]
    assert used == ["service"]
