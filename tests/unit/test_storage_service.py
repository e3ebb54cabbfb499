"""
Unit tests for StorageService.

Run: pytest tests/unit/test_storage_service.py -v
"""

import json

import pytest

from models.product import Product
from services.storage_service import StorageService, PRODUCTS_KEY
from exceptions import DatabaseError
from tests.factories import ProductFactory


class TestStorageGetSet:
    """Tests for get() / set() / delete()"""

    def test_get_missing_key_returns_default(self, storage):
        assert storage.get("nothing") is None
        assert storage.get("nothing", []) == []

    def test_set_then_get(self, storage, mock_supabase):
        # Act
        storage.set("formulas", {"version": 2})

        # Assert
        assert storage.get("formulas") == {"version": 2}
        assert mock_supabase.get_value("formulas") == {"version": 2}

    def test_set_replaces_value(self, storage):
        storage.set("orders", [1])
        storage.set("orders", [2, 3])

        assert storage.get("orders") == [2, 3]

    def test_json_string_values_decoded(self, storage, mock_supabase):
        """Should decode blobs stored as JSON text."""
        mock_supabase.set_value("orders", json.dumps([{"id": "o1"}]))

        assert storage.get("orders") == [{"id": "o1"}]

    def test_corrupt_json_raises_database_error(self, storage, mock_supabase):
        mock_supabase.set_value("orders", "{not json")

        with pytest.raises(DatabaseError) as exc_info:
            storage.get("orders")

        assert exc_info.value.details["key"] == "orders"

    def test_delete_removes_key(self, storage):
        storage.set("orders", [1])

        storage.delete("orders")

        assert storage.get("orders") is None

    def test_delete_missing_key_is_not_an_error(self, storage):
        storage.delete("never-written")


class TestStorageFailures:
    """Backend failures surface as DatabaseError"""

    def test_read_failure(self, storage, mock_supabase):
        mock_supabase.table("app_storage").fail_with = RuntimeError("connection reset")

        with pytest.raises(DatabaseError) as exc_info:
            storage.get(PRODUCTS_KEY)

        assert exc_info.value.status_code == 500
        assert exc_info.value.details["operation"] == "select"
        assert "connection reset" in exc_info.value.message

    def test_write_failure(self, storage, mock_supabase):
        mock_supabase.table("app_storage").fail_with = RuntimeError("timeout")

        with pytest.raises(DatabaseError) as exc_info:
            storage.set(PRODUCTS_KEY, [])

        assert exc_info.value.details["operation"] == "upsert"
        assert exc_info.value.details["key"] == PRODUCTS_KEY


class TestTypedHelpers:
    """Tests for load_list() / save_list() / load_dict() / save_dict()"""

    def test_list_round_trip_preserves_decimals(self, storage):
        product = ProductFactory.build(cost="120.50")

        storage.save_list(PRODUCTS_KEY, [product])
        loaded = storage.load_list(PRODUCTS_KEY, Product)

        assert loaded == [product]

    def test_load_list_missing_is_empty(self, storage):
        assert storage.load_list(PRODUCTS_KEY, Product) == []

    def test_load_dict_missing_is_empty(self, storage):
        assert storage.load_dict("mapping-templates", Product) == {}


def test_uses_configured_client(mock_db):
    """Should fall back to the shared Supabase client."""
    service = StorageService()

    service.set("formulas", {"version": 1})

    assert mock_db.get_value("formulas") == {"version": 1}
