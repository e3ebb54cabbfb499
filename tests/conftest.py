"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

# Add project root to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings require Supabase credentials at import time
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import copy
import pytest
from unittest.mock import patch
from typing import Generator

from models.discontinued import RetentionMode, RetentionPolicy
from services.storage_service import StorageService
from services.preview_cache_service import clear_previews

# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """
    Mock query builder over an in-memory table.

    Supports the calls the blob store makes: select/eq/limit for reads,
    upsert for writes, delete/eq for removal.
    """

    def __init__(self, table: "MockSupabaseTable"):
        self._table = table
        self._action = "select"
        self._filters: list[tuple[str, object]] = []
        self._payload = None
        self._limit = None

    def select(self, *args, **kwargs):
        self._action = "select"
        return self

    def upsert(self, data):
        self._action = "upsert"
        self._payload = data if isinstance(data, list) else [data]
        return self

    def delete(self):
        self._action = "delete"
        return self

    def eq(self, column, value):
        self._filters.append((column, value))
        return self

    def limit(self, count):
        self._limit = count
        return self

    def _matches(self, row: dict) -> bool:
        return all(row.get(column) == value for column, value in self._filters)

    def execute(self) -> MockSupabaseResponse:
        if self._table.fail_with is not None:
            raise self._table.fail_with

        if self._action == "upsert":
            for row in self._payload:
                self._table.rows[row["key"]] = copy.deepcopy(row)
            self._table.writes.append([r["key"] for r in self._payload])
            return MockSupabaseResponse(data=copy.deepcopy(self._payload))

        matched = [row for row in self._table.rows.values() if self._matches(row)]

        if self._action == "delete":
            for row in matched:
                del self._table.rows[row["key"]]
            return MockSupabaseResponse(data=matched)

        if self._limit is not None:
            matched = matched[:self._limit]
        return MockSupabaseResponse(data=copy.deepcopy(matched))


class MockSupabaseTable:
    """In-memory table keyed by the "key" column."""

    def __init__(self):
        self.rows: dict[str, dict] = {}
        self.writes: list[list[str]] = []
        self.fail_with = None

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self).select(*args, **kwargs)

    def upsert(self, data):
        return MockSupabaseQuery(self).upsert(data)

    def delete(self):
        return MockSupabaseQuery(self).delete()


class MockSupabaseClient:
    """Mock Supabase client holding state across calls."""

    def __init__(self):
        self._tables: dict[str, MockSupabaseTable] = {}

    def table(self, name: str) -> MockSupabaseTable:
        if name not in self._tables:
            self._tables[name] = MockSupabaseTable()
        return self._tables[name]

    def set_value(self, key: str, value, table: str = "app_storage"):
        """Seed one blob."""
        self.table(table).rows[key] = {"key": key, "value": copy.deepcopy(value)}

    def get_value(self, key: str, table: str = "app_storage"):
        row = self.table(table).rows.get(key)
        return row["value"] if row else None

    def write_order(self, table: str = "app_storage") -> list[str]:
        """Keys in the order they were written."""
        return [key for batch in self.table(table).writes for key in batch]


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_value("products", [...])
    """
    return MockSupabaseClient()


@pytest.fixture
def storage(mock_supabase) -> StorageService:
    """Blob store backed by the mock client."""
    return StorageService(client=mock_supabase, table="app_storage")


@pytest.fixture
def keep_all_policy() -> RetentionPolicy:
    return RetentionPolicy(mode=RetentionMode.KEEP_ALL)


@pytest.fixture(autouse=True)
def _clear_preview_cache():
    """Previews are module-level state."""
    clear_previews()
    yield
    clear_previews()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Any StorageService built without an explicit client gets the mock.
    """
    with patch("services.storage_service.get_supabase_client", return_value=mock_supabase):
        yield mock_supabase


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/api/catalog/products")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
