"""
Key-value blob store.

One row per collection in the storage table: key → JSON value. Each
collection (active catalog, archive, templates, orders, special orders,
formulas) is read and written whole.
"""

import json
import threading
from datetime import datetime, timezone
from typing import Any, Optional, Type, TypeVar
import structlog
from pydantic import BaseModel

from config import get_supabase_client, settings
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


# Collection keys
PRODUCTS_KEY = "products"
DISCONTINUED_KEY = "discontinued"
MAPPING_TEMPLATES_KEY = "mapping-templates"
ORDERS_KEY = "orders"
SPECIAL_ORDERS_KEY = "special-orders"
FORMULAS_KEY = "formulas"

# Held around every read-modify-write of the catalog and archive blobs so
# two requests in this process cannot interleave their writes.
catalog_lock = threading.RLock()


class StorageService:
    """
    JSON blob store backed by a Supabase table.

    Every failure surfaces as DatabaseError naming the key.
    """

    def __init__(self, client=None, table: Optional[str] = None):
        self.db = client or get_supabase_client()
        self.table = table or settings.storage_table

    # ===================
    # RAW OPERATIONS
    # ===================

    def get(self, key: str, default: Any = None) -> Any:
        """
        Read one collection.

        Args:
            key: Collection key
            default: Returned when the key has never been written

        Returns:
            Decoded JSON value or default
        """
        logger.debug("storage_get", key=key)

        try:
            result = (
                self.db.table(self.table)
                .select("value")
                .eq("key", key)
                .execute()
            )
        except Exception as e:
            logger.error("storage_get_failed", key=key, error=str(e))
            raise DatabaseError("select", str(e), details={"key": key})

        if not result.data:
            return default

        value = result.data[0].get("value")
        if isinstance(value, str):
            # Blobs written by older clients are JSON-encoded strings
            try:
                value = json.loads(value)
            except ValueError as e:
                logger.error("storage_value_corrupt", key=key, error=str(e))
                raise DatabaseError("decode", str(e), details={"key": key})
        return default if value is None else value

    def set(self, key: str, value: Any) -> None:
        """
        Write one collection, replacing what was there.

        Raises:
            DatabaseError: If the store rejects the write
        """
        logger.debug("storage_set", key=key)

        try:
            self.db.table(self.table).upsert({
                "key": key,
                "value": value,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }).execute()
        except Exception as e:
            logger.error("storage_set_failed", key=key, error=str(e))
            raise DatabaseError("upsert", str(e), details={"key": key})

    def delete(self, key: str) -> None:
        """Remove one collection. Deleting a missing key is not an error."""
        logger.debug("storage_delete", key=key)

        try:
            self.db.table(self.table).delete().eq("key", key).execute()
        except Exception as e:
            logger.error("storage_delete_failed", key=key, error=str(e))
            raise DatabaseError("delete", str(e), details={"key": key})

    # ===================
    # TYPED HELPERS
    # ===================

    def load_list(self, key: str, model: Type[ModelT]) -> list[ModelT]:
        """Read a collection stored as a JSON array of model objects."""
        return [model.model_validate(item) for item in self.get(key, [])]

    def save_list(self, key: str, items: list[BaseModel]) -> None:
        """Write a collection as a JSON array of model objects."""
        self.set(key, [item.model_dump(mode="json") for item in items])

    def load_dict(self, key: str, model: Type[ModelT]) -> dict[str, ModelT]:
        """Read a collection stored as a JSON object of model objects."""
        return {
            name: model.model_validate(item)
            for name, item in self.get(key, {}).items()
        }

    def save_dict(self, key: str, items: dict[str, BaseModel]) -> None:
        """Write a collection as a JSON object of model objects."""
        self.set(key, {name: item.model_dump(mode="json") for name, item in items.items()})


# Singleton instance for convenience
_storage_service: Optional[StorageService] = None


def get_storage_service() -> StorageService:
    """Get or create StorageService instance."""
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service
