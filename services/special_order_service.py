"""
Special-order list service.

One mutable list per customer. Lines may point at active or archived
products; every line keeps its product live.
"""

from datetime import datetime, timezone
from typing import Optional
import structlog

from models.product import Product, DiscontinuedEntry
from models.special_order import (
    SpecialOrderLine,
    SpecialOrderLineUpsert,
    SpecialOrderList,
)
from services.storage_service import (
    StorageService,
    get_storage_service,
    catalog_lock,
    PRODUCTS_KEY,
    DISCONTINUED_KEY,
    SPECIAL_ORDERS_KEY,
)
from exceptions import ProductNotFoundError, SpecialOrderLineNotFoundError

logger = structlog.get_logger(__name__)


def customer_key(customer: str) -> str:
    """Lists are keyed case-insensitively by customer name."""
    return " ".join(customer.split()).lower()


class SpecialOrderService:
    """Special-order list business logic."""

    def __init__(self, storage: Optional[StorageService] = None):
        self.storage = storage or get_storage_service()

    def _load(self) -> dict[str, SpecialOrderList]:
        return self.storage.load_dict(SPECIAL_ORDERS_KEY, SpecialOrderList)

    def get_all(self) -> list[SpecialOrderList]:
        lists = list(self._load().values())
        lists.sort(key=lambda s: s.customer.lower())
        return lists

    def get_for_customer(self, customer: str) -> SpecialOrderList:
        """A customer's list; empty if they have none yet."""
        return self._load().get(
            customer_key(customer),
            SpecialOrderList(customer=customer.strip())
        )

    def _known_product_ids(self) -> set[str]:
        active = self.storage.load_list(PRODUCTS_KEY, Product)
        archive = self.storage.load_list(DISCONTINUED_KEY, DiscontinuedEntry)
        return {p.id for p in active} | {e.id for e in archive}

    def upsert_line(
        self,
        customer: str,
        product_id: str,
        data: SpecialOrderLineUpsert
    ) -> SpecialOrderList:
        """
        Add a product to a customer's list or change its line.

        The product check and the write share catalog_lock, so an import
        cannot drop the product between them.

        Raises:
            ProductNotFoundError: If the product is neither active nor archived
        """
        with catalog_lock:
            if product_id not in self._known_product_ids():
                raise ProductNotFoundError(product_id)

            now = datetime.now(timezone.utc)
            lists = self._load()
            key = customer_key(customer)
            special_list = lists.get(key) or SpecialOrderList(customer=customer.strip())

            existing = special_list.lines.get(product_id)
            lines = dict(special_list.lines)
            lines[product_id] = SpecialOrderLine(
                product_id=product_id,
                quantity=data.quantity,
                status=data.status,
                note=data.note,
                added_at=existing.added_at if existing else now,
                updated_at=now if existing else None,
            )
            lists[key] = special_list.model_copy(update={"lines": lines, "updated_at": now})
            self.storage.save_dict(SPECIAL_ORDERS_KEY, lists)

        logger.info(
            "special_order_line_saved",
            customer=customer,
            product_id=product_id,
            status=data.status.value,
            created=existing is None
        )
        return lists[key]

    def remove_line(self, customer: str, product_id: str) -> SpecialOrderList:
        """
        Raises:
            SpecialOrderLineNotFoundError: If the list has no such line
        """
        lists = self._load()
        key = customer_key(customer)
        special_list = lists.get(key)
        if special_list is None or product_id not in special_list.lines:
            raise SpecialOrderLineNotFoundError(customer, product_id)

        lines = {pid: line for pid, line in special_list.lines.items() if pid != product_id}
        if lines:
            lists[key] = special_list.model_copy(update={
                "lines": lines,
                "updated_at": datetime.now(timezone.utc),
            })
            result = lists[key]
        else:
            del lists[key]
            result = SpecialOrderList(customer=special_list.customer)
        self.storage.save_dict(SPECIAL_ORDERS_KEY, lists)

        logger.info("special_order_line_removed", customer=customer, product_id=product_id)
        return result


# Singleton instance for convenience
_special_order_service: Optional[SpecialOrderService] = None


def get_special_order_service() -> SpecialOrderService:
    """Get or create SpecialOrderService instance."""
    global _special_order_service
    if _special_order_service is None:
        _special_order_service = SpecialOrderService()
    return _special_order_service
