"""
Live reference lookup.

A product id is live-referenced while an open order line or any
special-order list line points at it. Live products are never dropped from
both the active catalog and the archive.
"""

from typing import Optional
import structlog

from models.order import Order, is_open
from models.special_order import SpecialOrderList
from services.storage_service import (
    StorageService,
    get_storage_service,
    ORDERS_KEY,
    SPECIAL_ORDERS_KEY,
)

logger = structlog.get_logger(__name__)


def live_referenced_ids(storage: Optional[StorageService] = None) -> set[str]:
    """
    Product ids held by open orders or special-order lists.

    Special-order lines count whatever their line status.
    """
    storage = storage or get_storage_service()

    ids: set[str] = set()
    for order in storage.load_list(ORDERS_KEY, Order):
        if is_open(order.status):
            ids |= order.product_ids()

    for special_list in storage.load_dict(SPECIAL_ORDERS_KEY, SpecialOrderList).values():
        ids |= set(special_list.lines.keys())

    logger.debug("live_references_collected", count=len(ids))
    return ids
