"""
Order service for business logic operations.

Orders snapshot each line from the active catalog at order time. Later
imports, edits or repricing never change a placed order.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
import structlog

from models.order import (
    Order,
    OrderCreate,
    OrderLine,
    OrderStatus,
    is_valid_status_transition,
)
from services.catalog_service import CatalogService
from services.storage_service import (
    StorageService,
    get_storage_service,
    catalog_lock,
    ORDERS_KEY,
)
from exceptions import (
    OrderNotFoundError,
    InvalidStatusTransitionError,
    ProductNotFoundError,
)

logger = structlog.get_logger(__name__)


class OrderService:
    """
    Order business logic.

    Handles placing orders and moving them through their statuses.
    """

    def __init__(
        self,
        storage: Optional[StorageService] = None,
        catalog_service: Optional[CatalogService] = None
    ):
        self.storage = storage or get_storage_service()
        self.catalog = catalog_service or CatalogService(self.storage)

    # ===================
    # READ OPERATIONS
    # ===================

    def get_all(
        self,
        status: Optional[OrderStatus] = None,
        customer: Optional[str] = None
    ) -> list[Order]:
        """Orders, newest first, with optional filters."""
        orders = self.storage.load_list(ORDERS_KEY, Order)
        if status:
            orders = [o for o in orders if o.status == status]
        if customer:
            orders = [o for o in orders if o.customer.lower() == customer.strip().lower()]
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return orders

    def get_by_id(self, order_id: str) -> Order:
        """
        Raises:
            OrderNotFoundError: If no order has this id
        """
        for order in self.storage.load_list(ORDERS_KEY, Order):
            if order.id == order_id:
                return order
        logger.warning("order_not_found", order_id=order_id)
        raise OrderNotFoundError(order_id)

    # ===================
    # WRITE OPERATIONS
    # ===================

    def create(self, data: OrderCreate) -> Order:
        """
        Place an order.

        Each line is priced at the product's current frontline price.
        The catalog read and the order write share catalog_lock, so an
        import cannot drop a product the new order points at.

        Raises:
            ProductNotFoundError: If a line names a product not in the
                active catalog
        """
        logger.info("creating_order", customer=data.customer, lines=len(data.lines))

        with catalog_lock:
            catalog = {p.id: p for p in self.catalog.get_active_products()}

            lines = []
            for requested in data.lines:
                product = catalog.get(requested.product_id)
                if product is None:
                    logger.warning("order_product_not_found", product_id=requested.product_id)
                    raise ProductNotFoundError(requested.product_id)

                unit_price = product.pricing.frontline if product.pricing else Decimal("0")
                lines.append(OrderLine(
                    product_id=product.id,
                    supplier=product.supplier,
                    producer=product.producer,
                    product_name=product.product_name,
                    vintage=product.vintage,
                    pack_size=product.pack_size,
                    bottle_size_ml=product.bottle_size_ml,
                    unit_price=unit_price,
                    quantity=requested.quantity,
                    line_total=unit_price * requested.quantity,
                ))

            order = Order(
                id=str(uuid.uuid4()),
                customer=data.customer,
                lines=lines,
                total=sum((line.line_total for line in lines), Decimal("0")),
                status=OrderStatus.PENDING,
                created_at=datetime.now(timezone.utc),
            )

            orders = self.storage.load_list(ORDERS_KEY, Order)
            orders.append(order)
            self.storage.save_list(ORDERS_KEY, orders)

        logger.info("order_created", order_id=order.id, total=str(order.total))
        return order

    def update_status(self, order_id: str, new_status: OrderStatus) -> Order:
        """
        Move an order to a new status.

        Raises:
            OrderNotFoundError: If no order has this id
            InvalidStatusTransitionError: If the move goes backward or
                leaves a terminal status
        """
        orders = self.storage.load_list(ORDERS_KEY, Order)
        index = next((i for i, o in enumerate(orders) if o.id == order_id), None)
        if index is None:
            raise OrderNotFoundError(order_id)

        current = orders[index].status
        if current == new_status:
            return orders[index]
        if not is_valid_status_transition(current, new_status):
            logger.warning(
                "invalid_status_transition",
                order_id=order_id,
                current=current.value,
                new=new_status.value
            )
            raise InvalidStatusTransitionError(current.value, new_status.value)

        orders[index] = orders[index].model_copy(update={
            "status": new_status,
            "updated_at": datetime.now(timezone.utc),
        })
        self.storage.save_list(ORDERS_KEY, orders)

        logger.info(
            "order_status_updated",
            order_id=order_id,
            old_status=current.value,
            new_status=new_status.value
        )
        return orders[index]


# Singleton instance for convenience
_order_service: Optional[OrderService] = None


def get_order_service() -> OrderService:
    """Get or create OrderService instance."""
    global _order_service
    if _order_service is None:
        _order_service = OrderService()
    return _order_service
