"""
Customer order schemas.

Orders hold immutable snapshots of product lines taken at order time.
"""

from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum
from datetime import datetime
from decimal import Decimal

from models.base import BaseSchema, TimestampMixin


class OrderStatus(str, Enum):
    """Order status values."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})

# Status order for transition validation (lower index = earlier in flow)
STATUS_ORDER = {
    OrderStatus.PENDING: 0,
    OrderStatus.CONFIRMED: 1,
    OrderStatus.SHIPPED: 2,
    OrderStatus.COMPLETED: 3,
}


def is_valid_status_transition(current: OrderStatus, new: OrderStatus) -> bool:
    """
    Check if status transition is valid.

    Rules:
    - Can skip forward (PENDING → SHIPPED is OK)
    - Cannot go backward (SHIPPED → CONFIRMED is NOT OK)
    - CANCELLED is reachable from any non-terminal status
    - COMPLETED and CANCELLED are terminal
    """
    if current in TERMINAL_STATUSES:
        return False
    if new == OrderStatus.CANCELLED:
        return True
    return STATUS_ORDER[new] > STATUS_ORDER[current]


def is_open(status: OrderStatus) -> bool:
    """True while the order still commits the distributor to its lines."""
    return status not in TERMINAL_STATUSES


class OrderLineCreate(BaseSchema):
    """Requested line: an active-catalog product and a bottle count."""

    product_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0, description="Bottles ordered")


class OrderCreate(BaseSchema):
    """Place a new order."""

    customer: str = Field(..., min_length=1, max_length=200)
    lines: list[OrderLineCreate] = Field(..., min_length=1)


class OrderLine(BaseSchema):
    """Snapshot of a product at order time."""

    product_id: str
    supplier: str
    producer: Optional[str] = None
    product_name: Optional[str] = None
    vintage: Optional[str] = None
    pack_size: Optional[int] = None
    bottle_size_ml: Optional[Decimal] = None
    unit_price: Decimal = Field(..., description="Frontline price per bottle at order time")
    quantity: int = Field(..., gt=0)
    line_total: Decimal


class Order(BaseSchema, TimestampMixin):
    """Stored order."""

    id: str
    customer: str
    lines: list[OrderLine]
    total: Decimal
    status: OrderStatus = OrderStatus.PENDING

    def product_ids(self) -> set[str]:
        return {line.product_id for line in self.lines}


class OrderStatusUpdate(BaseSchema):
    """Move an order to a new status."""

    status: OrderStatus


class OrderListResponse(BaseModel):
    """List of orders."""

    data: list[Order]
    total: int
