"""
Special-order list schemas.

Each customer keeps one live, mutable list of products they want the
distributor to source. Every line is a live reference to its product,
whatever the line status.
"""

from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum
from datetime import datetime

from models.base import BaseSchema


class SpecialOrderLineStatus(str, Enum):
    """Progress of one special-order line."""
    REQUESTED = "requested"
    ORDERED = "ordered"
    ARRIVED = "arrived"
    CANCELLED = "cancelled"


class SpecialOrderLineUpsert(BaseSchema):
    """Add or change a line on a customer's list."""

    quantity: int = Field(..., gt=0, description="Bottles wanted")
    status: SpecialOrderLineStatus = SpecialOrderLineStatus.REQUESTED
    note: Optional[str] = Field(None, max_length=500)


class SpecialOrderLine(BaseSchema):
    """One line on a special-order list."""

    product_id: str
    quantity: int = Field(..., gt=0)
    status: SpecialOrderLineStatus = SpecialOrderLineStatus.REQUESTED
    note: Optional[str] = None
    added_at: datetime
    updated_at: Optional[datetime] = None


class SpecialOrderList(BaseSchema):
    """A customer's special-order list keyed by product id."""

    customer: str
    lines: dict[str, SpecialOrderLine] = Field(default_factory=dict)
    updated_at: Optional[datetime] = None


class SpecialOrderListResponse(BaseModel):
    """All customers' lists."""

    data: list[SpecialOrderList]
    total: int
