"""
Order API routes.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.order import (
    Order,
    OrderCreate,
    OrderListResponse,
    OrderStatus,
    OrderStatusUpdate,
)
from services.order_service import get_order_service
from exceptions import (
    AppError,
    InvalidStatusTransitionError,
    OrderNotFoundError,
    ProductNotFoundError,
)

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# ROUTES
# ===================

@router.get("", response_model=OrderListResponse)
async def list_orders(
    status: Optional[OrderStatus] = Query(None, description="Filter by status"),
    customer: Optional[str] = Query(None, description="Filter by customer")
):
    """List orders, newest first."""
    try:
        service = get_order_service()
        orders = service.get_all(status=status, customer=customer)
        return OrderListResponse(data=orders, total=len(orders))

    except Exception as e:
        return handle_error(e)


@router.post("", response_model=Order, status_code=201)
async def create_order(data: OrderCreate):
    """
    Place an order from active-catalog products.

    Raises:
        404: A product is not in the active catalog
    """
    try:
        service = get_order_service()
        return service.create(data)

    except ProductNotFoundError as e:
        return handle_error(e)
    except Exception as e:
        return handle_error(e)


@router.get("/{order_id}", response_model=Order)
async def get_order(order_id: str):
    """
    Raises:
        404: Order not found
    """
    try:
        service = get_order_service()
        return service.get_by_id(order_id)

    except OrderNotFoundError as e:
        return handle_error(e)
    except Exception as e:
        return handle_error(e)


@router.patch("/{order_id}/status", response_model=Order)
async def update_order_status(order_id: str, data: OrderStatusUpdate):
    """
    Move an order forward, or cancel it.

    Raises:
        404: Order not found
        422: Backward move or order already completed/cancelled
    """
    try:
        service = get_order_service()
        return service.update_status(order_id, data.status)

    except (OrderNotFoundError, InvalidStatusTransitionError) as e:
        return handle_error(e)
    except Exception as e:
        return handle_error(e)
