"""
Special-order list API routes.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from models.special_order import (
    SpecialOrderLineUpsert,
    SpecialOrderList,
    SpecialOrderListResponse,
)
from services.special_order_service import get_special_order_service
from exceptions import AppError, ProductNotFoundError, SpecialOrderLineNotFoundError

logger = structlog.get_logger(__name__)

router = APIRouter()


def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
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


@router.get("", response_model=SpecialOrderListResponse)
async def list_special_orders():
    """All customers' special-order lists."""
    try:
        lists = get_special_order_service().get_all()
        return SpecialOrderListResponse(data=lists, total=len(lists))
    except Exception as e:
        return handle_error(e)


@router.get("/{customer}", response_model=SpecialOrderList)
async def get_special_order_list(customer: str):
    """One customer's list (empty if none)."""
    try:
        return get_special_order_service().get_for_customer(customer)
    except Exception as e:
        return handle_error(e)


@router.put("/{customer}/lines/{product_id}", response_model=SpecialOrderList)
async def upsert_special_order_line(customer: str, product_id: str, data: SpecialOrderLineUpsert):
    """
    Add or change a line.

    Raises:
        404: Product is neither active nor archived
    """
    try:
        return get_special_order_service().upsert_line(customer, product_id, data)
    except ProductNotFoundError as e:
        return handle_error(e)
    except Exception as e:
        return handle_error(e)


@router.delete("/{customer}/lines/{product_id}", response_model=SpecialOrderList)
async def remove_special_order_line(customer: str, product_id: str):
    """
    Raises:
        404: No such line
    """
    try:
        return get_special_order_service().remove_line(customer, product_id)
    except SpecialOrderLineNotFoundError as e:
        return handle_error(e)
    except Exception as e:
        return handle_error(e)
