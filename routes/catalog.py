"""
Catalog API routes.

Active catalog reads and manual edits, the discontinued archive, and the
admin reset.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.discontinued import PruneResult, RetentionPolicy
from models.product import (
    DiscontinuedListResponse,
    Product,
    ProductDeleteResult,
    ProductListResponse,
    ProductUpdate,
)
from services.catalog_service import get_catalog_service
from exceptions import AppError, ProductNotFoundError

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
# ACTIVE CATALOG
# ===================

@router.get("/products", response_model=ProductListResponse)
async def list_products(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=500, description="Items per page"),
    search: Optional[str] = Query(None, description="Text search over producer, name, vintage, supplier"),
    supplier: Optional[str] = Query(None, description="Filter by supplier key")
):
    """
    List active products with current prices.

    Products priced under an older formula version are repriced first.
    """
    try:
        service = get_catalog_service()
        products, total = service.get_all(
            page=page,
            page_size=page_size,
            search=search,
            supplier=supplier
        )
        total_pages = (total + page_size - 1) // page_size

        return ProductListResponse(
            data=products,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=total_pages
        )

    except Exception as e:
        return handle_error(e)


@router.get("/products/{product_id}", response_model=Product)
async def get_product(product_id: str):
    """
    Get a single active product.

    Raises:
        404: Product not found
    """
    try:
        service = get_catalog_service()
        return service.get_by_id(product_id)

    except ProductNotFoundError as e:
        return handle_error(e)
    except Exception as e:
        return handle_error(e)


@router.patch("/products/{product_id}", response_model=Product)
async def update_product(product_id: str, data: ProductUpdate):
    """
    Edit a product. Prices are recomputed.

    Raises:
        404: Product not found
        422: Validation error
    """
    try:
        service = get_catalog_service()
        return service.update(product_id, data)

    except ProductNotFoundError as e:
        return handle_error(e)
    except Exception as e:
        return handle_error(e)


@router.delete("/products/{product_id}", response_model=ProductDeleteResult)
async def delete_product(product_id: str):
    """
    Remove a product from the catalog.

    Products still referenced by an open order or a special-order list
    are archived instead of deleted.

    Raises:
        404: Product not found
    """
    try:
        service = get_catalog_service()
        return service.delete(product_id)

    except ProductNotFoundError as e:
        return handle_error(e)
    except Exception as e:
        return handle_error(e)


# ===================
# DISCONTINUED ARCHIVE
# ===================

@router.get("/discontinued", response_model=DiscontinuedListResponse)
async def list_discontinued(
    supplier: Optional[str] = Query(None, description="Filter by supplier key")
):
    """List archived products, newest first."""
    try:
        service = get_catalog_service()
        entries = service.get_discontinued(supplier=supplier)
        return DiscontinuedListResponse(data=entries, total=len(entries))

    except Exception as e:
        return handle_error(e)


@router.post("/discontinued/prune", response_model=PruneResult)
async def prune_discontinued(policy: Optional[RetentionPolicy] = None):
    """
    Prune the archive.

    Uses the configured retention policy unless one is posted.
    Live-referenced entries are never pruned.
    """
    try:
        service = get_catalog_service()
        return service.prune_discontinued(policy)

    except Exception as e:
        return handle_error(e)


# ===================
# ADMIN
# ===================

@router.delete("")
async def reset_catalog():
    """
    Clear products, archive, orders, special orders and formulas.

    Mapping templates are kept.
    """
    try:
        service = get_catalog_service()
        cleared = service.reset_all()
        return {"status": "reset", "cleared": cleared}

    except Exception as e:
        return handle_error(e)
