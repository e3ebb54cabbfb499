"""
Supplier API routes.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
import structlog

from models.supplier import (
    SupplierListResponse,
    SupplierRenameRequest,
    SupplierRenameResult,
    SupplierSuggestion,
)
from services.supplier_service import get_supplier_service
from exceptions import AppError, SupplierExistsError, SupplierNotFoundError

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

@router.get("", response_model=SupplierListResponse)
async def list_suppliers():
    """Suppliers with product and archive counts."""
    try:
        suppliers = get_supplier_service().get_all()
        return SupplierListResponse(data=suppliers, total=len(suppliers))
    except Exception as e:
        return handle_error(e)


@router.get("/suggest", response_model=SupplierSuggestion)
async def suggest_supplier(
    filename: str = Query(..., min_length=1, description="Upload filename")
):
    """Guess a supplier name from a filename."""
    try:
        return get_supplier_service().suggest(filename)
    except Exception as e:
        return handle_error(e)


@router.post("/{supplier_key}/rename", response_model=SupplierRenameResult)
async def rename_supplier(supplier_key: str, data: SupplierRenameRequest):
    """
    Rename a supplier everywhere it appears.

    Raises:
        404: Supplier not found
        409: New name belongs to another supplier and merge was not set
    """
    try:
        return get_supplier_service().rename(supplier_key, data.new_name, merge=data.merge)
    except (SupplierNotFoundError, SupplierExistsError) as e:
        return handle_error(e)
    except Exception as e:
        return handle_error(e)
