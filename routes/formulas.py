"""
Pricing formula API routes.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from models.formula import FormulaConfig, FormulaParametersUpdate, PricePreviewRequest
from models.product import PricingResult
from services.formula_service import get_formula_service
from exceptions import AppError, InvalidFormulaProfileError

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


@router.get("", response_model=FormulaConfig)
async def get_formulas():
    """Current formula profiles and version."""
    try:
        return get_formula_service().get_config()
    except Exception as e:
        return handle_error(e)


@router.put("/{profile}", response_model=FormulaConfig)
async def update_formula(profile: str, data: FormulaParametersUpdate):
    """
    Change one profile. Bumps the version; catalog prices are recomputed
    on the next catalog read.

    Raises:
        422: Unknown profile or invalid parameter
    """
    try:
        return get_formula_service().update_profile(profile, data)
    except InvalidFormulaProfileError as e:
        return handle_error(e)
    except Exception as e:
        return handle_error(e)


@router.post("/reset", response_model=FormulaConfig)
async def reset_formulas():
    """Restore default parameters."""
    try:
        return get_formula_service().reset()
    except Exception as e:
        return handle_error(e)


@router.post("/preview", response_model=PricingResult)
async def preview_price(data: PricePreviewRequest):
    """Price a hypothetical product with the current formulas."""
    try:
        return get_formula_service().preview_price(data)
    except Exception as e:
        return handle_error(e)
