"""
Price-list import API routes.

Two-step upload: preview returns the proposed supplier and column mapping,
confirm runs the import with the operator's edits.
"""

from fastapi import APIRouter, UploadFile, File, Form
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.column_mapping import ColumnMapping, MappingTemplateListResponse
from models.ingest import ConfirmImportRequest, ImportPreviewResponse, ImportSummary
from services.import_service import get_import_service
from exceptions import (
    AppError,
    MappingTemplateNotFoundError,
    PDFConversionError,
    PreviewNotFoundError,
    PriceListParseError,
    ValidationError,
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
# UPLOAD FLOW
# ===================

@router.post("/preview", response_model=ImportPreviewResponse)
async def preview_import(
    file: UploadFile = File(..., description="Price list (.xlsx, .xls, .csv or .pdf)"),
    supplier_name: Optional[str] = Form(None, description="Supplier name; guessed from the filename if omitted")
):
    """
    Read a price list and propose supplier and column mapping.

    A saved mapping for the supplier is replayed as-is.

    Raises:
        422: File could not be read
        503: PDF conversion failed
    """
    try:
        content = await file.read()
        if not content:
            raise ValidationError(
                message="Uploaded file is empty",
                details={"filename": file.filename}
            )

        service = get_import_service()
        return service.preview(content, file.filename or "upload", supplier_name)

    except (PriceListParseError, PDFConversionError) as e:
        return handle_error(e)
    except Exception as e:
        return handle_error(e)


@router.post("/{preview_id}/confirm", response_model=ImportSummary)
async def confirm_import(preview_id: str, data: ConfirmImportRequest):
    """
    Run the import for a preview.

    Raises:
        404: Preview expired or not found
    """
    try:
        service = get_import_service()
        return service.confirm(preview_id, data)

    except PreviewNotFoundError as e:
        return handle_error(e)
    except Exception as e:
        return handle_error(e)


@router.delete("/{preview_id}", status_code=204)
async def cancel_import(preview_id: str):
    """
    Discard a preview.

    Raises:
        404: Preview expired or not found
    """
    try:
        service = get_import_service()
        service.cancel(preview_id)
        return None

    except PreviewNotFoundError as e:
        return handle_error(e)
    except Exception as e:
        return handle_error(e)


# ===================
# MAPPING TEMPLATES
# ===================

@router.get("/templates", response_model=MappingTemplateListResponse)
async def list_templates():
    """Saved column mappings keyed by supplier key."""
    try:
        service = get_import_service()
        templates = service.get_templates()
        return MappingTemplateListResponse(data=templates, total=len(templates))

    except Exception as e:
        return handle_error(e)


@router.put("/templates/{supplier_key}", response_model=ColumnMapping)
async def save_template(supplier_key: str, mapping: ColumnMapping):
    """Replace a supplier's saved mapping."""
    try:
        service = get_import_service()
        return service.save_template(supplier_key, mapping)

    except Exception as e:
        return handle_error(e)


@router.delete("/templates/{supplier_key}", status_code=204)
async def delete_template(supplier_key: str):
    """
    Forget a supplier's mapping; the next upload is auto-detected.

    Raises:
        404: No template for this supplier
    """
    try:
        service = get_import_service()
        service.delete_template(supplier_key)
        return None

    except MappingTemplateNotFoundError as e:
        return handle_error(e)
    except Exception as e:
        return handle_error(e)
