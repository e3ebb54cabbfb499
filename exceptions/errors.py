"""
Custom exception classes for the application.

Every error raised across a service boundary inherits from AppError so
routes can turn it into the standard error envelope.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "PRODUCT_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with existing resource (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# CATALOG ERRORS
# ===================

class ProductNotFoundError(NotFoundError):
    """Product not found in the active catalog."""

    def __init__(self, product_id: str):
        super().__init__(
            resource="Product",
            identifier=product_id,
            code="PRODUCT_NOT_FOUND"
        )


class InvalidFormulaProfileError(ValidationError):
    """Unknown pricing formula profile."""

    def __init__(self, profile: str):
        valid = ["wine", "spirits", "non_alcoholic"]
        super().__init__(
            code="FORMULA_INVALID_PROFILE",
            message="Formula profile must be wine, spirits, or non_alcoholic",
            details={"provided": profile, "valid": valid}
        )


# ===================
# IMPORT ERRORS
# ===================

class PriceListParseError(ValidationError):
    """Price list file could not be read into a table."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="PRICE_LIST_PARSE_ERROR",
            message=message,
            details=details
        )


class PDFConversionError(ExternalServiceError):
    """External PDF-to-table converter failed or produced nothing."""

    def __init__(self, filename: str, diagnostic: str, details: Optional[dict] = None):
        super().__init__(
            service="pdf_converter",
            message=f"Could not convert {filename} to a table",
            details={"filename": filename, "diagnostic": diagnostic, **(details or {})}
        )


class PreviewNotFoundError(NotFoundError):
    """Upload preview expired or never existed."""

    def __init__(self, preview_id: str):
        super().__init__(
            resource="Import preview",
            identifier=preview_id,
            code="IMPORT_PREVIEW_NOT_FOUND"
        )


class MappingTemplateNotFoundError(NotFoundError):
    """No saved column mapping for a supplier."""

    def __init__(self, supplier_key: str):
        super().__init__(
            resource="Mapping template",
            identifier=supplier_key,
            code="MAPPING_TEMPLATE_NOT_FOUND"
        )


# ===================
# SUPPLIER ERRORS
# ===================

class SupplierNotFoundError(NotFoundError):
    """Supplier key has no products, archive entries, or template."""

    def __init__(self, supplier_key: str):
        super().__init__(
            resource="Supplier",
            identifier=supplier_key,
            code="SUPPLIER_NOT_FOUND"
        )


class SupplierExistsError(ConflictError):
    """Rename target already exists and merge was not requested."""

    def __init__(self, supplier_key: str):
        super().__init__(
            code="SUPPLIER_KEY_EXISTS",
            message="A supplier with this name already exists; pass merge=true to combine them",
            details={"supplier_key": supplier_key}
        )


# ===================
# ORDER ERRORS
# ===================

class OrderNotFoundError(NotFoundError):
    """Order not found."""

    def __init__(self, order_id: str):
        super().__init__(
            resource="Order",
            identifier=order_id,
            code="ORDER_NOT_FOUND"
        )


class InvalidStatusTransitionError(ValidationError):
    """Invalid order status transition."""

    def __init__(self, current_status: str, new_status: str):
        super().__init__(
            code="INVALID_STATUS_TRANSITION",
            message=f"Cannot transition from {current_status} to {new_status}",
            details={
                "current_status": current_status,
                "new_status": new_status,
                "reason": "Status can only move forward, and completed/cancelled are terminal"
            }
        )


class SpecialOrderLineNotFoundError(NotFoundError):
    """Product is not on the customer's special-order list."""

    def __init__(self, customer: str, product_id: str):
        super().__init__(
            resource="Special order line",
            identifier=f"{customer}/{product_id}",
            code="SPECIAL_ORDER_LINE_NOT_FOUND"
        )
