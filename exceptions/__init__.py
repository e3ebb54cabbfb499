"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    ExternalServiceError,
    DatabaseError,

    # Catalog
    ProductNotFoundError,
    InvalidFormulaProfileError,

    # Imports
    PriceListParseError,
    PDFConversionError,
    PreviewNotFoundError,
    MappingTemplateNotFoundError,

    # Suppliers
    SupplierNotFoundError,
    SupplierExistsError,

    # Orders
    OrderNotFoundError,
    InvalidStatusTransitionError,
    SpecialOrderLineNotFoundError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "ExternalServiceError",
    "DatabaseError",

    # Catalog
    "ProductNotFoundError",
    "InvalidFormulaProfileError",

    # Imports
    "PriceListParseError",
    "PDFConversionError",
    "PreviewNotFoundError",
    "MappingTemplateNotFoundError",

    # Suppliers
    "SupplierNotFoundError",
    "SupplierExistsError",

    # Orders
    "OrderNotFoundError",
    "InvalidStatusTransitionError",
    "SpecialOrderLineNotFoundError",
]
