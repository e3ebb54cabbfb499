"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    TimestampMixin,
)
from models.formula import (
    FormulaProfile,
    FormulaParameters,
    FormulaParametersUpdate,
    FormulaConfig,
    PricePreviewRequest,
    DEFAULT_PROFILES,
)
from models.product import (
    Origin,
    PricingResult,
    Product,
    ProductUpdate,
    DiscontinuedEntry,
    ProductListResponse,
    DiscontinuedListResponse,
    ProductDeleteResult,
)
from models.column_mapping import (
    CanonicalField,
    ColumnMapping,
    ColumnMappingResult,
    MappingTemplateListResponse,
)
from models.discontinued import (
    RetentionMode,
    RetentionPolicy,
    PruneResult,
)
from models.order import (
    OrderStatus,
    OrderLineCreate,
    OrderCreate,
    OrderLine,
    Order,
    OrderStatusUpdate,
    OrderListResponse,
)
from models.special_order import (
    SpecialOrderLineStatus,
    SpecialOrderLineUpsert,
    SpecialOrderLine,
    SpecialOrderList,
    SpecialOrderListResponse,
)
from models.ingest import (
    DataQualityWarning,
    ImportPreviewResponse,
    ConfirmImportRequest,
    ImportSummary,
)
from models.supplier import (
    SupplierSummary,
    SupplierListResponse,
    SupplierRenameRequest,
    SupplierRenameResult,
    SupplierSuggestion,
)

__all__ = [
    # Base
    "BaseSchema",
    "TimestampMixin",
    # Formula
    "FormulaProfile",
    "FormulaParameters",
    "FormulaParametersUpdate",
    "FormulaConfig",
    "PricePreviewRequest",
    "DEFAULT_PROFILES",
    # Product
    "Origin",
    "PricingResult",
    "Product",
    "ProductUpdate",
    "DiscontinuedEntry",
    "ProductListResponse",
    "DiscontinuedListResponse",
    "ProductDeleteResult",
    # Column mapping
    "CanonicalField",
    "ColumnMapping",
    "ColumnMappingResult",
    "MappingTemplateListResponse",
    # Discontinued
    "RetentionMode",
    "RetentionPolicy",
    "PruneResult",
    # Order
    "OrderStatus",
    "OrderLineCreate",
    "OrderCreate",
    "OrderLine",
    "Order",
    "OrderStatusUpdate",
    "OrderListResponse",
    # Special order
    "SpecialOrderLineStatus",
    "SpecialOrderLineUpsert",
    "SpecialOrderLine",
    "SpecialOrderList",
    "SpecialOrderListResponse",
    # Ingest
    "DataQualityWarning",
    "ImportPreviewResponse",
    "ConfirmImportRequest",
    "ImportSummary",
    # Supplier
    "SupplierSummary",
    "SupplierListResponse",
    "SupplierRenameRequest",
    "SupplierRenameResult",
    "SupplierSuggestion",
]
