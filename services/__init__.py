"""
Business logic services.

Each service handles one domain area.
"""

from services.storage_service import StorageService, get_storage_service
from services.formula_service import FormulaService, get_formula_service
from services.catalog_service import CatalogService, get_catalog_service
from services.order_service import OrderService, get_order_service
from services.special_order_service import SpecialOrderService, get_special_order_service
from services.supplier_service import SupplierService, get_supplier_service
from services.pdf_converter_service import PdfConverterService, get_pdf_converter_service
from services.import_service import ImportService, get_import_service
from services.column_mapper import map_columns
from services.pricing_service import compute_price
from services.reconciler import reconcile_catalog, ReconcileResult

__all__ = [
    "StorageService",
    "get_storage_service",
    "FormulaService",
    "get_formula_service",
    "CatalogService",
    "get_catalog_service",
    "OrderService",
    "get_order_service",
    "SpecialOrderService",
    "get_special_order_service",
    "SupplierService",
    "get_supplier_service",
    "PdfConverterService",
    "get_pdf_converter_service",
    "ImportService",
    "get_import_service",
    "map_columns",
    "compute_price",
    "reconcile_catalog",
    "ReconcileResult",
]
