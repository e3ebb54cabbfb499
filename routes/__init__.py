"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.catalog import router as catalog_router
from routes.imports import router as imports_router
from routes.formulas import router as formulas_router
from routes.orders import router as orders_router
from routes.special_orders import router as special_orders_router
from routes.suppliers import router as suppliers_router

__all__ = [
    "catalog_router",
    "imports_router",
    "formulas_router",
    "orders_router",
    "special_orders_router",
    "suppliers_router",
]
