"""
Product schemas for the active catalog and the discontinued archive.
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal

from models.base import BaseSchema
from models.formula import FormulaProfile


class Origin(BaseSchema):
    """Country / region / appellation hierarchy."""

    country: Optional[str] = None
    region: Optional[str] = None
    appellation: Optional[str] = None


class PricingResult(BaseSchema):
    """Sell prices derived from cost by the pricing formula."""

    frontline: Decimal = Field(..., description="Customer-facing price per bottle")
    frontline_case: Decimal = Field(..., description="Frontline price per case")
    wholesale_bottle: Decimal = Field(..., description="Wholesale price per bottle")
    wholesale_case: Decimal = Field(..., description="Wholesale price per case")
    srp: Decimal = Field(..., description="Suggested retail price per bottle")
    laid_in: Decimal = Field(..., description="Landed cost per case (FOB + shipping + tax)")
    formula_used: FormulaProfile = Field(..., description="Profile selected from the category")
    formula_version: int = Field(..., description="FormulaConfig version used")


class Product(BaseSchema):
    """
    Catalog product.

    Canonical fields come from the mapped price-list columns. Columns the
    mapping does not claim are kept in extra_fields under their original
    header text.
    """

    id: str = Field(..., description="Product id")
    supplier: str = Field(..., description="Supplier key (slug)")
    supplier_name: str = Field(..., description="Supplier display name")
    item_code: Optional[str] = Field(None, description="Supplier item code / SKU")
    producer: Optional[str] = Field(None, description="Producer, winery or brand")
    product_name: Optional[str] = Field(None, description="Product name")
    vintage: Optional[str] = Field(None, description="Vintage year or NV")
    pack_size: Optional[int] = Field(None, ge=1, description="Bottles per case")
    bottle_size_ml: Optional[Decimal] = Field(None, gt=0, description="Bottle size in ml")
    cost: Optional[Decimal] = Field(None, ge=0, description="FOB cost per case")
    category: Optional[str] = Field(None, description="Category text from the price list")
    origin: Origin = Field(default_factory=Origin)
    pricing: Optional[PricingResult] = Field(None, description="Computed sell prices")
    imported_at: datetime = Field(..., description="When the row was imported")
    extra_fields: dict[str, str] = Field(
        default_factory=dict,
        description="Free-form values keyed by original header"
    )

    @property
    def display_name(self) -> str:
        """Name used in warnings and order lines."""
        return self.product_name or self.producer or "unknown product"

    @property
    def formula_version(self) -> Optional[int]:
        """Formula version the stored prices were computed with."""
        return self.pricing.formula_version if self.pricing else None


class ProductUpdate(BaseSchema):
    """
    Manual catalog edit.

    All fields optional - only provided fields are updated. Any edit
    triggers price recomputation.
    """

    item_code: Optional[str] = None
    producer: Optional[str] = None
    product_name: Optional[str] = None
    vintage: Optional[str] = None
    pack_size: Optional[int] = Field(None, ge=1)
    bottle_size_ml: Optional[Decimal] = Field(None, gt=0)
    cost: Optional[Decimal] = Field(None, ge=0)
    category: Optional[str] = None
    origin: Optional[Origin] = None
    extra_fields: Optional[dict[str, str]] = None


class DiscontinuedEntry(Product):
    """Product withdrawn from sale but kept because something still references it."""

    discontinued_at: datetime = Field(..., description="When the product left the catalog")
    replaced_by: Optional[str] = Field(
        None,
        description="Supplier key of the import that replaced it (None for manual removal)"
    )


class ProductListResponse(BaseModel):
    """List of products with pagination."""

    data: list[Product]
    total: int
    page: int
    page_size: int
    total_pages: int


class DiscontinuedListResponse(BaseModel):
    """Discontinued archive listing."""

    data: list[DiscontinuedEntry]
    total: int


class ProductDeleteResult(BaseModel):
    """Outcome of a manual product removal."""

    product_id: str
    archived: bool = Field(..., description="True if moved to the archive instead of deleted")
