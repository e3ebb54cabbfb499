"""
Supplier identity schemas.

A supplier is identified by the slug of its confirmed name; the display
name travels with each product.
"""

from pydantic import BaseModel, Field

from models.base import BaseSchema


class SupplierSummary(BaseModel):
    """Supplier with catalog counts."""

    key: str
    name: str
    product_count: int = 0
    discontinued_count: int = 0
    has_template: bool = False


class SupplierListResponse(BaseModel):
    """List of suppliers."""

    data: list[SupplierSummary]
    total: int


class SupplierRenameRequest(BaseSchema):
    """Rename a supplier, optionally merging into an existing one."""

    new_name: str = Field(..., min_length=1, max_length=200)
    merge: bool = Field(
        False,
        description="Required when the new name's key already belongs to another supplier"
    )


class SupplierRenameResult(BaseModel):
    """Outcome of a rename or merge."""

    old_key: str
    new_key: str
    new_name: str
    products_moved: int
    discontinued_moved: int
    merged: bool
    template_moved: bool


class SupplierSuggestion(BaseModel):
    """Supplier name guessed from an upload filename."""

    filename: str
    supplier_name: str
    supplier_key: str
