"""
Column mapping schemas.

A mapping ties each canonical product field to a price-list column index.
None means the field is not present in the sheet.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from enum import Enum


class CanonicalField(str, Enum):
    """Canonical product fields a price-list column can feed."""
    ITEM_CODE = "item_code"
    PRODUCER = "producer"
    PRODUCT_NAME = "product_name"
    VINTAGE = "vintage"
    PACK_SIZE = "pack_size"
    BOTTLE_SIZE = "bottle_size"
    CATEGORY = "category"
    COST = "cost"
    COUNTRY = "country"
    REGION = "region"
    APPELLATION = "appellation"


class ColumnMapping(BaseModel):
    """
    Saved or proposed mapping for one supplier's price list.

    extra_columns lists the unclaimed column indices kept as free-form
    extra fields on each imported product.
    """

    fields: dict[CanonicalField, Optional[int]] = Field(default_factory=dict, validate_default=True)
    extra_columns: list[int] = Field(default_factory=list)

    @field_validator("fields")
    @classmethod
    def fill_unmapped(cls, v: dict) -> dict:
        """Every canonical field present; negative indices mean unmapped."""
        filled = {}
        for canonical in CanonicalField:
            index = v.get(canonical)
            filled[canonical] = index if index is not None and index >= 0 else None
        return filled

    @field_validator("extra_columns")
    @classmethod
    def dedupe_extras(cls, v: list[int]) -> list[int]:
        return sorted({i for i in v if i >= 0})

    def index_of(self, canonical: CanonicalField) -> Optional[int]:
        return self.fields.get(canonical)

    def claimed_columns(self) -> set[int]:
        return {i for i in self.fields.values() if i is not None}


class ColumnMappingResult(BaseModel):
    """Mapping plus the headers no canonical field claimed."""

    mapping: ColumnMapping
    extra_headers: dict[int, str] = Field(default_factory=dict)
    from_template: bool = Field(False, description="True if a saved mapping was replayed")


class MappingTemplateListResponse(BaseModel):
    """Saved mappings keyed by supplier key."""

    data: dict[str, ColumnMapping]
    total: int
