"""
Price-list import schemas: preview, confirmation, and summary.
"""

from pydantic import BaseModel, Field
from typing import Any, Optional

from models.base import BaseSchema
from models.column_mapping import ColumnMapping


class DataQualityWarning(BaseModel):
    """
    Non-blocking problem found on one price-list row.

    Warnings are reported in the import summary and never stop an import.
    """

    row: int = Field(..., description="1-based spreadsheet row")
    field: str = Field(..., description="cost, pack size, or category")
    product_name: str

    @property
    def message(self) -> str:
        return f"Row {self.row}: Missing {self.field} for {self.product_name}"


class ImportPreviewResponse(BaseModel):
    """What the operator confirms before an import runs."""

    preview_id: str
    filename: str
    supplier_name: str = Field(..., description="Suggested supplier name")
    supplier_key: str
    headers: list[str]
    mapping: ColumnMapping
    extra_headers: dict[int, str] = Field(default_factory=dict)
    has_template: bool
    sample_rows: list[list[Any]] = Field(default_factory=list)
    row_count: int = Field(..., description="Data rows below the header row")


class ConfirmImportRequest(BaseSchema):
    """Operator-confirmed supplier and mapping."""

    supplier_name: str = Field(..., min_length=1, max_length=200)
    mapping: Optional[ColumnMapping] = Field(
        None,
        description="Edited mapping; the previewed mapping is used when omitted"
    )


class ImportSummary(BaseModel):
    """Result of one import run."""

    supplier_key: str
    supplier_name: str
    filename: Optional[str] = None
    imported: int = Field(..., description="Products in the new batch")
    replaced: int = Field(..., description="Old rows for this supplier removed from the catalog")
    archived: int = Field(..., description="Old rows moved to the discontinued archive")
    dropped: int = Field(..., description="Old unreferenced rows deleted")
    pruned: int = Field(0, description="Archive entries removed by the retention policy")
    skipped_rows: int = Field(0, description="Rows without producer or product name")
    warnings: list[str] = Field(default_factory=list, description="Warning messages, empty when there are more than the display limit")
    warning_count: int = 0
    template_saved: bool = True
    message: str
