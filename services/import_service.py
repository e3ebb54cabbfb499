"""
Price-list import orchestration.

Upload flow:
    1. preview()  - read the file, suggest a supplier, map columns
    2. confirm()  - operator confirms supplier name and mapping
    3. run_import() - parse, price, reconcile, prune, persist

Data-quality problems never block an import; they are reported as
warnings in the summary.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Sequence
import structlog

from config import settings
from models.column_mapping import CanonicalField, ColumnMapping
from models.discontinued import RetentionPolicy
from models.ingest import (
    ConfirmImportRequest,
    DataQualityWarning,
    ImportPreviewResponse,
    ImportSummary,
)
from models.product import DiscontinuedEntry, Origin, Product
from parsers.price_list_parser import is_pdf, read_price_list
from services.catalog_service import apply_retention, retention_policy_from_settings
from services.column_mapper import map_columns
from services.formula_service import FormulaService
from services.pdf_converter_service import PdfConverterService, get_pdf_converter_service
from services.preview_cache_service import delete_preview, retrieve_preview, store_preview
from services.pricing_service import compute_price, parse_bottle_size_ml, parse_decimal, parse_pack_size
from services.reconciler import reconcile_catalog
from services.reference_service import live_referenced_ids
from services.storage_service import (
    StorageService,
    get_storage_service,
    catalog_lock,
    PRODUCTS_KEY,
    DISCONTINUED_KEY,
    MAPPING_TEMPLATES_KEY,
)
from services.supplier_service import suggest_supplier_name
from utils.text_utils import cell_text, clean_display_name, slugify
from exceptions import (
    AppError,
    DatabaseError,
    MappingTemplateNotFoundError,
    PreviewNotFoundError,
    PriceListParseError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

PREVIEW_SAMPLE_ROWS = 5


@dataclass
class ParsedRows:
    """Products read from a price list, before pricing."""
    products: list[Product] = field(default_factory=list)
    warnings: list[DataQualityWarning] = field(default_factory=list)
    skipped_rows: int = 0


def _cell(row: Sequence[Any], index: Optional[int]) -> Any:
    if index is None or index >= len(row):
        return None
    return row[index]


def parse_rows(
    rows: list[list[Any]],
    mapping: ColumnMapping,
    supplier_key: str,
    supplier_name: str,
    now: Optional[datetime] = None,
) -> ParsedRows:
    """
    Turn raw rows into unpriced products.

    Row 0 is the header row. Blank rows are skipped silently; rows with
    neither producer nor product name are skipped and counted. Missing
    cost, pack size or category produce a warning on rows that are kept.

    Args:
        rows: Raw rows, header first
        mapping: Confirmed column mapping
        supplier_key: Key every product is filed under
        supplier_name: Display name stored on every product
        now: Import timestamp
    """
    now = now or datetime.now(timezone.utc)
    headers = rows[0] if rows else []
    result = ParsedRows()

    def text(row, canonical: CanonicalField) -> Optional[str]:
        return cell_text(_cell(row, mapping.index_of(canonical)))

    for row_number, row in enumerate(rows[1:], start=2):
        if not row or all(cell_text(v) is None for v in row):
            continue

        producer = text(row, CanonicalField.PRODUCER)
        product_name = text(row, CanonicalField.PRODUCT_NAME)
        if not producer and not product_name:
            result.skipped_rows += 1
            continue

        cost = parse_decimal(_cell(row, mapping.index_of(CanonicalField.COST)))
        if cost is not None and cost < 0:
            cost = None
        pack_size = parse_pack_size(_cell(row, mapping.index_of(CanonicalField.PACK_SIZE)))
        category = text(row, CanonicalField.CATEGORY)

        extra_fields = {}
        for index in mapping.extra_columns:
            header = cell_text(_cell(headers, index))
            value = cell_text(_cell(row, index))
            if header and value is not None:
                extra_fields[header] = value

        product = Product(
            id=str(uuid.uuid4()),
            supplier=supplier_key,
            supplier_name=supplier_name,
            item_code=text(row, CanonicalField.ITEM_CODE),
            producer=producer,
            product_name=product_name,
            vintage=text(row, CanonicalField.VINTAGE),
            pack_size=pack_size,
            bottle_size_ml=parse_bottle_size_ml(
                _cell(row, mapping.index_of(CanonicalField.BOTTLE_SIZE))
            ),
            cost=cost,
            category=category,
            origin=Origin(
                country=text(row, CanonicalField.COUNTRY),
                region=text(row, CanonicalField.REGION),
                appellation=text(row, CanonicalField.APPELLATION),
            ),
            imported_at=now,
            extra_fields=extra_fields,
        )
        result.products.append(product)

        name = product.product_name or "unknown product"
        if not cost:
            result.warnings.append(DataQualityWarning(row=row_number, field="cost", product_name=name))
        if pack_size is None:
            result.warnings.append(DataQualityWarning(row=row_number, field="pack size", product_name=name))
        if not category:
            result.warnings.append(DataQualityWarning(row=row_number, field="category", product_name=name))

    return result


def build_message(
    imported: int,
    filename: Optional[str],
    supplier_name: str,
    replaced: int,
    archived: int,
    pruned: int,
    warnings: list[str],
    display_limit: int,
) -> str:
    """Human-readable import summary with warnings folded in."""
    source = f" from {filename}" if filename else ""
    message = f"Successfully uploaded {imported} products{source}. "

    if replaced:
        message += f"{replaced} old products removed"
        if archived:
            message += f" ({archived} moved to discontinued as open orders still reference them)"
        message += ". "
    if pruned:
        message += f"{pruned} discontinued products pruned. "

    message += f"Mapping template saved for {supplier_name}."

    if warnings and len(warnings) <= display_limit:
        message += "\n\nWarnings:\n" + "\n".join(warnings)
    elif warnings:
        message += f"\n\n{len(warnings)} validation warnings detected."
    return message


class ImportService:
    """
    Price-list import business logic.

    Also owns the per-supplier mapping templates.
    """

    def __init__(
        self,
        storage: Optional[StorageService] = None,
        formula_service: Optional[FormulaService] = None,
        pdf_converter: Optional[PdfConverterService] = None,
        retention_policy: Optional[RetentionPolicy] = None
    ):
        self.storage = storage or get_storage_service()
        self.formulas = formula_service or FormulaService(self.storage)
        self.pdf_converter = pdf_converter or get_pdf_converter_service()
        self.retention_policy = retention_policy

    # ===================
    # MAPPING TEMPLATES
    # ===================

    def get_templates(self) -> dict[str, ColumnMapping]:
        return self.storage.load_dict(MAPPING_TEMPLATES_KEY, ColumnMapping)

    def get_template(self, supplier_key: str) -> Optional[ColumnMapping]:
        return self.get_templates().get(supplier_key)

    def save_template(self, supplier_key: str, mapping: ColumnMapping) -> ColumnMapping:
        templates = self.get_templates()
        templates[supplier_key] = mapping
        self.storage.save_dict(MAPPING_TEMPLATES_KEY, templates)
        logger.info("mapping_template_saved", supplier=supplier_key)
        return mapping

    def delete_template(self, supplier_key: str) -> None:
        """
        Raises:
            MappingTemplateNotFoundError: If the supplier has no template
        """
        templates = self.get_templates()
        if supplier_key not in templates:
            raise MappingTemplateNotFoundError(supplier_key)
        del templates[supplier_key]
        self.storage.save_dict(MAPPING_TEMPLATES_KEY, templates)
        logger.info("mapping_template_deleted", supplier=supplier_key)

    # ===================
    # PREVIEW / CONFIRM
    # ===================

    def read_rows(self, content: bytes, filename: str) -> list[list[Any]]:
        """Raw rows from a spreadsheet, or from a PDF via the converter."""
        if is_pdf(filename):
            return self.pdf_converter.convert_upload(content, filename)
        return read_price_list(content, filename)

    def preview(
        self,
        content: bytes,
        filename: str,
        supplier_name: Optional[str] = None
    ) -> ImportPreviewResponse:
        """
        Read an upload and propose supplier and mapping.

        The rows are cached until confirm() or the preview TTL.

        Raises:
            PriceListParseError: If the file cannot be read
            PDFConversionError: If PDF conversion fails
        """
        logger.info("import_preview_started", filename=filename)

        rows = self.read_rows(content, filename)
        headers = [cell_text(h) or "" for h in rows[0]]

        name = clean_display_name(supplier_name) or suggest_supplier_name(filename)
        supplier_key = slugify(name)
        template = self.get_template(supplier_key) if supplier_key else None
        mapped = map_columns(headers, supplier_key, template)

        preview_id = store_preview({
            "filename": filename,
            "rows": rows,
            "mapping": mapped.mapping.model_dump(mode="json"),
        })

        logger.info(
            "import_preview_ready",
            preview_id=preview_id,
            filename=filename,
            supplier=supplier_key,
            rows=len(rows) - 1,
            has_template=mapped.from_template
        )

        return ImportPreviewResponse(
            preview_id=preview_id,
            filename=filename,
            supplier_name=name,
            supplier_key=supplier_key,
            headers=headers,
            mapping=mapped.mapping,
            extra_headers=mapped.extra_headers,
            has_template=mapped.from_template,
            sample_rows=rows[1:1 + PREVIEW_SAMPLE_ROWS],
            row_count=len(rows) - 1,
        )

    def confirm(self, preview_id: str, request: ConfirmImportRequest) -> ImportSummary:
        """
        Run the import for a cached preview.

        Raises:
            PreviewNotFoundError: If the preview expired or never existed
        """
        cached = retrieve_preview(preview_id)
        if cached is None:
            raise PreviewNotFoundError(preview_id)

        mapping = request.mapping or ColumnMapping.model_validate(cached["mapping"])
        summary = self.run_import(
            cached["rows"],
            mapping,
            request.supplier_name,
            filename=cached["filename"]
        )
        delete_preview(preview_id)
        return summary

    def cancel(self, preview_id: str) -> None:
        if not delete_preview(preview_id):
            raise PreviewNotFoundError(preview_id)
        logger.info("import_preview_cancelled", preview_id=preview_id)

    # ===================
    # IMPORT
    # ===================

    def run_import(
        self,
        rows: list[list[Any]],
        mapping: ColumnMapping,
        supplier_name: str,
        filename: Optional[str] = None
    ) -> ImportSummary:
        """
        Replace a supplier's catalog rows with a price list.

        Args:
            rows: Raw rows, header row first
            mapping: Confirmed column mapping
            supplier_name: Confirmed supplier display name
            filename: Source file name for messages

        Returns:
            ImportSummary

        Raises:
            ValidationError: If the supplier name is unusable
            PriceListParseError: If rows is empty
            DatabaseError: If persisting fails
        """
        display_name = clean_display_name(supplier_name)
        supplier_key = slugify(display_name)
        if not supplier_key:
            raise ValidationError(
                message="Supplier name must contain letters or digits",
                details={"field": "supplier_name"}
            )
        if not rows:
            raise PriceListParseError(
                message="Price list has no header row",
                details={"filename": filename}
            )

        logger.info(
            "import_started",
            supplier=supplier_key,
            filename=filename,
            rows=len(rows) - 1
        )

        now = datetime.now(timezone.utc)
        parsed = parse_rows(rows, mapping, supplier_key, display_name, now)

        config = self.formulas.get_config()
        batch = [
            product.model_copy(update={
                "pricing": compute_price(
                    product.cost,
                    product.pack_size,
                    product.bottle_size_ml,
                    product.category,
                    config,
                )
            })
            for product in parsed.products
        ]

        policy = self.retention_policy or retention_policy_from_settings()

        try:
            with catalog_lock:
                live_ids = live_referenced_ids(self.storage)
                reconciled = reconcile_catalog(
                    self.storage.load_list(PRODUCTS_KEY, Product),
                    self.storage.load_list(DISCONTINUED_KEY, DiscontinuedEntry),
                    batch,
                    supplier_key,
                    live_ids,
                    now=now,
                )
                archive, pruned = apply_retention(reconciled.discontinued, policy, live_ids, now)

                # Archive first: a crash between writes leaves a product in
                # both collections, never in neither
                self.storage.save_list(DISCONTINUED_KEY, archive)
                self.storage.save_list(PRODUCTS_KEY, reconciled.active)
                self.save_template(supplier_key, mapping)
        except AppError as e:
            logger.error(
                "import_persist_failed",
                supplier=supplier_key,
                filename=filename,
                error=e.message
            )
            if isinstance(e, DatabaseError):
                e.details["filename"] = filename
            raise

        messages = [w.message for w in parsed.warnings]
        limit = settings.import_warning_display_limit
        summary = ImportSummary(
            supplier_key=supplier_key,
            supplier_name=display_name,
            filename=filename,
            imported=len(batch),
            replaced=reconciled.replaced,
            archived=len(reconciled.archived_ids),
            dropped=len(reconciled.dropped_ids),
            pruned=len(pruned),
            skipped_rows=parsed.skipped_rows,
            warnings=messages if len(messages) <= limit else [],
            warning_count=len(messages),
            template_saved=True,
            message=build_message(
                imported=len(batch),
                filename=filename,
                supplier_name=display_name,
                replaced=reconciled.replaced,
                archived=len(reconciled.archived_ids),
                pruned=len(pruned),
                warnings=messages,
                display_limit=limit,
            ),
        )

        if messages:
            logger.warning("import_warnings", supplier=supplier_key, count=len(messages))
        logger.info(
            "import_complete",
            supplier=supplier_key,
            imported=summary.imported,
            replaced=summary.replaced,
            archived=summary.archived,
            dropped=summary.dropped,
            pruned=summary.pruned
        )
        return summary


# Singleton instance for convenience
_import_service: Optional[ImportService] = None


def get_import_service() -> ImportService:
    """Get or create ImportService instance."""
    global _import_service
    if _import_service is None:
        _import_service = ImportService()
    return _import_service
