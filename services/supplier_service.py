"""
Supplier identity service.

Suppliers are not stored on their own: a supplier exists while products,
archive entries or a mapping template carry its key.
"""

import re
from typing import Optional
import structlog

from models.column_mapping import ColumnMapping
from models.product import Product, DiscontinuedEntry
from models.supplier import (
    SupplierRenameResult,
    SupplierSuggestion,
    SupplierSummary,
)
from services.storage_service import (
    StorageService,
    get_storage_service,
    catalog_lock,
    PRODUCTS_KEY,
    DISCONTINUED_KEY,
    MAPPING_TEMPLATES_KEY,
)
from utils.text_utils import clean_display_name, slugify
from exceptions import SupplierExistsError, SupplierNotFoundError, ValidationError

logger = structlog.get_logger(__name__)


# Applied in order to the filename stem
_FILENAME_NOISE = [
    re.compile(r"\.(xlsx?|csv|pdf)$", re.IGNORECASE),
    re.compile(r"[-_ ]price[-_ ]?list", re.IGNORECASE),
    re.compile(r"[-_ ]pricelist", re.IGNORECASE),
    re.compile(r"[-_ ]\d{4}[-_]\d{2}[-_]\d{2}"),
    re.compile(r"[-_](jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*", re.IGNORECASE),
    re.compile(r"[-_]v?\d+$", re.IGNORECASE),
    re.compile(r"[-_ ]final", re.IGNORECASE),
    re.compile(r"[-_ ]updated", re.IGNORECASE),
]


def suggest_supplier_name(filename: str) -> str:
    """
    Guess a supplier name from an upload filename.

    - "Acme_Wines_Price_List_2024-11-15.xlsx" → "Acme Wines"
    - "bodega-norte-pricelist-march-v2.csv" → "bodega norte"

    Falls back to the bare filename stem when everything is stripped.
    """
    name = filename.strip()
    for pattern in _FILENAME_NOISE:
        name = pattern.sub("", name)
    name = re.sub(r"[_-]+", " ", name)
    name = clean_display_name(name)

    if not name:
        stem = re.sub(r"\.[^.]+$", "", filename.strip())
        name = clean_display_name(re.sub(r"[_-]+", " ", stem))
    return name


class SupplierService:
    """Supplier listing, suggestion and renaming."""

    def __init__(self, storage: Optional[StorageService] = None):
        self.storage = storage or get_storage_service()

    def suggest(self, filename: str) -> SupplierSuggestion:
        name = suggest_supplier_name(filename)
        return SupplierSuggestion(
            filename=filename,
            supplier_name=name,
            supplier_key=slugify(name)
        )

    def get_all(self) -> list[SupplierSummary]:
        """Every supplier key in use, with counts."""
        products = self.storage.load_list(PRODUCTS_KEY, Product)
        archive = self.storage.load_list(DISCONTINUED_KEY, DiscontinuedEntry)
        templates = self.storage.get(MAPPING_TEMPLATES_KEY, {})

        summaries: dict[str, SupplierSummary] = {}

        def summary_for(key: str, name: str) -> SupplierSummary:
            if key not in summaries:
                summaries[key] = SupplierSummary(key=key, name=name)
            return summaries[key]

        for product in products:
            # Active rows carry the current display name
            summary = summary_for(product.supplier, product.supplier_name)
            summary.name = product.supplier_name
            summary.product_count += 1
        for entry in archive:
            summary_for(entry.supplier, entry.supplier_name).discontinued_count += 1
        for key in templates:
            summary_for(key, key).has_template = True

        result = sorted(summaries.values(), key=lambda s: s.name.lower())
        logger.info("suppliers_retrieved", count=len(result))
        return result

    def rename(self, supplier_key: str, new_name: str, merge: bool = False) -> SupplierRenameResult:
        """
        Rename a supplier across catalog, archive and templates.

        When the new name's key already belongs to another supplier the
        two are merged, which must be asked for explicitly.

        Args:
            supplier_key: Current key
            new_name: New display name
            merge: Allow merging into an existing supplier

        Raises:
            SupplierNotFoundError: If nothing carries supplier_key
            SupplierExistsError: If the new key is taken and merge is False
            ValidationError: If the new name has no usable characters
        """
        display_name = clean_display_name(new_name)
        new_key = slugify(display_name)
        if not new_key:
            raise ValidationError(
                message="Supplier name must contain letters or digits",
                details={"field": "new_name"}
            )

        with catalog_lock:
            products = self.storage.load_list(PRODUCTS_KEY, Product)
            archive = self.storage.load_list(DISCONTINUED_KEY, DiscontinuedEntry)
            templates = self.storage.load_dict(MAPPING_TEMPLATES_KEY, ColumnMapping)

            keys_in_use = (
                {p.supplier for p in products}
                | {e.supplier for e in archive}
                | set(templates)
            )
            if supplier_key not in keys_in_use:
                raise SupplierNotFoundError(supplier_key)

            merging = new_key != supplier_key and new_key in keys_in_use
            if merging and not merge:
                raise SupplierExistsError(new_key)

            products_moved = 0
            for i, product in enumerate(products):
                if product.supplier == supplier_key:
                    products[i] = product.model_copy(update={
                        "supplier": new_key,
                        "supplier_name": display_name,
                    })
                    products_moved += 1

            discontinued_moved = 0
            for i, entry in enumerate(archive):
                changes = {}
                if entry.supplier == supplier_key:
                    changes = {"supplier": new_key, "supplier_name": display_name}
                    discontinued_moved += 1
                if entry.replaced_by == supplier_key:
                    changes["replaced_by"] = new_key
                if changes:
                    archive[i] = entry.model_copy(update=changes)

            template_moved = False
            if new_key != supplier_key and supplier_key in templates:
                template = templates.pop(supplier_key)
                # A merge target keeps its own template
                if new_key not in templates:
                    templates[new_key] = template
                    template_moved = True

            self.storage.save_list(DISCONTINUED_KEY, archive)
            self.storage.save_list(PRODUCTS_KEY, products)
            self.storage.save_dict(MAPPING_TEMPLATES_KEY, templates)

        logger.info(
            "supplier_renamed",
            old_key=supplier_key,
            new_key=new_key,
            merged=merging,
            products_moved=products_moved,
            discontinued_moved=discontinued_moved
        )

        return SupplierRenameResult(
            old_key=supplier_key,
            new_key=new_key,
            new_name=display_name,
            products_moved=products_moved,
            discontinued_moved=discontinued_moved,
            merged=merging,
            template_moved=template_moved
        )


# Singleton instance for convenience
_supplier_service: Optional[SupplierService] = None


def get_supplier_service() -> SupplierService:
    """Get or create SupplierService instance."""
    global _supplier_service
    if _supplier_service is None:
        _supplier_service = SupplierService()
    return _supplier_service
