"""
Catalog service for the active catalog and the discontinued archive.

Handles reads (with repricing of stale rows), manual edits and removals,
archive retention, and the admin reset.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
import structlog

from config import settings
from models.discontinued import PruneResult, RetentionMode, RetentionPolicy
from models.formula import FormulaConfig
from models.product import (
    DiscontinuedEntry,
    Product,
    ProductDeleteResult,
    ProductUpdate,
)
from services.formula_service import FormulaService
from services.pricing_service import compute_price
from services.reconciler import merge_into_archive, to_discontinued
from services.reference_service import live_referenced_ids
from services.storage_service import (
    StorageService,
    get_storage_service,
    catalog_lock,
    PRODUCTS_KEY,
    DISCONTINUED_KEY,
    ORDERS_KEY,
    SPECIAL_ORDERS_KEY,
    FORMULAS_KEY,
)
from exceptions import ProductNotFoundError

logger = structlog.get_logger(__name__)


def price_product(product: Product, config: FormulaConfig) -> Product:
    """Copy of product with pricing computed under config."""
    pricing = compute_price(
        product.cost,
        product.pack_size,
        product.bottle_size_ml,
        product.category,
        config,
    )
    return product.model_copy(update={"pricing": pricing})


def reprice_stale(
    products: list[Product],
    config: FormulaConfig,
) -> tuple[list[Product], int]:
    """
    Recompute prices computed under an older formula version.

    Returns:
        Tuple of (products, number repriced)
    """
    repriced = 0
    result = []
    for product in products:
        if product.formula_version != config.version:
            product = price_product(product, config)
            repriced += 1
        result.append(product)
    return result, repriced


def retention_policy_from_settings() -> RetentionPolicy:
    return RetentionPolicy(
        mode=RetentionMode(settings.discontinued_retention_mode),
        max_age_days=settings.discontinued_retention_days,
    )


def apply_retention(
    archive: list[DiscontinuedEntry],
    policy: RetentionPolicy,
    live_ids: set[str],
    now: Optional[datetime] = None,
) -> tuple[list[DiscontinuedEntry], list[DiscontinuedEntry]]:
    """
    Split the archive into kept and pruned entries.

    Live-referenced entries are always kept.

    Returns:
        Tuple of (kept, pruned)
    """
    if policy.mode == RetentionMode.KEEP_ALL:
        return list(archive), []

    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=policy.max_age_days)

    kept, pruned = [], []
    for entry in archive:
        if entry.id in live_ids:
            kept.append(entry)
        elif policy.mode == RetentionMode.UNREFERENCED:
            pruned.append(entry)
        elif _as_utc(entry.discontinued_at) < cutoff:
            pruned.append(entry)
        else:
            kept.append(entry)
    return kept, pruned


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _matches(product: Product, search: str) -> bool:
    haystack = " ".join(
        str(value) for value in (
            product.producer,
            product.product_name,
            product.vintage,
            product.supplier_name,
            product.item_code,
        )
        if value
    ).lower()
    return search in haystack


class CatalogService:
    """
    Catalog business logic.

    Every read-modify-write of the catalog or archive blob runs under
    catalog_lock.
    """

    def __init__(
        self,
        storage: Optional[StorageService] = None,
        formula_service: Optional[FormulaService] = None
    ):
        self.storage = storage or get_storage_service()
        self.formulas = formula_service or FormulaService(self.storage)

    # ===================
    # READ OPERATIONS
    # ===================

    def get_active_products(self) -> list[Product]:
        """
        Full active catalog with current prices.

        Rows priced under an older formula version are repriced and the
        catalog is written back once.
        """
        with catalog_lock:
            products = self.storage.load_list(PRODUCTS_KEY, Product)
            config = self.formulas.get_config()
            products, repriced = reprice_stale(products, config)

            if repriced:
                self.storage.save_list(PRODUCTS_KEY, products)
                logger.info(
                    "catalog_repriced",
                    repriced=repriced,
                    formula_version=config.version
                )

        return products

    def get_all(
        self,
        page: int = 1,
        page_size: int = 50,
        search: Optional[str] = None,
        supplier: Optional[str] = None
    ) -> tuple[list[Product], int]:
        """
        Active products with optional filters.

        Args:
            page: Page number (1-indexed)
            page_size: Items per page
            search: Case-insensitive text matched against producer, name,
                vintage, supplier name and item code
            supplier: Supplier key

        Returns:
            Tuple of (products page, total matching)
        """
        logger.info(
            "getting_products",
            page=page,
            page_size=page_size,
            search=search,
            supplier=supplier
        )

        products = self.get_active_products()

        if supplier:
            products = [p for p in products if p.supplier == supplier]
        if search and search.strip():
            needle = search.strip().lower()
            products = [p for p in products if _matches(p, needle)]

        products.sort(key=lambda p: (
            p.supplier,
            (p.producer or "").lower(),
            (p.product_name or "").lower(),
        ))

        total = len(products)
        offset = (page - 1) * page_size
        page_items = products[offset:offset + page_size]

        logger.info("products_retrieved", count=len(page_items), total=total)
        return page_items, total

    def get_by_id(self, product_id: str) -> Product:
        """
        Raises:
            ProductNotFoundError: If the id is not in the active catalog
        """
        for product in self.get_active_products():
            if product.id == product_id:
                return product
        logger.warning("product_not_found", product_id=product_id)
        raise ProductNotFoundError(product_id)

    def get_discontinued(self, supplier: Optional[str] = None) -> list[DiscontinuedEntry]:
        """
        Archive entries, newest first.

        Entries priced under an older formula version are repriced and the
        archive is written back once, same as the active catalog.
        """
        with catalog_lock:
            archive = self.storage.load_list(DISCONTINUED_KEY, DiscontinuedEntry)
            config = self.formulas.get_config()
            archive, repriced = reprice_stale(archive, config)

            if repriced:
                self.storage.save_list(DISCONTINUED_KEY, archive)
                logger.info(
                    "discontinued_repriced",
                    repriced=repriced,
                    formula_version=config.version
                )

        if supplier:
            archive = [e for e in archive if e.supplier == supplier]
        archive.sort(key=lambda e: _as_utc(e.discontinued_at), reverse=True)
        return archive

    # ===================
    # WRITE OPERATIONS
    # ===================

    def update(self, product_id: str, data: ProductUpdate) -> Product:
        """
        Edit an active product and recompute its prices.

        Raises:
            ProductNotFoundError: If the id is not in the active catalog
        """
        changes = data.model_dump(exclude_unset=True)
        logger.info("updating_product", product_id=product_id, fields=list(changes.keys()))

        with catalog_lock:
            products = self.storage.load_list(PRODUCTS_KEY, Product)
            index = next(
                (i for i, p in enumerate(products) if p.id == product_id),
                None
            )
            if index is None:
                raise ProductNotFoundError(product_id)

            if "origin" in changes and changes["origin"] is None:
                del changes["origin"]
            if "extra_fields" in changes and changes["extra_fields"] is None:
                del changes["extra_fields"]

            edited = Product.model_validate({
                **products[index].model_dump(),
                **changes,
            })
            products[index] = price_product(edited, self.formulas.get_config())
            self.storage.save_list(PRODUCTS_KEY, products)

        logger.info("product_updated", product_id=product_id)
        return products[index]

    def delete(self, product_id: str) -> ProductDeleteResult:
        """
        Remove a product from the active catalog.

        A live-referenced product moves to the archive with no replacing
        supplier; anything else is deleted outright.

        Raises:
            ProductNotFoundError: If the id is not in the active catalog
        """
        with catalog_lock:
            products = self.storage.load_list(PRODUCTS_KEY, Product)
            product = next((p for p in products if p.id == product_id), None)
            if product is None:
                raise ProductNotFoundError(product_id)

            archived = product_id in live_referenced_ids(self.storage)
            if archived:
                archive = self.storage.load_list(DISCONTINUED_KEY, DiscontinuedEntry)
                entry = to_discontinued(product, datetime.now(timezone.utc), None)
                # Archive first: a crash between writes leaves the product in
                # both collections, never in neither
                self.storage.save_list(DISCONTINUED_KEY, merge_into_archive(archive, [entry]))

            self.storage.save_list(
                PRODUCTS_KEY,
                [p for p in products if p.id != product_id]
            )

        logger.info("product_deleted", product_id=product_id, archived=archived)
        return ProductDeleteResult(product_id=product_id, archived=archived)

    def prune_discontinued(
        self,
        policy: Optional[RetentionPolicy] = None,
        now: Optional[datetime] = None
    ) -> PruneResult:
        """
        Apply a retention policy to the archive.

        Args:
            policy: Policy to apply (defaults to the configured one)
            now: Reference time for max_age
        """
        policy = policy or retention_policy_from_settings()

        with catalog_lock:
            archive = self.storage.load_list(DISCONTINUED_KEY, DiscontinuedEntry)
            kept, pruned = apply_retention(
                archive,
                policy,
                live_referenced_ids(self.storage),
                now
            )
            if pruned:
                self.storage.save_list(DISCONTINUED_KEY, kept)

        logger.info(
            "discontinued_pruned",
            mode=policy.mode.value,
            pruned=len(pruned),
            remaining=len(kept)
        )
        return PruneResult(
            pruned=len(pruned),
            remaining=len(kept),
            pruned_ids=[e.id for e in pruned]
        )

    def reset_all(self) -> list[str]:
        """
        Clear catalog, archive, orders, special orders and formulas.

        Mapping templates survive so the next imports replay them.

        Returns:
            Collection keys cleared
        """
        keys = [
            PRODUCTS_KEY,
            DISCONTINUED_KEY,
            ORDERS_KEY,
            SPECIAL_ORDERS_KEY,
            FORMULAS_KEY,
        ]
        with catalog_lock:
            for key in keys:
                self.storage.delete(key)

        logger.warning("catalog_reset", cleared=keys)
        return keys


# Singleton instance for convenience
_catalog_service: Optional[CatalogService] = None


def get_catalog_service() -> CatalogService:
    """Get or create CatalogService instance."""
    global _catalog_service
    if _catalog_service is None:
        _catalog_service = CatalogService()
    return _catalog_service
