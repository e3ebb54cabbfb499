"""
Catalog reconciler.

Replaces one supplier's active rows with a new batch. Old rows that a live
commitment still points at move to the discontinued archive; the rest are
dropped. No I/O: callers load and persist the collections.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional
import structlog

from models.product import Product, DiscontinuedEntry

logger = structlog.get_logger(__name__)


@dataclass
class ReconcileResult:
    """New active catalog and archive after one supplier replacement."""
    active: list[Product] = field(default_factory=list)
    discontinued: list[DiscontinuedEntry] = field(default_factory=list)
    replaced: int = 0
    archived_ids: list[str] = field(default_factory=list)
    dropped_ids: list[str] = field(default_factory=list)


def to_discontinued(
    product: Product,
    discontinued_at: datetime,
    replaced_by: Optional[str],
) -> DiscontinuedEntry:
    """Snapshot an active product as an archive entry."""
    data = product.model_dump(exclude={"discontinued_at", "replaced_by"})
    return DiscontinuedEntry(
        **data,
        discontinued_at=discontinued_at,
        replaced_by=replaced_by
    )


def merge_into_archive(
    archive: list[DiscontinuedEntry],
    entries: list[DiscontinuedEntry],
) -> list[DiscontinuedEntry]:
    """
    Add entries to the archive, deduplicated by id.

    An existing entry with the same id is replaced by the fresh snapshot and
    moves to the end with it.
    """
    incoming = {entry.id for entry in entries}
    kept = [entry for entry in archive if entry.id not in incoming]
    return kept + entries


def reconcile_catalog(
    active_rows: list[Product],
    discontinued_rows: list[DiscontinuedEntry],
    new_batch: list[Product],
    supplier_key: str,
    live_referenced_ids: Iterable[str],
    now: Optional[datetime] = None,
) -> ReconcileResult:
    """
    Swap a supplier's active rows for a freshly priced batch.

    Steps:
        1. Split active rows into other suppliers and this supplier's old rows.
        2. Split old rows into droppable and must-archive by live references.
        3. Archive must-archive rows stamped with now and replaced_by.
        4. Active = other suppliers + new batch.

    Args:
        active_rows: Current active catalog
        discontinued_rows: Current archive
        new_batch: Parsed and priced products for supplier_key
        supplier_key: Supplier being replaced
        live_referenced_ids: Product ids held by open orders or special-order lists
        now: Discontinuation timestamp (defaults to current UTC time)

    Returns:
        ReconcileResult with the new collections and what moved where
    """
    now = now or datetime.now(timezone.utc)
    live = set(live_referenced_ids)

    other_suppliers = [p for p in active_rows if p.supplier != supplier_key]
    old_rows = [p for p in active_rows if p.supplier == supplier_key]

    must_archive = [p for p in old_rows if p.id in live]
    droppable = [p for p in old_rows if p.id not in live]

    archived = [to_discontinued(p, now, supplier_key) for p in must_archive]
    discontinued = merge_into_archive(list(discontinued_rows), archived)

    result = ReconcileResult(
        active=other_suppliers + list(new_batch),
        discontinued=discontinued,
        replaced=len(old_rows),
        archived_ids=[p.id for p in must_archive],
        dropped_ids=[p.id for p in droppable],
    )

    logger.info(
        "catalog_reconciled",
        supplier=supplier_key,
        batch=len(new_batch),
        replaced=result.replaced,
        archived=len(result.archived_ids),
        dropped=len(result.dropped_ids),
        active_total=len(result.active),
        discontinued_total=len(result.discontinued)
    )

    return result
