"""
Column mapper for supplier price lists.

Maps raw header text onto canonical product fields. A saved mapping for the
supplier always wins over detection so that column assignments stay stable
from one price list to the next.
"""

from typing import Optional, Sequence
import structlog

from models.column_mapping import (
    CanonicalField,
    ColumnMapping,
    ColumnMappingResult,
)

logger = structlog.get_logger(__name__)


# Detection order matters: a header claimed by an earlier field is not
# offered to later ones (so "Pack Size" is taken by pack_size before
# bottle_size looks for "size").
SYNONYMS: list[tuple[CanonicalField, tuple[str, ...]]] = [
    (CanonicalField.ITEM_CODE, ("item code", "sku", "code", "item#", "item no")),
    (CanonicalField.PRODUCER, ("producer", "winery", "brand", "manufacturer", "distillery", "domaine")),
    (CanonicalField.PRODUCT_NAME, ("product", "name", "wine", "description", "label", "cuvee")),
    (CanonicalField.VINTAGE, ("vintage", "year")),
    (CanonicalField.PACK_SIZE, ("pack", "pack size", "case size", "cs", "btl/cs", "/case", "units")),
    (CanonicalField.BOTTLE_SIZE, ("bottle", "bottle size", "size", "ml", "volume")),
    (CanonicalField.CATEGORY, ("type", "category", "product type", "class", "varietal")),
    (CanonicalField.COST, ("fob", "price", "case price", "cost", "wholesale")),
    (CanonicalField.COUNTRY, ("country", "origin")),
    (CanonicalField.REGION, ("region",)),
    (CanonicalField.APPELLATION, ("appellation", "subregion", "sub-region", "aoc")),
]


def detect_column(
    headers: Sequence[str],
    synonyms: Sequence[str],
    claimed: Optional[set[int]] = None,
) -> Optional[int]:
    """
    Index of the first header containing any synonym.

    Headers are scanned in their original order; the first hit wins.

    Args:
        headers: Header cells, in sheet order
        synonyms: Lowercase substrings to look for
        claimed: Indices already taken by another field

    Returns:
        Column index, or None if no header matches
    """
    claimed = claimed or set()
    for index, header in enumerate(headers):
        if index in claimed:
            continue
        text = str(header or "").strip().lower()
        if not text:
            continue
        if any(synonym in text for synonym in synonyms):
            return index
    return None


def find_extra_headers(headers: Sequence[str], mapping: ColumnMapping) -> dict[int, str]:
    """Non-blank headers no canonical field claims."""
    claimed = mapping.claimed_columns()
    extras = {}
    for index, header in enumerate(headers):
        text = str(header or "").strip()
        if text and index not in claimed:
            extras[index] = text
    return extras


def map_columns(
    headers: Sequence[str],
    supplier_key: str,
    saved_mapping: Optional[ColumnMapping] = None,
) -> ColumnMappingResult:
    """
    Map price-list headers to canonical fields.

    Never fails: a field with no matching header is simply unmapped, which
    the importer treats as missing data.

    Args:
        headers: Header row of the price list
        supplier_key: Supplier the list belongs to
        saved_mapping: Mapping saved from this supplier's last import

    Returns:
        ColumnMappingResult with the mapping and the unclaimed headers
    """
    if saved_mapping is not None:
        logger.info(
            "column_mapping_replayed",
            supplier=supplier_key,
            mapped=len(saved_mapping.claimed_columns())
        )
        return ColumnMappingResult(
            mapping=saved_mapping,
            extra_headers=find_extra_headers(headers, saved_mapping),
            from_template=True
        )

    claimed: set[int] = set()
    fields: dict[CanonicalField, Optional[int]] = {}
    for canonical, synonyms in SYNONYMS:
        index = detect_column(headers, synonyms, claimed)
        fields[canonical] = index
        if index is not None:
            claimed.add(index)

    detected = ColumnMapping(fields=fields)
    extras = find_extra_headers(headers, detected)
    mapping = ColumnMapping(fields=fields, extra_columns=list(extras))

    logger.info(
        "column_mapping_detected",
        supplier=supplier_key,
        mapped=len(claimed),
        unmapped=[f.value for f, i in fields.items() if i is None],
        extra_headers=len(extras)
    )

    return ColumnMappingResult(
        mapping=mapping,
        extra_headers=extras,
        from_template=False
    )
