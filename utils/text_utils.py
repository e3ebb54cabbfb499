"""
Text utilities for supplier names and spreadsheet cells.

Supplier identity is compared by slug, so "Château Acme ", "chateau acme"
and "CHATEAU_ACME" all resolve to the same supplier key.
"""

import math
import re
import unicodedata
from typing import Any, Optional


def strip_accents(text: str) -> str:
    """
    Remove accent marks, keeping base characters.

    - "Château" → "Chateau"
    - "Viña" → "Vina"
    """
    # NFD decomposition separates base chars from accents
    normalized = unicodedata.normalize('NFD', text)
    return ''.join(
        c for c in normalized
        if unicodedata.category(c) != 'Mn'
    )


def slugify(name: Optional[str]) -> str:
    """
    Normalize a supplier name to its key.

    - "Acme Wines " → "acme-wines"
    - "Château_Margaux & Co." → "chateau-margaux-co"

    Args:
        name: Supplier display name

    Returns:
        Lowercase ASCII slug, or "" if nothing usable remains
    """
    if not name:
        return ""

    ascii_name = strip_accents(name.strip()).lower()
    return re.sub(r'[^a-z0-9]+', '-', ascii_name).strip('-')


def clean_display_name(name: Optional[str], max_length: int = 200) -> str:
    """Collapse whitespace and truncate a supplier display name."""
    if not name:
        return ""
    cleaned = re.sub(r'\s+', ' ', name).strip()
    return cleaned[:max_length]


def cell_text(value: Any) -> Optional[str]:
    """
    Render a spreadsheet cell as trimmed text.

    Empty strings, None and NaN become None. Whole floats lose the
    trailing ".0" pandas adds (2019.0 → "2019").
    """
    if value is None:
        return None
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return str(int(value))
    text = str(value).strip()
    return text or None
