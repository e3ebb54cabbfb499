"""
Pricing formula engine.

Turns FOB case cost, package geometry and category into sell prices:

    case_liters      = pack × bottle_ml / 1000
    tax              = case_liters × tax_per_liter + tax_fixed
    laid_in          = cost + shipping_per_case + tax
    wholesale_case   = laid_in / margin_divisor
    wholesale_bottle = wholesale_case / pack
    srp              = ceil(wholesale_bottle × srp_multiplier) − 0.01
    frontline        = srp / srp_multiplier

Every step runs on Decimal at full precision; values are rounded to cents
only when the result is built.
"""

import math
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional, Union

from models.formula import FormulaConfig, FormulaParameters, FormulaProfile
from models.product import PricingResult

DEFAULT_PACK_SIZE = 12
DEFAULT_BOTTLE_SIZE_ML = Decimal("750")

CENT = Decimal("0.01")
ZERO = Decimal("0")

# Evaluated top to bottom against the lowercased category; first hit wins.
# No hit means wine.
CATEGORY_RULES: list[tuple[str, FormulaProfile]] = [
    ("spirit", FormulaProfile.SPIRITS),
    ("liquor", FormulaProfile.SPIRITS),
    ("vodka", FormulaProfile.SPIRITS),
    ("whiskey", FormulaProfile.SPIRITS),
    ("whisky", FormulaProfile.SPIRITS),
    ("bourbon", FormulaProfile.SPIRITS),
    ("rum", FormulaProfile.SPIRITS),
    ("gin", FormulaProfile.SPIRITS),
    ("tequila", FormulaProfile.SPIRITS),
    ("non-alc", FormulaProfile.NON_ALCOHOLIC),
    ("non alc", FormulaProfile.NON_ALCOHOLIC),
    ("na ", FormulaProfile.NON_ALCOHOLIC),
    ("juice", FormulaProfile.NON_ALCOHOLIC),
    ("soda", FormulaProfile.NON_ALCOHOLIC),
]


def classify_category(
    category: Optional[str],
    rules: list[tuple[str, FormulaProfile]] = CATEGORY_RULES,
) -> FormulaProfile:
    """
    Select the formula profile for a category string.

    Args:
        category: Free-text category from the price list
        rules: Ordered (substring, profile) table

    Returns:
        First matching profile, or WINE
    """
    text = (category or "").lower()
    for substring, profile in rules:
        if substring in text:
            return profile
    return FormulaProfile.WINE


# ===================
# INPUT COERCION
# ===================

def parse_decimal(value: Any) -> Optional[Decimal]:
    """
    Parse a money or number cell.

    Accepts "$1,234.50", " 120 ", 120.0. Returns None for blanks and
    anything that is not a finite number.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            return None
        return Decimal(str(value))

    text = re.sub(r"[^0-9.\-]", "", str(value))
    if not text or text in {".", "-", "-."}:
        return None
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def parse_pack_size(value: Any) -> Optional[int]:
    """
    Bottles per case from a cell ("12", 12.0, "6 btl", "12/750ml").

    Returns None when no positive whole number can be read.
    """
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        number = parse_decimal(value)
    else:
        match = re.search(r"\d+(?:\.\d+)?", str(value or ""))
        number = Decimal(match.group()) if match else None
    if number is None or number < 1:
        return None
    return int(number)


def parse_bottle_size_ml(value: Any) -> Optional[Decimal]:
    """
    Bottle size in ml from a cell.

    "750", "750ml", "750 ML" → 750; "1.5L" → 1500; "75cl" → 750.
    Returns None when no positive size can be read.
    """
    if value is None:
        return None
    text = str(value).strip().lower()
    match = re.search(
        r"(\d+(?:\.\d+)?)\s*(liters|litres|liter|litre|ltr|lt|ml|cl|l)?\b",
        text
    )
    if not match:
        return None

    size = Decimal(match.group(1))
    unit = match.group(2)
    if unit == "cl":
        size *= 10
    elif unit and unit != "ml":
        size *= 1000
    elif unit is None and size < 10:
        # Bare "1.5" or "3" on a size column means liters
        size *= 1000

    if size <= 0:
        return None
    return size


def _round(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


# ===================
# FORMULA
# ===================

def compute_price(
    cost: Any,
    pack_size: Any,
    bottle_size_ml: Any,
    category: Optional[str],
    formula: Union[FormulaConfig, FormulaParameters],
) -> PricingResult:
    """
    Compute sell prices for one product.

    Pure and deterministic: identical inputs always give identical output.

    Args:
        cost: FOB cost per case (number or money text)
        pack_size: Bottles per case; non-numeric or missing means 12
        bottle_size_ml: Bottle size; non-numeric or missing means 750 ml
        category: Category text used to pick the formula profile
        formula: Versioned formula config, or one profile's parameters

    Returns:
        PricingResult rounded to cents. A zero or missing cost gives an
        all-zero result (frontline 0).
    """
    profile = classify_category(category)
    if isinstance(formula, FormulaConfig):
        params = formula.for_profile(profile)
        version = formula.version
    else:
        params = formula
        version = 0

    pack = Decimal(parse_pack_size(pack_size) or DEFAULT_PACK_SIZE)
    bottle_ml = parse_bottle_size_ml(bottle_size_ml) or DEFAULT_BOTTLE_SIZE_ML
    case_cost = parse_decimal(cost) or ZERO

    if case_cost <= 0:
        return PricingResult(
            frontline=ZERO,
            frontline_case=ZERO,
            wholesale_bottle=ZERO,
            wholesale_case=ZERO,
            srp=ZERO,
            laid_in=ZERO,
            formula_used=profile,
            formula_version=version,
        )

    case_liters = pack * bottle_ml / 1000
    tax = case_liters * params.tax_per_liter + params.tax_fixed
    laid_in = case_cost + params.shipping_per_case + tax
    wholesale_case = laid_in / params.margin_divisor
    wholesale_bottle = wholesale_case / pack
    srp = Decimal(math.ceil(wholesale_bottle * params.srp_multiplier)) - CENT
    frontline = srp / params.srp_multiplier

    return PricingResult(
        frontline=_round(frontline),
        frontline_case=_round(frontline * pack),
        wholesale_bottle=_round(wholesale_bottle),
        wholesale_case=_round(wholesale_case),
        srp=_round(srp),
        laid_in=_round(laid_in),
        formula_used=profile,
        formula_version=version,
    )
