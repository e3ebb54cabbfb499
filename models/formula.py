"""
Pricing formula schemas.

Formula parameters are process-wide, admin-editable configuration. Every
change produces a new FormulaConfig version; prices computed under an older
version are stale.
"""

from pydantic import Field
from typing import Optional
from enum import Enum
from datetime import datetime
from decimal import Decimal

from models.base import BaseSchema


class FormulaProfile(str, Enum):
    """Pricing profile selected from a product's category."""
    WINE = "wine"
    SPIRITS = "spirits"
    NON_ALCOHOLIC = "non_alcoholic"


class FormulaParameters(BaseSchema):
    """Tax, freight and margin parameters for one profile."""

    tax_per_liter: Decimal = Field(..., ge=0, description="Excise tax per liter")
    tax_fixed: Decimal = Field(..., ge=0, description="Fixed tax per case")
    shipping_per_case: Decimal = Field(..., ge=0, description="Freight per case")
    margin_divisor: Decimal = Field(
        ...,
        gt=0,
        le=1,
        description="Laid-in cost is divided by this to get wholesale case price"
    )
    srp_multiplier: Decimal = Field(
        ...,
        gt=0,
        description="Wholesale bottle price multiplier for suggested retail price"
    )


class FormulaParametersUpdate(BaseSchema):
    """
    Partial update of one profile.

    Only provided fields change.
    """

    tax_per_liter: Optional[Decimal] = Field(None, ge=0)
    tax_fixed: Optional[Decimal] = Field(None, ge=0)
    shipping_per_case: Optional[Decimal] = Field(None, ge=0)
    margin_divisor: Optional[Decimal] = Field(None, gt=0, le=1)
    srp_multiplier: Optional[Decimal] = Field(None, gt=0)


DEFAULT_PROFILES: dict[FormulaProfile, dict[str, str]] = {
    FormulaProfile.WINE: {
        "tax_per_liter": "0.32",
        "tax_fixed": "0.15",
        "shipping_per_case": "13",
        "margin_divisor": "0.65",
        "srp_multiplier": "1.47",
    },
    FormulaProfile.SPIRITS: {
        "tax_per_liter": "1.17",
        "tax_fixed": "0.15",
        "shipping_per_case": "13",
        "margin_divisor": "0.65",
        "srp_multiplier": "1.47",
    },
    FormulaProfile.NON_ALCOHOLIC: {
        "tax_per_liter": "0",
        "tax_fixed": "0",
        "shipping_per_case": "13",
        "margin_divisor": "0.65",
        "srp_multiplier": "1.47",
    },
}


class FormulaConfig(BaseSchema):
    """Versioned set of formula profiles."""

    version: int = Field(default=1, ge=1, description="Bumped on every change")
    updated_at: Optional[datetime] = Field(None, description="Time of last change")
    profiles: dict[FormulaProfile, FormulaParameters] = Field(
        default_factory=lambda: {
            profile: FormulaParameters(**values)
            for profile, values in DEFAULT_PROFILES.items()
        }
    )

    def for_profile(self, profile: FormulaProfile) -> FormulaParameters:
        """Parameters for a profile, falling back to wine."""
        return self.profiles.get(profile) or self.profiles[FormulaProfile.WINE]


class PricePreviewRequest(BaseSchema):
    """Price a hypothetical product with the current formulas."""

    cost: Decimal = Field(..., ge=0, description="FOB cost per case")
    pack_size: Optional[str] = Field(None, description="Bottles per case")
    bottle_size: Optional[str] = Field(None, description="Bottle size, e.g. 750ml or 1.5L")
    category: Optional[str] = Field(None, description="Category text from a price list")
