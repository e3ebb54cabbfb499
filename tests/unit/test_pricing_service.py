"""
Unit tests for the pricing formula engine.

Run: pytest tests/unit/test_pricing_service.py -v
"""

import math
from decimal import Decimal

import pytest

from models.formula import FormulaConfig, FormulaParameters, FormulaProfile
from services.pricing_service import (
    classify_category,
    compute_price,
    parse_bottle_size_ml,
    parse_decimal,
    parse_pack_size,
)


WINE_PARAMS = FormulaParameters(
    tax_per_liter="0.32",
    tax_fixed="0.15",
    shipping_per_case="13",
    margin_divisor="0.65",
    srp_multiplier="1.47",
)


class TestComputePriceExample:
    """Worked example: 12 × 750 ml wine at 120 FOB."""

    def test_example_values(self):
        """Should match the hand-worked figures."""
        # Act
        result = compute_price(120, 12, 750, "Red Wine", WINE_PARAMS)

        # Assert
        assert result.laid_in == Decimal("136.03")
        assert result.wholesale_case == Decimal("209.28")
        assert result.wholesale_bottle == Decimal("17.44")
        assert result.srp == Decimal("25.99")
        assert result.frontline == Decimal("17.68")
        assert result.frontline_case == Decimal("212.16")
        assert result.formula_used == FormulaProfile.WINE

    def test_bare_parameters_report_version_zero(self):
        result = compute_price(120, 12, 750, None, WINE_PARAMS)

        assert result.formula_version == 0

    def test_config_version_recorded(self):
        config = FormulaConfig(version=7)

        result = compute_price(120, 12, 750, "Red", config)

        assert result.formula_version == 7
        assert result.frontline == Decimal("17.68")

    def test_text_inputs_accepted(self):
        """Should read money and size text the way price lists write them."""
        result = compute_price("$120.00", "12 btl", "750ml", "Red", WINE_PARAMS)

        assert result.frontline == Decimal("17.68")


class TestComputePriceProperties:
    """Invariants that hold for any input."""

    @pytest.mark.parametrize("cost", [1, 37.5, 120, 999.99, 4321])
    @pytest.mark.parametrize("pack,bottle", [(12, 750), (6, 1500), (24, 375), (1, 3000)])
    def test_srp_bound_and_frontline_relation(self, cost, pack, bottle):
        """srp sits within a dollar above wholesale × multiplier and ends in .99."""
        # Arrange
        params = WINE_PARAMS
        liters = Decimal(pack) * Decimal(bottle) / 1000
        laid_in = Decimal(str(cost)) + params.shipping_per_case + liters * params.tax_per_liter + params.tax_fixed
        x = laid_in / params.margin_divisor / Decimal(pack) * params.srp_multiplier

        # Act
        result = compute_price(cost, pack, bottle, "wine", params)

        # Assert
        assert x - Decimal("0.01") <= result.srp < x + 1
        assert result.srp == Decimal(math.ceil(x)) - Decimal("0.01")
        assert abs(result.frontline * params.srp_multiplier - result.srp) <= Decimal("0.01")

    def test_deterministic(self):
        first = compute_price(87.5, "6", "1.5L", "Spirits", FormulaConfig())
        second = compute_price(87.5, "6", "1.5L", "Spirits", FormulaConfig())

        assert first == second


class TestComputePriceDefaults:
    """Missing or unreadable inputs."""

    def test_missing_pack_and_bottle_use_defaults(self):
        """Should price as 12 × 750 ml."""
        defaulted = compute_price(120, None, "n/a", "Red", WINE_PARAMS)
        explicit = compute_price(120, 12, 750, "Red", WINE_PARAMS)

        assert defaulted == explicit

    @pytest.mark.parametrize("cost", [0, None, "", "TBD"])
    def test_zero_or_missing_cost_prices_at_zero(self, cost):
        result = compute_price(cost, 12, 750, "Red", WINE_PARAMS)

        assert result.frontline == Decimal("0")
        assert result.srp == Decimal("0")
        assert result.laid_in == Decimal("0")
        assert result.frontline_case == Decimal("0")


class TestClassifyCategory:
    """Tests for classify_category()"""

    @pytest.mark.parametrize("category,expected", [
        ("Vodka", FormulaProfile.SPIRITS),
        ("Single Malt Whisky", FormulaProfile.SPIRITS),
        ("SPIRITS", FormulaProfile.SPIRITS),
        ("Gin", FormulaProfile.SPIRITS),
        ("Non-Alcoholic Sparkling", FormulaProfile.NON_ALCOHOLIC),
        ("Grape Juice", FormulaProfile.NON_ALCOHOLIC),
        ("Red Wine", FormulaProfile.WINE),
        ("Champagne", FormulaProfile.WINE),
        ("Brandy", FormulaProfile.WINE),
        ("Cognac", FormulaProfile.WINE),
        ("", FormulaProfile.WINE),
        (None, FormulaProfile.WINE),
    ])
    def test_profiles(self, category, expected):
        assert classify_category(category) == expected

    def test_first_rule_wins(self):
        rules = [("juice", FormulaProfile.NON_ALCOHOLIC), ("rum", FormulaProfile.SPIRITS)]

        assert classify_category("rum juice", rules) == FormulaProfile.NON_ALCOHOLIC

    def test_spirits_profile_applied(self):
        """Spirits use their own tax per liter."""
        result = compute_price(100, 6, 1000, "Vodka", FormulaConfig())

        # 6 L × 1.17 + 0.15 = 7.17 tax
        assert result.laid_in == Decimal("120.17")
        assert result.formula_used == FormulaProfile.SPIRITS
        assert result.srp == Decimal("45.99")


class TestInputParsing:
    """Tests for the cell parsers"""

    @pytest.mark.parametrize("value,expected", [
        ("750", Decimal("750")),
        ("750ml", Decimal("750")),
        ("750 ML", Decimal("750")),
        ("1.5L", Decimal("1500")),
        ("1.5 Liter", Decimal("1500")),
        ("75cl", Decimal("750")),
        ("3", Decimal("3000")),
        (375, Decimal("375")),
        ("n/a", None),
        (None, None),
    ])
    def test_parse_bottle_size_ml(self, value, expected):
        assert parse_bottle_size_ml(value) == expected

    @pytest.mark.parametrize("value,expected", [
        ("12", 12),
        (12.0, 12),
        ("6 btl", 6),
        ("12/750ml", 12),
        ("0", None),
        ("each", None),
        (None, None),
    ])
    def test_parse_pack_size(self, value, expected):
        assert parse_pack_size(value) == expected

    @pytest.mark.parametrize("value,expected", [
        ("$1,234.50", Decimal("1234.50")),
        (" 120 ", Decimal("120")),
        (120.0, Decimal("120.0")),
        (float("nan"), None),
        ("", None),
        (None, None),
    ])
    def test_parse_decimal(self, value, expected):
        assert parse_decimal(value) == expected
