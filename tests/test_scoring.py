"""
Tests for mandate-fit scoring.

Covers:
- Per-criterion matching (area, type, budget)
- Score arithmetic and reason ordering
- Missing mandate and wildcard handling
- Price formatting
- Ranking stability
"""

import pytest

from vantage_engine.core import (
    FitCriterion,
    Mandate,
    Property,
    PropertyType,
    format_price,
    score_mandate_fit,
    score_properties,
)


# --- Test Data Fixtures ---

@pytest.fixture
def downtown_mandate():
    """Downtown residential mandate, AED 1M to 5M."""
    return Mandate(
        preferred_areas=["Downtown"],
        property_types=["residential"],
        min_investment=1_000_000,
        max_investment=5_000_000,
    )


@pytest.fixture
def downtown_flat():
    return Property(
        "P1",
        "Burj Vista 2BR",
        "Downtown Dubai",
        PropertyType.RESIDENTIAL,
        price=2_500_000,
    )


@pytest.fixture
def bay_office():
    return Property(
        "P2",
        "Bay Square Office",
        "Business Bay",
        PropertyType.COMMERCIAL,
        price=6_000_000,
    )


# --- Fit Score Tests ---

class TestScoreMandateFit:
    """Test scoring a single property."""

    def test_full_match(self, downtown_flat, downtown_mandate):
        """Every criterion met scores 100."""
        fit = score_mandate_fit(downtown_flat, downtown_mandate)

        assert fit.score == 100
        assert fit.property_id == "P1"
        assert [r.met for r in fit.reasons] == [True, True, True]

    def test_no_match(self, bay_office, downtown_mandate):
        """No criterion met scores 0."""
        fit = score_mandate_fit(bay_office, downtown_mandate)

        assert fit.score == 0
        assert [r.met for r in fit.reasons] == [False, False, False]

    def test_reason_order_and_labels(self, downtown_flat, downtown_mandate):
        """Reasons come back as area, type, budget with readable labels."""
        fit = score_mandate_fit(downtown_flat, downtown_mandate)

        assert [r.criterion for r in fit.reasons] == [
            FitCriterion.AREA,
            FitCriterion.TYPE,
            FitCriterion.BUDGET,
        ]
        assert [r.label for r in fit.reasons] == [
            "Area: Downtown Dubai",
            "Type: residential",
            "Budget: AED 2.5M",
        ]

    def test_empty_lists_are_wildcards(self):
        """Empty area and type lists match any property."""
        mandate = Mandate(min_investment=1_000_000, max_investment=5_000_000)
        prop = Property("P3", "Plot", "Dubai South", PropertyType.LAND, price=3_000_000)

        assert score_mandate_fit(prop, mandate).score == 100

    def test_open_budget(self):
        """A mandate without bounds accepts any price."""
        mandate = Mandate(preferred_areas=["Marina"])
        prop = Property("P4", "Tower", "Dubai Marina", PropertyType.RESIDENTIAL, price=90_000_000)

        assert score_mandate_fit(prop, mandate).score == 100

    def test_budget_bounds_inclusive(self, downtown_mandate):
        """Prices exactly on a bound are in budget."""
        for price in (1_000_000, 5_000_000):
            prop = Property("P5", "Edge", "Downtown", PropertyType.RESIDENTIAL, price=price)
            assert score_mandate_fit(prop, downtown_mandate).score == 100

    @pytest.mark.parametrize("price", [999_999, 5_000_001])
    def test_price_outside_bounds(self, downtown_mandate, price):
        """A price strictly outside the bounds fails the budget criterion."""
        prop = Property("P6", "Edge", "Downtown", PropertyType.RESIDENTIAL, price=price)
        fit = score_mandate_fit(prop, downtown_mandate)

        budget = fit.reason_for(FitCriterion.BUDGET)
        assert budget.met is False
        assert fit.score <= 67

    def test_two_of_three_rounds(self, downtown_mandate):
        """Two of three criteria scores 67, one of three scores 33."""
        two = Property("P7", "A", "Downtown", PropertyType.COMMERCIAL, price=2_000_000)
        one = Property("P8", "B", "JVC", PropertyType.COMMERCIAL, price=2_000_000)

        assert score_mandate_fit(two, downtown_mandate).score == 67
        assert score_mandate_fit(one, downtown_mandate).score == 33

    def test_matching_is_case_insensitive_substring(self):
        """Mandate terms match as case-insensitive substrings."""
        mandate = Mandate(preferred_areas=["  MARINA "], property_types=["Residential"])
        prop = Property("P9", "Flat", "Dubai Marina", PropertyType.RESIDENTIAL, price=1)

        fit = score_mandate_fit(prop, mandate)
        assert fit.reason_for(FitCriterion.AREA).met
        assert fit.reason_for(FitCriterion.TYPE).met

    def test_type_substring_match(self):
        """'use' matches the mixed-use type."""
        mandate = Mandate(property_types=["use"])
        prop = Property("P10", "Podium", "DIFC", PropertyType.MIXED_USE, price=1)

        assert score_mandate_fit(prop, mandate).reason_for(FitCriterion.TYPE).met

    def test_blank_area_entries_ignored(self):
        """Blank entries never match on their own."""
        mandate = Mandate(preferred_areas=["", "Downtown"])
        prop = Property("P11", "Villa", "Palm Jumeirah", PropertyType.RESIDENTIAL, price=1)

        assert not score_mandate_fit(prop, mandate).reason_for(FitCriterion.AREA).met

    def test_only_blank_entries_are_wildcard(self):
        """A list of only blank entries behaves like an empty list."""
        mandate = Mandate(preferred_areas=["", "   "])
        prop = Property("P12", "Villa", "Palm Jumeirah", PropertyType.RESIDENTIAL, price=1)

        assert score_mandate_fit(prop, mandate).reason_for(FitCriterion.AREA).met

    def test_no_mandate(self, downtown_flat):
        """A missing mandate scores 0 with no reasons."""
        fit = score_mandate_fit(downtown_flat, None)

        assert fit.score == 0
        assert fit.reasons == ()

    def test_idempotent(self, downtown_flat, downtown_mandate):
        """Scoring twice gives equal results."""
        first = score_mandate_fit(downtown_flat, downtown_mandate)
        second = score_mandate_fit(downtown_flat, downtown_mandate)

        assert first == second

    def test_to_dict(self, bay_office, downtown_mandate):
        data = score_mandate_fit(bay_office, downtown_mandate).to_dict()

        assert data["score"] == 0
        assert data["reasons"][0] == {
            "criterion": "area",
            "label": "Area: Business Bay",
            "met": False,
        }


# --- Ranking Tests ---

class TestScoreProperties:
    """Test ranking multiple properties."""

    def test_sorted_descending(self, downtown_flat, bay_office, downtown_mandate):
        ranked = score_properties([bay_office, downtown_flat], downtown_mandate)

        assert [s.property.property_id for s in ranked] == ["P1", "P2"]
        assert [s.score for s in ranked] == [100, 0]

    def test_ties_keep_input_order(self, downtown_mandate):
        """Equal scores keep their catalogue order."""
        props = [
            Property(f"T{i}", "Tie", "JVC", PropertyType.LAND, price=2_000_000)
            for i in range(5)
        ]
        ranked = score_properties(props, downtown_mandate)

        assert [s.property.property_id for s in ranked] == ["T0", "T1", "T2", "T3", "T4"]

    def test_no_mandate_keeps_order(self, downtown_flat, bay_office):
        ranked = score_properties([bay_office, downtown_flat], None)

        assert [s.property.property_id for s in ranked] == ["P2", "P1"]
        assert all(s.score == 0 for s in ranked)


# --- Formatting Tests ---

class TestFormatPrice:
    """Test compact price formatting."""

    @pytest.mark.parametrize("value,expected", [
        (2_500_000, "AED 2.5M"),
        (1_000_000, "AED 1.0M"),
        (850_000, "AED 850K"),
        (1_000, "AED 1K"),
        (900, "AED 900"),
        (0, "AED 0"),
    ])
    def test_format(self, value, expected):
        assert format_price(value) == expected

    def test_currency(self):
        assert format_price(6_000_000, "USD") == "USD 6.0M"
