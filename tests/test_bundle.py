"""
Tests for the recommendation bundle builder.

Covers:
- Partition sizes (recommended / counterfactuals)
- Ordering and tie stability
- Unavailable listings
- Unknown investor and empty catalogue
"""

import logging

import pytest

from vantage_engine.core import (
    BundleConfig,
    BundleSource,
    Investor,
    Mandate,
    Property,
    PropertyStatus,
    PropertyType,
    assemble_bundle,
    build_recommendation_bundle,
)


# --- Test Data Fixtures ---

@pytest.fixture
def mandate():
    return Mandate(
        preferred_areas=["Downtown"],
        property_types=["residential"],
        min_investment=1_000_000,
        max_investment=5_000_000,
    )


@pytest.fixture
def investor(mandate):
    return Investor(investor_id="INV-1", name="Layla Haddad", mandate=mandate)


@pytest.fixture
def catalogue():
    """Ten listings with a mix of fits, one not available."""
    return [
        Property("L0", "Office", "Business Bay", PropertyType.COMMERCIAL, price=6_000_000),
        Property("L1", "Flat A", "Downtown", PropertyType.RESIDENTIAL, price=2_000_000),
        Property("L2", "Office B", "Downtown", PropertyType.COMMERCIAL, price=2_000_000),
        Property("L3", "Flat C", "Downtown", PropertyType.RESIDENTIAL, price=3_000_000),
        Property("L4", "Flat D", "Downtown", PropertyType.RESIDENTIAL, price=4_000_000,
                 status=PropertyStatus.SOLD),
        Property("L5", "Villa", "Palm", PropertyType.RESIDENTIAL, price=9_000_000),
        Property("L6", "Flat E", "Downtown", PropertyType.RESIDENTIAL, price=1_500_000),
        Property("L7", "Plot", "JVC", PropertyType.LAND, price=2_000_000),
        Property("L8", "Flat F", "Marina", PropertyType.RESIDENTIAL, price=2_000_000),
        Property("L9", "Shop", "Downtown", PropertyType.COMMERCIAL, price=8_000_000),
    ]


def _finder(*investors):
    by_id = {i.investor_id: i for i in investors}
    return by_id.get


# --- Assembly Tests ---

class TestAssembleBundle:
    """Test ranking and partitioning."""

    def test_partition(self, mandate, catalogue):
        bundle = assemble_bundle("INV-1", mandate, catalogue)

        assert bundle.recommended_ids == ["L1", "L3", "L6"]
        assert [c.property_id for c in bundle.counterfactuals] == ["L2", "L8", "L5", "L7", "L9"]

    def test_counterfactuals_score_no_higher(self, mandate, catalogue):
        bundle = assemble_bundle("INV-1", mandate, catalogue)

        lowest_recommended = min(r.score for r in bundle.recommended)
        assert all(c.score <= lowest_recommended for c in bundle.counterfactuals)

    def test_unavailable_excluded(self, mandate, catalogue):
        bundle = assemble_bundle("INV-1", mandate, catalogue, config=BundleConfig(10, 10))

        ids = bundle.recommended_ids + [c.property_id for c in bundle.counterfactuals]
        assert "L4" not in ids
        assert len(ids) == 9

    def test_custom_sizes(self, mandate, catalogue):
        bundle = assemble_bundle("INV-1", mandate, catalogue, config=BundleConfig(1, 2))

        assert bundle.recommended_ids == ["L1"]
        assert len(bundle.counterfactuals) == 2

    def test_fewer_listings_than_slots(self, mandate, catalogue):
        bundle = assemble_bundle("INV-1", mandate, catalogue[:2])

        assert bundle.recommended_ids == ["L1", "L0"]
        assert bundle.counterfactuals == []

    def test_ties_are_stable(self, mandate):
        """Equal scores keep catalogue order across recommended and counterfactuals."""
        listings = [
            Property(f"T{i}", "Tie", "Downtown", PropertyType.RESIDENTIAL, price=2_000_000)
            for i in range(6)
        ]
        bundle = assemble_bundle("INV-1", mandate, listings)

        assert bundle.recommended_ids == ["T0", "T1", "T2"]
        assert [c.property_id for c in bundle.counterfactuals] == ["T3", "T4", "T5"]
        assert all(c.reason_codes == ["ranked_out"] for c in bundle.counterfactuals)

    def test_recommended_reasons(self, mandate, catalogue):
        bundle = assemble_bundle("INV-1", mandate, catalogue)

        first = bundle.recommended[0]
        assert first.score == 100
        assert [r.label for r in first.reasons] == [
            "Area: Downtown",
            "Type: residential",
            "Budget: AED 2.0M",
        ]

    def test_no_mandate(self, catalogue):
        """Without a mandate everything scores 0 in catalogue order."""
        bundle = assemble_bundle("INV-1", None, catalogue)

        assert bundle.recommended_ids == ["L0", "L1", "L2"]
        assert all(r.score == 0 and r.reasons == [] for r in bundle.recommended)
        assert all(c.reason_codes == ["no_mandate"] for c in bundle.counterfactuals)

    def test_negative_config_rejected(self):
        with pytest.raises(ValueError):
            BundleConfig(recommended_count=-1)


# --- Builder Tests ---

class TestBuildRecommendationBundle:
    """Test the investor-facing builder."""

    def test_builds_for_known_investor(self, investor, catalogue):
        bundle = build_recommendation_bundle(
            "INV-1",
            find_investor=_finder(investor),
            listings=catalogue,
            source=BundleSource.AI_INSIGHT,
        )

        assert bundle.investor_id == "INV-1"
        assert bundle.source == BundleSource.AI_INSIGHT
        assert len(bundle.recommended) == 3
        assert len(bundle.counterfactuals) == 5

    def test_unknown_investor_empty(self, catalogue, caplog):
        with caplog.at_level(logging.INFO, logger="vantage_engine.core.bundle"):
            bundle = build_recommendation_bundle(
                "INV-404",
                find_investor=_finder(),
                listings=catalogue,
                source=BundleSource.NLP_QUERY,
            )

        assert bundle.is_empty
        assert bundle.investor_id == "INV-404"
        assert bundle.source == BundleSource.NLP_QUERY
        assert "INV-404" in caplog.text

    def test_no_available_listings(self, investor):
        """Zero available listings gives an empty bundle, not an error."""
        sold = [
            Property("S1", "Sold", "Downtown", PropertyType.RESIDENTIAL, price=2_000_000,
                     status=PropertyStatus.SOLD),
        ]
        for listings in ([], sold):
            bundle = build_recommendation_bundle(
                "INV-1",
                find_investor=_finder(investor),
                listings=listings,
                source=BundleSource.MANUAL,
            )
            assert bundle.is_empty
            assert bundle.source == BundleSource.MANUAL

    def test_to_dict(self, investor, catalogue):
        data = build_recommendation_bundle(
            "INV-1", find_investor=_finder(investor), listings=catalogue
        ).to_dict()

        assert data["source"] == "manual"
        assert data["recommended"][0]["property_id"] == "L1"
        assert data["counterfactuals"][0]["reason_codes"] == ["type_mismatch"]


# --- Malformed Mandate Tests ---

class TestNullMandateEntries:
    """Null entries in a mandate's lists never break the builder."""

    @pytest.fixture
    def marina_listings(self):
        return [
            Property(f"M{i}", "Flat", "Dubai Marina", PropertyType.RESIDENTIAL, price=2_000_000)
            for i in range(5)
        ]

    def test_from_dict_drops_nulls(self, marina_listings):
        mandate = Mandate.from_dict({"preferredAreas": [None, "Downtown"]})
        bundle = assemble_bundle("INV-1", mandate, marina_listings)

        assert mandate.preferred_areas == ["Downtown"]
        assert len(bundle.counterfactuals) == 2
        assert bundle.counterfactuals[0].reason_codes == ["area_mismatch"]
        assert bundle.counterfactuals[0].violated_constraints[0].expected == ["Downtown"]

    def test_constructed_with_nulls(self, marina_listings):
        mandate = Mandate(preferred_areas=[None, "Downtown"], property_types=[None, "land"])
        bundle = assemble_bundle("INV-1", mandate, marina_listings)

        constraints = bundle.counterfactuals[0].violated_constraints
        assert [c.key for c in constraints] == ["preferred_areas", "property_types"]
        assert constraints[0].expected == ["Downtown"]
        assert constraints[1].expected == ["land"]
