"""
Tests for input validation.
"""

import pytest

from vantage_engine.core import (
    Investor,
    Mandate,
    Property,
    PropertyType,
    ValidationError,
    validate_investor,
    validate_mandate,
    validate_property,
)


class TestValidateMandate:
    """Test mandate validation."""

    def test_valid(self):
        mandate = Mandate(
            preferred_areas=["Downtown"],
            property_types=["residential"],
            min_investment=1_000_000,
            max_investment=5_000_000,
        )
        result = validate_mandate(mandate)

        assert result.is_valid
        assert result.errors == []
        assert result.warnings == []

    def test_empty_mandate_is_valid(self):
        assert validate_mandate(Mandate()).is_valid

    def test_negative_bounds(self):
        result = validate_mandate(Mandate(min_investment=-1, max_investment=-5))

        fields = [e.field for e in result.errors]
        assert "mandate.min_investment" in fields
        assert "mandate.max_investment" in fields

    def test_min_above_max(self):
        result = validate_mandate(Mandate(min_investment=5_000_000, max_investment=1_000_000))

        assert not result.is_valid
        assert "Minimum investment cannot exceed" in result.errors[0].message

    def test_blank_entries_warn(self):
        result = validate_mandate(Mandate(preferred_areas=["Downtown", " "], property_types=[""]))

        assert result.is_valid
        assert len(result.warnings) == 2

    def test_unknown_type_warns(self):
        result = validate_mandate(Mandate(property_types=["penthouse"]))

        assert result.is_valid
        assert any("penthouse" in w for w in result.warnings)

    def test_partial_type_term_accepted(self):
        assert validate_mandate(Mandate(property_types=["Mixed"])).warnings == []

    def test_size_range(self):
        result = validate_mandate(Mandate(min_size=2_000, max_size=1_000))
        assert not result.is_valid

    def test_raise_for_errors(self):
        result = validate_mandate(Mandate(min_investment=-1))

        with pytest.raises(ValidationError) as exc:
            result.raise_for_errors()
        assert exc.value.field == "mandate.min_investment"


class TestValidateProperty:
    """Test listing validation."""

    def test_valid(self):
        prop = Property("P1", "Flat", "Downtown", PropertyType.RESIDENTIAL, price=2_000_000, size=1_000)
        result = validate_property(prop)

        assert result.is_valid
        assert result.warnings == []

    def test_missing_id(self):
        result = validate_property(Property("", "Flat", "Downtown"))
        assert result.errors[0].field == "property_id"

    def test_negative_price_and_size(self):
        result = validate_property(Property("P1", "Flat", "Downtown", price=-1, size=-1))

        assert [e.field for e in result.errors] == ["price", "size"]

    def test_zero_price_and_blank_area_warn(self):
        result = validate_property(Property("P1", "Flat", "  ", price=0))

        assert result.is_valid
        assert len(result.warnings) == 2


class TestValidateInvestor:
    """Test investor validation."""

    def test_valid(self):
        investor = Investor("INV-1", "Layla Haddad", email="layla@haddad-fo.ae", mandate=Mandate())
        assert validate_investor(investor).is_valid

    def test_name_required(self):
        result = validate_investor(Investor("INV-1", "  "))
        assert result.errors[0].field == "name"

    def test_bad_email(self):
        result = validate_investor(Investor("INV-1", "Layla", email="not-an-email"))
        assert result.errors[0].field == "email"

    def test_missing_mandate_warns(self):
        result = validate_investor(Investor("INV-1", "Layla"))

        assert result.is_valid
        assert any("no mandate" in w for w in result.warnings)

    def test_nested_mandate_errors(self):
        investor = Investor("INV-1", "Layla", mandate=Mandate(min_investment=10, max_investment=1))
        result = validate_investor(investor)

        assert not result.is_valid
        assert result.errors[0].field == "mandate"
