"""
Input validation rules for investors, mandates and properties.

Run before anything is stored so the scorer only ever sees
well-formed records.
"""

import re
from dataclasses import dataclass, field
from typing import Any

from .investor import Investor
from .mandate import Mandate
from .property import Property, PropertyType


class ValidationError(Exception):
    """Raised when validation fails."""

    def __init__(self, field: str, message: str, value: Any = None):
        self.field = field
        self.message = message
        self.value = value
        super().__init__(f"{field}: {message}")

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


@dataclass
class ValidationResult:
    """Result of validation operation."""

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.is_valid

    def raise_for_errors(self) -> None:
        """Raise the first error, if any."""
        if self.errors:
            raise self.errors[0]


EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

KNOWN_TYPE_TERMS = {t.value for t in PropertyType}


def validate_mandate(mandate: Mandate, prefix: str = "mandate") -> ValidationResult:
    """
    Validate a mandate for correctness.

    Blank entries in the area or type lists are ignored by the scorer,
    so they only produce warnings.
    """
    errors: list[ValidationError] = []
    warnings: list[str] = []

    if mandate.min_investment is not None and mandate.min_investment < 0:
        errors.append(ValidationError(
            f"{prefix}.min_investment",
            "Minimum investment cannot be negative",
            mandate.min_investment,
        ))

    if mandate.max_investment is not None and mandate.max_investment < 0:
        errors.append(ValidationError(
            f"{prefix}.max_investment",
            "Maximum investment cannot be negative",
            mandate.max_investment,
        ))

    if mandate.min_investment is not None and mandate.max_investment is not None:
        if mandate.min_investment > mandate.max_investment:
            errors.append(ValidationError(
                f"{prefix}",
                "Minimum investment cannot exceed maximum investment",
                {"min": mandate.min_investment, "max": mandate.max_investment},
            ))

    if any(not (a or "").strip() for a in mandate.preferred_areas):
        warnings.append("Blank preferred area entries are ignored")

    if any(not (t or "").strip() for t in mandate.property_types):
        warnings.append("Blank property type entries are ignored")

    for term in mandate.type_terms():
        if not any(term in known for known in KNOWN_TYPE_TERMS):
            warnings.append(f"Property type '{term}' matches no known property type")

    if mandate.min_size is not None and mandate.max_size is not None:
        if mandate.min_size > mandate.max_size:
            errors.append(ValidationError(
                f"{prefix}",
                "Minimum size cannot exceed maximum size",
                {"min": mandate.min_size, "max": mandate.max_size},
            ))

    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def validate_property(prop: Property) -> ValidationResult:
    """Validate a catalogue property."""
    errors: list[ValidationError] = []
    warnings: list[str] = []

    if not prop.property_id:
        errors.append(ValidationError("property_id", "Property ID is required"))
    elif len(prop.property_id) > 64:
        errors.append(ValidationError(
            "property_id",
            "Property ID must be 64 characters or less",
            prop.property_id,
        ))

    if prop.price < 0:
        errors.append(ValidationError("price", "Price cannot be negative", prop.price))
    elif prop.price == 0:
        warnings.append("Price is zero - listing will only fit mandates without a minimum")

    if prop.size < 0:
        errors.append(ValidationError("size", "Size cannot be negative", prop.size))

    if not prop.area.strip():
        warnings.append("Area is blank - listing can only match mandates without preferred areas")

    if not prop.title:
        warnings.append("Title is empty")

    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def validate_investor(investor: Investor) -> ValidationResult:
    """Validate an investor and its nested mandate."""
    errors: list[ValidationError] = []
    warnings: list[str] = []

    if not investor.investor_id:
        errors.append(ValidationError("investor_id", "Investor ID is required"))

    if not investor.name or not investor.name.strip():
        errors.append(ValidationError("name", "Investor name is required"))
    elif len(investor.name) > 256:
        errors.append(ValidationError(
            "name",
            "Investor name must be 256 characters or less",
            investor.name,
        ))

    if investor.email and not EMAIL_PATTERN.match(investor.email):
        errors.append(ValidationError("email", "Invalid email address", investor.email))

    if investor.mandate is None:
        warnings.append("Investor has no mandate - fit scores will be 0")
    else:
        mandate_result = validate_mandate(investor.mandate)
        errors.extend(mandate_result.errors)
        warnings.extend(mandate_result.warnings)

    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)
