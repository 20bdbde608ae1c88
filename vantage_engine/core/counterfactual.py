"""
Counterfactual module.

A counterfactual is a property that was considered for an investor but
left out of the recommended set. Each one carries machine-readable
reason codes, human-readable labels, the constraint it violated and a
suggestion of what would change the outcome.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from .mandate import Mandate
from .property import Property
from .scoring import FitCriterion, FitReason, FitResult, format_price


class ExclusionCode(Enum):
    """Machine-readable exclusion reason codes."""

    AREA_MISMATCH = "area_mismatch"
    TYPE_MISMATCH = "type_mismatch"
    UNDER_BUDGET = "under_budget"
    OVER_BUDGET = "over_budget"
    RANKED_OUT = "ranked_out"
    NO_MANDATE = "no_mandate"


@dataclass
class ViolatedConstraint:
    """Mandate constraint a property failed."""

    key: str
    expected: Any = None
    actual: Any = None

    def to_dict(self) -> dict:
        return {"key": self.key, "expected": self.expected, "actual": self.actual}


@dataclass
class ExclusionReason:
    """Why a property was excluded, and what would fix it."""

    code: ExclusionCode
    label: str
    constraint: Optional[ViolatedConstraint] = None
    remedy: str = ""


@dataclass
class Counterfactual:
    """
    Property evaluated but not recommended.

    reason_codes and reason_labels are parallel lists.
    """

    property_id: str
    title: str = ""
    score: int = 0
    reason_codes: list[str] = field(default_factory=list)
    reason_labels: list[str] = field(default_factory=list)
    violated_constraints: list[ViolatedConstraint] = field(default_factory=list)
    what_would_change_my_mind: list[str] = field(default_factory=list)
    details: str = ""

    @property
    def top_reason(self) -> Optional[str]:
        return self.reason_labels[0] if self.reason_labels else None

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "property_id": self.property_id,
            "title": self.title,
            "score": self.score,
            "reason_codes": list(self.reason_codes),
            "reason_labels": list(self.reason_labels),
            "violated_constraints": [c.to_dict() for c in self.violated_constraints],
            "what_would_change_my_mind": list(self.what_would_change_my_mind),
            "details": self.details,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Counterfactual":
        """Create counterfactual from dictionary representation."""
        return cls(
            property_id=data["property_id"],
            title=data.get("title", ""),
            score=data.get("score", 0),
            reason_codes=list(data.get("reason_codes") or []),
            reason_labels=list(data.get("reason_labels") or []),
            violated_constraints=[
                ViolatedConstraint(
                    key=c["key"],
                    expected=c.get("expected"),
                    actual=c.get("actual"),
                )
                for c in data.get("violated_constraints") or []
            ],
            what_would_change_my_mind=list(data.get("what_would_change_my_mind") or []),
            details=data.get("details", ""),
        )


# =============================================================================
# Exclusion Rules
# =============================================================================

def explain_area(prop: Property, mandate: Mandate, reason: FitReason) -> ExclusionReason:
    """Area not in the mandate's preferred areas."""
    areas = [a for a in mandate.preferred_areas if (a or "").strip()]
    return ExclusionReason(
        code=ExclusionCode.AREA_MISMATCH,
        label=reason.label,
        constraint=ViolatedConstraint(
            key="preferred_areas",
            expected=areas,
            actual=prop.area,
        ),
        remedy=f"If the mandate included {prop.area or 'this area'}",
    )


def explain_type(prop: Property, mandate: Mandate, reason: FitReason) -> ExclusionReason:
    """Property type not in the mandate's property types."""
    types = [t for t in mandate.property_types if (t or "").strip()]
    return ExclusionReason(
        code=ExclusionCode.TYPE_MISMATCH,
        label=reason.label,
        constraint=ViolatedConstraint(
            key="property_types",
            expected=types,
            actual=prop.property_type.value,
        ),
        remedy=f"If the mandate accepted {prop.property_type.value} property",
    )


def explain_budget(prop: Property, mandate: Mandate, reason: FitReason) -> ExclusionReason:
    """Price outside the investment range."""
    if prop.price < mandate.budget_floor:
        return ExclusionReason(
            code=ExclusionCode.UNDER_BUDGET,
            label=reason.label,
            constraint=ViolatedConstraint(
                key="min_investment",
                expected=mandate.min_investment,
                actual=prop.price,
            ),
            remedy=f"If the minimum investment were {format_price(prop.price, prop.currency)} or lower",
        )

    return ExclusionReason(
        code=ExclusionCode.OVER_BUDGET,
        label=reason.label,
        constraint=ViolatedConstraint(
            key="max_investment",
            expected=mandate.max_investment,
            actual=prop.price,
        ),
        remedy=f"If price <= {format_price(mandate.budget_ceiling, prop.currency)}",
    )


EXCLUSION_RULES: dict[FitCriterion, Callable[[Property, Mandate, FitReason], ExclusionReason]] = {
    FitCriterion.AREA: explain_area,
    FitCriterion.TYPE: explain_type,
    FitCriterion.BUDGET: explain_budget,
}


def explain_exclusion(
    prop: Property,
    mandate: Optional[Mandate],
    fit: FitResult,
) -> list[ExclusionReason]:
    """
    List the reasons a property was left out, in criterion order.

    A property that met every criterion was excluded by rank alone.
    """
    if mandate is None:
        return [ExclusionReason(
            code=ExclusionCode.NO_MANDATE,
            label="No mandate on file",
            remedy="Capture the investor's mandate to rank properties",
        )]

    reasons = [
        EXCLUSION_RULES[r.criterion](prop, mandate, r)
        for r in fit.failed_reasons
    ]

    if not reasons:
        reasons.append(ExclusionReason(
            code=ExclusionCode.RANKED_OUT,
            label=f"Ranked below the recommended set ({fit.score}/100 fit)",
            remedy="If a recommended property were removed",
        ))

    return reasons


def build_counterfactual(
    prop: Property,
    mandate: Optional[Mandate],
    fit: FitResult,
) -> Counterfactual:
    """Build the counterfactual record for an excluded property."""
    reasons = explain_exclusion(prop, mandate, fit)

    return Counterfactual(
        property_id=prop.property_id,
        title=prop.title,
        score=fit.score,
        reason_codes=[r.code.value for r in reasons],
        reason_labels=[r.label for r in reasons],
        violated_constraints=[r.constraint for r in reasons if r.constraint],
        what_would_change_my_mind=[r.remedy for r in reasons if r.remedy],
        details=f"{fit.met_count}/{len(fit.reasons)} mandate criteria met" if fit.reasons else "",
    )
