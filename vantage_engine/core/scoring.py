"""
Mandate-fit scoring.

Scores a property against an investor mandate on three equally
weighted criteria (area, type, budget) and explains each one, so the
caller can render pass/fail chips without recomputing anything.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .mandate import Mandate
from .property import Property


class FitCriterion(Enum):
    """Criteria evaluated by the scorer, in evaluation order."""

    AREA = "area"
    TYPE = "type"
    BUDGET = "budget"


@dataclass(frozen=True)
class FitReason:
    """Outcome of a single criterion."""

    criterion: FitCriterion
    label: str  # e.g. "Area: Downtown Dubai"
    met: bool

    def to_dict(self) -> dict:
        return {
            "criterion": self.criterion.value,
            "label": self.label,
            "met": self.met,
        }


@dataclass(frozen=True)
class FitResult:
    """
    Fit score for one property against one mandate.

    Ephemeral: recomputed on every call, never persisted.
    """

    property_id: str
    score: int  # 0 to 100
    reasons: tuple[FitReason, ...] = field(default_factory=tuple)

    @property
    def met_count(self) -> int:
        return sum(1 for r in self.reasons if r.met)

    @property
    def failed_reasons(self) -> list[FitReason]:
        return [r for r in self.reasons if not r.met]

    def reason_for(self, criterion: FitCriterion) -> Optional[FitReason]:
        for reason in self.reasons:
            if reason.criterion == criterion:
                return reason
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "property_id": self.property_id,
            "score": self.score,
            "reasons": [r.to_dict() for r in self.reasons],
        }


@dataclass(frozen=True)
class ScoredProperty:
    """A property paired with its fit result."""

    property: Property
    fit: FitResult

    @property
    def score(self) -> int:
        return self.fit.score


def format_price(value: float, currency: str = "AED") -> str:
    """Format a price compactly, e.g. 'AED 2.5M', 'AED 850K', 'AED 900'."""
    if value >= 1_000_000:
        return f"{currency} {value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{currency} {value / 1_000:.0f}K"
    return f"{currency} {_round_half_up(value):,}"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _matches_terms(value: str, terms: list[str]) -> bool:
    """No terms is a wildcard; otherwise any term must be a substring."""
    if not terms:
        return True
    haystack = (value or "").lower()
    return any(term in haystack for term in terms)


def _score_area(prop: Property, mandate: Mandate) -> FitReason:
    return FitReason(
        criterion=FitCriterion.AREA,
        label=f"Area: {prop.area}",
        met=_matches_terms(prop.area, mandate.area_terms()),
    )


def _score_type(prop: Property, mandate: Mandate) -> FitReason:
    return FitReason(
        criterion=FitCriterion.TYPE,
        label=f"Type: {prop.property_type.value}",
        met=_matches_terms(prop.property_type.value, mandate.type_terms()),
    )


def _score_budget(prop: Property, mandate: Mandate) -> FitReason:
    return FitReason(
        criterion=FitCriterion.BUDGET,
        label=f"Budget: {format_price(prop.price, prop.currency)}",
        met=mandate.accepts_price(prop.price),
    )


# Criteria scorers in the order their reasons are reported
FIT_CRITERIA = (
    _score_area,
    _score_type,
    _score_budget,
)


def score_mandate_fit(prop: Property, mandate: Optional[Mandate]) -> FitResult:
    """
    Score a property against a mandate.

    Args:
        prop: The property to score
        mandate: The investor's mandate; None is a valid zero-information input

    Returns:
        FitResult with score round(met / criteria * 100) and one reason
        per criterion in fixed order (area, type, budget)
    """
    if mandate is None:
        return FitResult(property_id=prop.property_id, score=0, reasons=())

    reasons = tuple(scorer(prop, mandate) for scorer in FIT_CRITERIA)
    met = sum(1 for r in reasons if r.met)
    score = _round_half_up(met / len(reasons) * 100)

    return FitResult(property_id=prop.property_id, score=score, reasons=reasons)


def score_properties(
    properties: list[Property],
    mandate: Optional[Mandate],
) -> list[ScoredProperty]:
    """
    Score multiple properties against a mandate.

    Returns:
        List of ScoredProperty sorted by score descending. The sort is
        stable, so equal scores keep their catalogue order.
    """
    scored = [ScoredProperty(p, score_mandate_fit(p, mandate)) for p in properties]
    scored.sort(key=lambda s: s.score, reverse=True)
    return scored
