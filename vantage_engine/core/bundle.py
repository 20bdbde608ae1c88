"""
Recommendation bundle builder.

Ranks the available catalogue against an investor's mandate and splits
it into the recommended set and the counterfactuals (considered but
excluded, with reasons). The bundle seeds a draft Recommendation.

Everything the builder needs is passed in: the investor lookup and the
catalogue are supplied by the caller, nothing is read from ambient state.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from .counterfactual import Counterfactual, build_counterfactual
from .investor import Investor
from .mandate import Mandate
from .property import Property
from .scoring import FitReason, score_properties

logger = logging.getLogger(__name__)


class BundleSource(Enum):
    """What triggered the bundle. Caller-supplied, never computed."""

    MANUAL = "manual"
    AI_INSIGHT = "ai_insight"
    NLP_QUERY = "nlp_query"


@dataclass(frozen=True)
class BundleConfig:
    """Partition sizes for the bundle."""

    recommended_count: int = 3
    counterfactual_count: int = 5

    def __post_init__(self):
        if self.recommended_count < 0:
            raise ValueError("recommended_count cannot be negative")
        if self.counterfactual_count < 0:
            raise ValueError("counterfactual_count cannot be negative")


DEFAULT_BUNDLE_CONFIG = BundleConfig()


@dataclass
class RecommendedProperty:
    """Property selected into the recommended set."""

    property_id: str
    score: int
    reasons: list[FitReason] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "property_id": self.property_id,
            "score": self.score,
            "reasons": [r.to_dict() for r in self.reasons],
        }


@dataclass
class RecommendationBundle:
    """
    Transient output of the builder.

    Consumed once to construct a draft Recommendation.
    """

    investor_id: str
    source: BundleSource
    recommended: list[RecommendedProperty] = field(default_factory=list)
    counterfactuals: list[Counterfactual] = field(default_factory=list)

    @classmethod
    def empty(cls, investor_id: str, source: BundleSource) -> "RecommendationBundle":
        return cls(investor_id=investor_id, source=source)

    @property
    def is_empty(self) -> bool:
        return not self.recommended and not self.counterfactuals

    @property
    def recommended_ids(self) -> list[str]:
        return [r.property_id for r in self.recommended]

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "investor_id": self.investor_id,
            "source": self.source.value,
            "recommended": [r.to_dict() for r in self.recommended],
            "counterfactuals": [c.to_dict() for c in self.counterfactuals],
        }


def assemble_bundle(
    investor_id: str,
    mandate: Optional[Mandate],
    listings: list[Property],
    source: BundleSource = BundleSource.MANUAL,
    config: BundleConfig = DEFAULT_BUNDLE_CONFIG,
) -> RecommendationBundle:
    """
    Rank available listings against a mandate and partition them.

    Args:
        investor_id: Investor the bundle is for
        mandate: The investor's mandate (None scores everything 0)
        listings: Full catalogue, in catalogue order
        source: Trigger tag carried through to the bundle
        config: Recommended / counterfactual partition sizes

    Returns:
        RecommendationBundle; empty when nothing is available
    """
    available = [p for p in listings if p.is_available]
    ranked = score_properties(available, mandate)

    top = ranked[:config.recommended_count]
    rest = ranked[config.recommended_count:config.recommended_count + config.counterfactual_count]

    recommended = [
        RecommendedProperty(
            property_id=s.property.property_id,
            score=s.score,
            reasons=list(s.fit.reasons),
        )
        for s in top
    ]
    counterfactuals = [build_counterfactual(s.property, mandate, s.fit) for s in rest]

    return RecommendationBundle(
        investor_id=investor_id,
        source=source,
        recommended=recommended,
        counterfactuals=counterfactuals,
    )


def build_recommendation_bundle(
    investor_id: str,
    *,
    find_investor: Callable[[str], Optional[Investor]],
    listings: list[Property],
    source: BundleSource = BundleSource.MANUAL,
    config: BundleConfig = DEFAULT_BUNDLE_CONFIG,
) -> RecommendationBundle:
    """
    Build the recommendation bundle for an investor.

    An unknown investor yields an empty bundle rather than an error;
    callers render the empty state.
    """
    investor = find_investor(investor_id)
    if investor is None:
        logger.info("Investor %s not found, returning empty bundle", investor_id)
        return RecommendationBundle.empty(investor_id, source)

    bundle = assemble_bundle(investor_id, investor.mandate, listings, source, config)
    logger.debug(
        "Built %s bundle for %s: %d recommended, %d counterfactuals",
        source.value,
        investor_id,
        len(bundle.recommended),
        len(bundle.counterfactuals),
    )
    return bundle
