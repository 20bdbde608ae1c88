"""
Core modules for the Vantage recommendation engine.

Data models:
- mandate: Investor mandate (areas, types, budget, secondary preferences)
- investor: CRM investor record with nested mandate
- property: Catalogue listing

Matching:
- scoring: Mandate-fit score (area, type, budget) with per-criterion reasons
- counterfactual: Exclusion reasons for properties left out
- bundle: Recommendation bundle builder (recommended + counterfactuals)

Workflow:
- recommendation: Recommendation lifecycle (DRAFT → SENT → ... → APPROVED/REJECTED)
- validation: Input validation rules
"""

from .mandate import (
    Mandate,
    RiskTolerance,
    FurnishedPreference,
    CompletionStatus,
    TenantRequirement,
)
from .investor import Investor, InvestorStatus, InvestorSegment
from .property import Property, PropertyType, PropertyStatus
from .validation import (
    ValidationError,
    ValidationResult,
    validate_mandate,
    validate_property,
    validate_investor,
)
from .scoring import (
    FitCriterion,
    FitReason,
    FitResult,
    ScoredProperty,
    format_price,
    score_mandate_fit,
    score_properties,
)
from .counterfactual import (
    Counterfactual,
    ExclusionCode,
    ExclusionReason,
    ViolatedConstraint,
    build_counterfactual,
    explain_exclusion,
)
from .bundle import (
    BundleConfig,
    BundleSource,
    RecommendedProperty,
    RecommendationBundle,
    assemble_bundle,
    build_recommendation_bundle,
)
from .recommendation import (
    CreatedByRole,
    Decision,
    InvalidTransitionError,
    NotFoundError,
    PropertyNote,
    QnaEntry,
    Recommendation,
    RecommendationAction,
    RecommendationStatus,
    create_draft_from_bundle,
    create_recommendation,
)

__all__ = [
    # Data models
    "Mandate",
    "RiskTolerance",
    "FurnishedPreference",
    "CompletionStatus",
    "TenantRequirement",
    "Investor",
    "InvestorStatus",
    "InvestorSegment",
    "Property",
    "PropertyType",
    "PropertyStatus",
    # Validation
    "ValidationError",
    "ValidationResult",
    "validate_mandate",
    "validate_property",
    "validate_investor",
    # Scoring
    "FitCriterion",
    "FitReason",
    "FitResult",
    "ScoredProperty",
    "format_price",
    "score_mandate_fit",
    "score_properties",
    # Counterfactuals
    "Counterfactual",
    "ExclusionCode",
    "ExclusionReason",
    "ViolatedConstraint",
    "build_counterfactual",
    "explain_exclusion",
    # Bundles
    "BundleConfig",
    "BundleSource",
    "RecommendedProperty",
    "RecommendationBundle",
    "assemble_bundle",
    "build_recommendation_bundle",
    # Recommendations
    "CreatedByRole",
    "Decision",
    "InvalidTransitionError",
    "NotFoundError",
    "PropertyNote",
    "QnaEntry",
    "Recommendation",
    "RecommendationAction",
    "RecommendationStatus",
    "create_draft_from_bundle",
    "create_recommendation",
]
