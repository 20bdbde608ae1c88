"""
Mandate data model.

Defines an investor's declared investment preferences:
- Preferred areas and property types (scored)
- Budget range (scored)
- Strategy, horizon, yield target and risk tolerance (descriptive)
- Secondary preferences the fit scorer does not weigh yet

Every optional preference uses None (or an empty list) as its explicit
"unset" value; nothing is inferred from truthiness.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class RiskTolerance(Enum):
    """Investor risk appetite."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class FurnishedPreference(Enum):
    FURNISHED = "furnished"
    UNFURNISHED = "unfurnished"
    ANY = "any"


class CompletionStatus(Enum):
    READY = "ready"
    OFF_PLAN = "off_plan"
    ANY = "any"


class TenantRequirement(Enum):
    VACANT = "vacant"
    TENANTED = "tenanted"
    ANY = "any"


# Wire keys used by the CRM front end, mapped to our field names
_CAMEL_KEYS = {
    "preferredAreas": "preferred_areas",
    "propertyTypes": "property_types",
    "minInvestment": "min_investment",
    "maxInvestment": "max_investment",
    "investmentHorizon": "investment_horizon",
    "yieldTarget": "yield_target",
    "riskTolerance": "risk_tolerance",
    "preferredBedrooms": "preferred_bedrooms",
    "preferredViews": "preferred_views",
    "furnishedPreference": "furnished_preference",
    "completionStatus": "completion_status",
    "developerPreferences": "developer_preferences",
    "maxServiceCharge": "max_service_charge",
    "minSize": "min_size",
    "maxSize": "max_size",
    "tenantRequirements": "tenant_requirements",
    "paymentPlanRequired": "payment_plan_required",
    "coInvestmentOpen": "co_investment_open",
    "exclusiveDeals": "exclusive_deals",
}


def _normalize_terms(values: list[str]) -> list[str]:
    """Lower-case and strip matching terms, dropping blank entries."""
    terms = []
    for value in values:
        term = (value or "").strip().lower()
        if term:
            terms.append(term)
    return terms


def _string_list(values) -> list[str]:
    """Keep string entries only; nulls from the wire are dropped."""
    return [v for v in values or [] if isinstance(v, str)]


def _optional_float(value) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _optional_enum(enum_cls, value):
    if value is None or value == "":
        return None
    return enum_cls(value)


@dataclass
class Mandate:
    """
    Investor mandate.

    Only preferred_areas, property_types and the investment bounds feed
    the fit score. The remaining fields are carried so they survive a
    round trip through storage and the API.
    """

    # Scored criteria
    preferred_areas: list[str] = field(default_factory=list)  # e.g., ["Downtown", "Marina"]
    property_types: list[str] = field(default_factory=list)  # e.g., ["residential"]
    min_investment: Optional[float] = None  # None = no floor
    max_investment: Optional[float] = None  # None = unbounded

    # Descriptive
    strategy: str = ""
    investment_horizon: str = ""
    yield_target: str = ""  # free text, e.g. "6-8%"
    risk_tolerance: RiskTolerance = RiskTolerance.MEDIUM
    notes: str = ""

    # Secondary preferences (not scored)
    preferred_bedrooms: list[int] = field(default_factory=list)
    preferred_views: list[str] = field(default_factory=list)
    furnished_preference: Optional[FurnishedPreference] = None
    completion_status: Optional[CompletionStatus] = None
    developer_preferences: list[str] = field(default_factory=list)
    max_service_charge: Optional[float] = None  # per sqft
    min_size: Optional[float] = None  # sqft
    max_size: Optional[float] = None  # sqft
    tenant_requirements: Optional[TenantRequirement] = None
    payment_plan_required: Optional[bool] = None
    co_investment_open: Optional[bool] = None
    exclusive_deals: Optional[bool] = None

    def area_terms(self) -> list[str]:
        """Normalized area terms; empty means any area is acceptable."""
        return _normalize_terms(self.preferred_areas)

    def type_terms(self) -> list[str]:
        """Normalized property type terms; empty means any type."""
        return _normalize_terms(self.property_types)

    @property
    def budget_floor(self) -> float:
        return self.min_investment if self.min_investment is not None else 0.0

    @property
    def budget_ceiling(self) -> float:
        return self.max_investment if self.max_investment is not None else math.inf

    def accepts_price(self, price: float) -> bool:
        """Check if price falls within the budget range (inclusive)."""
        return self.budget_floor <= price <= self.budget_ceiling

    def to_dict(self) -> dict:
        """Convert mandate to dictionary representation."""
        return {
            "preferred_areas": list(self.preferred_areas),
            "property_types": list(self.property_types),
            "min_investment": self.min_investment,
            "max_investment": self.max_investment,
            "strategy": self.strategy,
            "investment_horizon": self.investment_horizon,
            "yield_target": self.yield_target,
            "risk_tolerance": self.risk_tolerance.value,
            "notes": self.notes,
            "preferred_bedrooms": list(self.preferred_bedrooms),
            "preferred_views": list(self.preferred_views),
            "furnished_preference": (
                self.furnished_preference.value if self.furnished_preference else None
            ),
            "completion_status": (
                self.completion_status.value if self.completion_status else None
            ),
            "developer_preferences": list(self.developer_preferences),
            "max_service_charge": self.max_service_charge,
            "min_size": self.min_size,
            "max_size": self.max_size,
            "tenant_requirements": (
                self.tenant_requirements.value if self.tenant_requirements else None
            ),
            "payment_plan_required": self.payment_plan_required,
            "co_investment_open": self.co_investment_open,
            "exclusive_deals": self.exclusive_deals,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Mandate":
        """
        Create mandate from dictionary representation.

        Accepts both snake_case keys and the camelCase keys the CRM
        front end sends.
        """
        data = {_CAMEL_KEYS.get(key, key): value for key, value in data.items()}

        return cls(
            preferred_areas=_string_list(data.get("preferred_areas")),
            property_types=_string_list(data.get("property_types")),
            min_investment=_optional_float(data.get("min_investment")),
            max_investment=_optional_float(data.get("max_investment")),
            strategy=data.get("strategy") or "",
            investment_horizon=data.get("investment_horizon") or "",
            yield_target=str(data.get("yield_target") or ""),
            risk_tolerance=RiskTolerance(data.get("risk_tolerance") or "medium"),
            notes=data.get("notes") or "",
            preferred_bedrooms=list(data.get("preferred_bedrooms") or []),
            preferred_views=_string_list(data.get("preferred_views")),
            furnished_preference=_optional_enum(
                FurnishedPreference, data.get("furnished_preference")
            ),
            completion_status=_optional_enum(
                CompletionStatus, data.get("completion_status")
            ),
            developer_preferences=_string_list(data.get("developer_preferences")),
            max_service_charge=_optional_float(data.get("max_service_charge")),
            min_size=_optional_float(data.get("min_size")),
            max_size=_optional_float(data.get("max_size")),
            tenant_requirements=_optional_enum(
                TenantRequirement, data.get("tenant_requirements")
            ),
            payment_plan_required=data.get("payment_plan_required"),
            co_investment_open=data.get("co_investment_open"),
            exclusive_deals=data.get("exclusive_deals"),
        )
