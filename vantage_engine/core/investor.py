"""
Investor data model.

An investor record as fetched from the CRM, with its nested mandate.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from .mandate import Mandate


class InvestorStatus(Enum):
    ACTIVE = "active"
    PENDING = "pending"
    INACTIVE = "inactive"


class InvestorSegment(Enum):
    """Classification of investor entities."""

    FAMILY_OFFICE = "family_office"
    HNWI = "hnwi"  # High Net Worth Individual
    INSTITUTIONAL = "institutional"
    DEVELOPER = "developer"
    OTHER = "other"


@dataclass
class Investor:
    """
    CRM investor.

    The mandate is optional: an investor without one is a valid
    zero-information case for scoring.
    """

    # Identification
    investor_id: str
    name: str
    company: str = ""
    email: str = ""
    phone: str = ""

    # Status
    status: InvestorStatus = InvestorStatus.ACTIVE
    tenant_id: Optional[str] = None
    segment: Optional[InvestorSegment] = None

    # Preferences
    mandate: Optional[Mandate] = None

    # Notes
    tags: list[str] = field(default_factory=list)
    notes: str = ""

    created_at: datetime = field(default_factory=datetime.now)

    @property
    def has_mandate(self) -> bool:
        return self.mandate is not None

    def to_dict(self) -> dict:
        """Convert investor to dictionary representation."""
        return {
            "investor_id": self.investor_id,
            "name": self.name,
            "company": self.company,
            "email": self.email,
            "phone": self.phone,
            "status": self.status.value,
            "tenant_id": self.tenant_id,
            "segment": self.segment.value if self.segment else None,
            "mandate": self.mandate.to_dict() if self.mandate else None,
            "tags": list(self.tags),
            "notes": self.notes,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Investor":
        """Create investor from dictionary representation."""
        mandate = None
        if data.get("mandate"):
            mandate = Mandate.from_dict(data["mandate"])

        segment = None
        if data.get("segment"):
            segment = InvestorSegment(data["segment"])

        investor = cls(
            investor_id=data.get("investor_id") or data["id"],
            name=data["name"],
            company=data.get("company", ""),
            email=data.get("email", ""),
            phone=data.get("phone", ""),
            status=InvestorStatus(data.get("status", "active")),
            tenant_id=data.get("tenant_id"),
            segment=segment,
            mandate=mandate,
            tags=list(data.get("tags") or []),
            notes=data.get("notes", ""),
        )

        if data.get("created_at"):
            investor.created_at = datetime.fromisoformat(data["created_at"])

        return investor
