"""
Property (listing) data model.

Defines the structure for listings from the catalogue that are
scored against investor mandates.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class PropertyType(Enum):
    """Broad property classification."""

    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    MIXED_USE = "mixed-use"
    LAND = "land"


class PropertyStatus(Enum):
    """Availability of the listing."""

    AVAILABLE = "available"
    UNDER_OFFER = "under-offer"
    SOLD = "sold"
    OFF_MARKET = "off-market"


@dataclass
class Property:
    """
    Catalogue listing.

    Read-only to the scorer and bundle builder.
    """

    # Identification
    property_id: str
    title: str = ""

    # Classification
    area: str = ""  # e.g., "Downtown Dubai", "Business Bay"
    property_type: PropertyType = PropertyType.RESIDENTIAL
    status: PropertyStatus = PropertyStatus.AVAILABLE

    # Financial / physical
    price: float = 0
    size: float = 0  # sqft, 0 = unknown
    currency: str = "AED"

    # Details
    address: str = ""
    bedrooms: Optional[int] = None
    view: str = ""
    furnished: Optional[bool] = None

    created_at: Optional[datetime] = None

    @property
    def is_available(self) -> bool:
        return self.status == PropertyStatus.AVAILABLE

    @property
    def price_per_sqft(self) -> Optional[float]:
        if not self.size:
            return None
        return self.price / self.size

    def to_dict(self) -> dict:
        """Convert property to dictionary representation."""
        return {
            "property_id": self.property_id,
            "title": self.title,
            "area": self.area,
            "property_type": self.property_type.value,
            "status": self.status.value,
            "price": self.price,
            "size": self.size,
            "currency": self.currency,
            "address": self.address,
            "bedrooms": self.bedrooms,
            "view": self.view,
            "furnished": self.furnished,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Property":
        """Create property from dictionary representation."""
        created_at = None
        if data.get("created_at"):
            created_at = datetime.fromisoformat(data["created_at"])

        return cls(
            property_id=data.get("property_id") or data["id"],
            title=data.get("title", ""),
            area=data.get("area") or "",
            property_type=PropertyType(data.get("property_type") or data.get("type") or "residential"),
            status=PropertyStatus(data.get("status", "available")),
            price=float(data.get("price") or 0),
            size=float(data.get("size") or 0),
            currency=data.get("currency") or "AED",
            address=data.get("address") or "",
            bedrooms=data.get("bedrooms"),
            view=data.get("view") or "",
            furnished=data.get("furnished"),
            created_at=created_at,
        )
