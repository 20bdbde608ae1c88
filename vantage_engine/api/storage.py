"""
Investor, listing and recommendation storage.

In-memory stores with optional JSON file persistence. These stand in
for the CRM's data-fetching collaborators: the engine only ever sees
the records they return.
"""

import json
import uuid
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Generic, Optional, TypeVar

from vantage_engine.core import (
    Investor,
    InvestorSegment,
    InvestorStatus,
    Mandate,
    Property,
    PropertyStatus,
    PropertyType,
    Recommendation,
    RiskTolerance,
    CompletionStatus,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class JsonStore(Generic[T]):
    """
    In-memory record storage with optional JSON file persistence.

    Subclasses set the collection name and how to serialize records.
    """

    collection = "records"

    def __init__(
        self,
        storage_path: Optional[str],
        key: Callable[[T], str],
        loads: Callable[[dict], T],
        dumps: Callable[[T], dict],
    ):
        """
        Initialize storage.

        Args:
            storage_path: Optional path to JSON file for persistence.
                         If None, storage is in-memory only.
        """
        self._records: dict[str, T] = {}
        self._storage_path = storage_path
        self._key = key
        self._loads = loads
        self._dumps = dumps
        self._load()

    def _load(self) -> None:
        """Load records from JSON file if path is set."""
        if not self._storage_path:
            return

        path = Path(self._storage_path)
        if not path.exists():
            return

        # A file is loaded whole or not at all
        records: dict[str, T] = {}
        try:
            with open(path, "r") as f:
                data = json.load(f)

            for record_data in data.get(self.collection, []):
                record = self._loads(record_data)
                records[self._key(record)] = record

        except (json.JSONDecodeError, KeyError, ValueError, TypeError, AttributeError) as e:
            logger.warning("Could not load %s from %s: %s", self.collection, path, e)
            return

        self._records = records

    def _save(self) -> None:
        """Save records to JSON file if path is set."""
        if not self._storage_path:
            return

        path = Path(self._storage_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "version": "1.0",
            "updated_at": datetime.now().isoformat(),
            self.collection: [self._dumps(r) for r in self._records.values()],
        }

        with open(path, "w") as f:
            json.dump(data, f, indent=2)

    def create(self, record: T) -> T:
        """
        Store a new record.

        Raises:
            ValueError: If the record's id already exists
        """
        key = self._key(record)
        if key in self._records:
            raise ValueError(f"{self.collection[:-1].capitalize()} '{key}' already exists")

        self._records[key] = record
        self._save()
        return record

    def get(self, key: str) -> Optional[T]:
        return self._records.get(key)

    def get_all(self) -> list[T]:
        """Get all records in insertion order."""
        return list(self._records.values())

    def update(self, record: T) -> T:
        """
        Replace an existing record.

        Raises:
            ValueError: If the record doesn't exist
        """
        key = self._key(record)
        if key not in self._records:
            raise ValueError(f"{self.collection[:-1].capitalize()} '{key}' not found")

        self._records[key] = record
        self._save()
        return record

    def delete(self, key: str) -> bool:
        """
        Delete a record.

        Returns:
            True if deleted, False if not found
        """
        if key not in self._records:
            return False

        del self._records[key]
        self._save()
        return True

    def count(self) -> int:
        return len(self._records)


class InvestorStorage(JsonStore[Investor]):
    collection = "investors"

    def __init__(self, storage_path: Optional[str] = None):
        super().__init__(
            storage_path,
            key=lambda i: i.investor_id,
            loads=Investor.from_dict,
            dumps=lambda i: i.to_dict(),
        )

    def search(
        self,
        status: Optional[InvestorStatus] = None,
        tenant_id: Optional[str] = None,
    ) -> list[Investor]:
        """Search investors with filters."""
        results = []
        for investor in self._records.values():
            if status and investor.status != status:
                continue
            if tenant_id and investor.tenant_id != tenant_id:
                continue
            results.append(investor)
        return results


class PropertyStorage(JsonStore[Property]):
    collection = "listings"

    def __init__(self, storage_path: Optional[str] = None):
        super().__init__(
            storage_path,
            key=lambda p: p.property_id,
            loads=Property.from_dict,
            dumps=lambda p: p.to_dict(),
        )

    def available(self) -> list[Property]:
        """Available listings, in catalogue order."""
        return [p for p in self._records.values() if p.is_available]


class RecommendationStorage(JsonStore[Recommendation]):
    collection = "recommendations"

    def __init__(self, storage_path: Optional[str] = None):
        super().__init__(
            storage_path,
            key=lambda r: r.recommendation_id,
            loads=Recommendation.from_dict,
            dumps=lambda r: r.to_dict(),
        )

    def save(self, recommendation: Recommendation) -> Recommendation:
        """Persist changes made to a stored recommendation."""
        return self.update(recommendation)

    def list_by_investor(self, investor_id: str) -> list[Recommendation]:
        """Recommendations for an investor, most recent activity first."""
        recs = [r for r in self._records.values() if r.investor_id == investor_id]
        recs.sort(key=lambda r: r.last_activity_at or r.updated_at, reverse=True)
        return recs


def _generate_id(prefix: str) -> str:
    return f"{prefix}-{datetime.now().strftime('%Y%m%d')}-{uuid.uuid4().hex[:6].upper()}"


def generate_investor_id() -> str:
    return _generate_id("INV")


def generate_property_id() -> str:
    return _generate_id("PRP")


def create_sample_data(investors: InvestorStorage, listings: PropertyStorage) -> None:
    """Create sample investors and listings for demo purposes."""

    sample_investors = [
        Investor(
            investor_id="INV-0001",
            name="Layla Haddad",
            company="Haddad Family Office",
            email="layla@haddad-fo.ae",
            segment=InvestorSegment.FAMILY_OFFICE,
            mandate=Mandate(
                preferred_areas=["Downtown", "Dubai Marina"],
                property_types=["residential"],
                min_investment=1_000_000,
                max_investment=5_000_000,
                strategy="Income",
                investment_horizon="5-7 years",
                yield_target="6-7%",
                risk_tolerance=RiskTolerance.LOW,
                completion_status=CompletionStatus.READY,
            ),
            notes="Prefers ready units with existing tenants",
        ),
        Investor(
            investor_id="INV-0002",
            name="Marcus Webb",
            company="Webb Capital",
            email="marcus@webbcapital.com",
            segment=InvestorSegment.INSTITUTIONAL,
            mandate=Mandate(
                preferred_areas=["Business Bay", "DIFC"],
                property_types=["commercial", "mixed-use"],
                min_investment=5_000_000,
                strategy="Value-add",
                investment_horizon="3-5 years",
                yield_target="8%+",
                risk_tolerance=RiskTolerance.HIGH,
            ),
        ),
        Investor(
            investor_id="INV-0003",
            name="Priya Nair",
            email="priya.nair@example.org",
            status=InvestorStatus.PENDING,
            segment=InvestorSegment.HNWI,
            notes="Mandate not captured yet",
        ),
    ]

    sample_listings = [
        Property("PRP-1001", "Burj Vista 2BR", "Downtown Dubai", PropertyType.RESIDENTIAL,
                 price=2_500_000, size=1_250),
        Property("PRP-1002", "Marina Gate 1BR", "Dubai Marina", PropertyType.RESIDENTIAL,
                 price=1_650_000, size=820),
        Property("PRP-1003", "Bay Square Office", "Business Bay", PropertyType.COMMERCIAL,
                 price=6_000_000, size=3_400),
        Property("PRP-1004", "DIFC Retail Podium", "DIFC", PropertyType.MIXED_USE,
                 price=12_500_000, size=5_100),
        Property("PRP-1005", "Opera Grand 3BR", "Downtown Dubai", PropertyType.RESIDENTIAL,
                 price=7_800_000, size=2_300),
        Property("PRP-1006", "JVC Townhouse", "Jumeirah Village Circle", PropertyType.RESIDENTIAL,
                 price=1_900_000, size=2_100),
        Property("PRP-1007", "Dubai South Plot", "Dubai South", PropertyType.LAND,
                 price=4_200_000, size=0),
        Property("PRP-1008", "Marina Promenade 2BR", "Dubai Marina", PropertyType.RESIDENTIAL,
                 price=3_100_000, size=1_400, status=PropertyStatus.UNDER_OFFER),
    ]

    for investor in sample_investors:
        try:
            investors.create(investor)
        except ValueError:
            pass  # Already exists

    for listing in sample_listings:
        try:
            listings.create(listing)
        except ValueError:
            pass  # Already exists
