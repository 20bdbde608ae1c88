"""
Vantage Engine - FastAPI Web Application

Investor, listing and recommendation API with mandate-fit scoring
and recommendation bundles.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from vantage_engine import __version__
from vantage_engine.config import Settings
from vantage_engine.core import (
    BundleSource,
    CompletionStatus,
    CreatedByRole,
    FurnishedPreference,
    InvalidTransitionError,
    Investor,
    InvestorSegment,
    InvestorStatus,
    Mandate,
    NotFoundError,
    Property,
    PropertyNote,
    PropertyStatus,
    PropertyType,
    Recommendation,
    RecommendationStatus,
    RiskTolerance,
    TenantRequirement,
    ValidationError,
    build_recommendation_bundle,
    create_draft_from_bundle,
    create_recommendation,
    format_price,
    score_mandate_fit,
    validate_investor,
    validate_mandate,
    validate_property,
)
from vantage_engine.api.storage import (
    InvestorStorage,
    PropertyStorage,
    RecommendationStorage,
    create_sample_data,
    generate_investor_id,
    generate_property_id,
)

logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title="Vantage Engine",
    description="Mandate-fit scoring and investor recommendation API",
    version=__version__,
)

# Setup paths
BASE_DIR = Path(__file__).parent
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"

# Mount static files
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

# Setup templates
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["price"] = format_price


@dataclass
class Stores:
    settings: Settings
    investors: InvestorStorage
    listings: PropertyStorage
    recommendations: RecommendationStorage


# Global storage instance
_stores: Optional[Stores] = None


def get_stores() -> Stores:
    """Get or create the global storage instances."""
    global _stores
    if _stores is None:
        settings = Settings.from_env()
        _stores = Stores(
            settings=settings,
            investors=InvestorStorage(settings.investors_path),
            listings=PropertyStorage(settings.listings_path),
            recommendations=RecommendationStorage(settings.recommendations_path),
        )

        # Seed demo data if storage is empty
        if settings.seed_sample_data and _stores.investors.count() == 0:
            create_sample_data(_stores.investors, _stores.listings)
            logger.info(
                "Seeded %d investors and %d listings",
                _stores.investors.count(),
                _stores.listings.count(),
            )

    return _stores


def reset_stores() -> None:
    """Drop the global stores so the next request re-reads settings."""
    global _stores
    _stores = None


# Pydantic models for request/response
class InvestorCreate(BaseModel):
    investor_id: Optional[str] = None
    name: str
    company: str = ""
    email: str = ""
    phone: str = ""
    status: str = "active"
    tenant_id: Optional[str] = None
    segment: Optional[str] = None
    mandate: Optional[dict] = None
    tags: list[str] = []
    notes: str = ""


class ListingCreate(BaseModel):
    property_id: Optional[str] = None
    title: str = ""
    area: str = ""
    property_type: str = "residential"
    status: str = "available"
    price: float = 0
    size: float = 0
    currency: str = "AED"
    address: str = ""
    bedrooms: Optional[int] = None
    view: str = ""
    furnished: Optional[bool] = None


class FitRequest(BaseModel):
    property: dict
    mandate: Optional[dict] = None


class RecommendationCreate(BaseModel):
    investor_id: str
    source: str = "manual"
    created_by_role: str = "realtor"
    title: Optional[str] = None
    summary: Optional[str] = None
    # None builds from the investor's bundle
    property_ids: Optional[list[str]] = None


class RecommendationPatch(BaseModel):
    title: Optional[str] = None
    summary: Optional[str] = None
    status: Optional[str] = None
    trigger: Optional[str] = None
    property_notes: Optional[dict[str, dict]] = None


class QuestionInput(BaseModel):
    question: str


class AnswerInput(BaseModel):
    answer: str


class DecisionInput(BaseModel):
    outcome: str
    reason_tags: list[str] = []
    note: str = ""


class SupersedeInput(BaseModel):
    new_recommendation_id: str


# Routes

@app.get("/", response_class=HTMLResponse)
async def index(request: Request):
    """Serve the main application page."""
    stores = get_stores()
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "investors": stores.investors.get_all(),
            "listings": stores.listings.available(),
            "version": __version__,
        },
    )


@app.get("/api/health")
async def health():
    """Health check endpoint."""
    stores = get_stores()
    return {
        "status": "ok",
        "investors": stores.investors.count(),
        "listings": stores.listings.count(),
        "recommendations": stores.recommendations.count(),
    }


@app.get("/api/enums")
async def get_enums():
    """Get available enum values for form dropdowns."""
    return {
        "property_types": [e.value for e in PropertyType],
        "property_statuses": [e.value for e in PropertyStatus],
        "investor_statuses": [e.value for e in InvestorStatus],
        "investor_segments": [e.value for e in InvestorSegment],
        "risk_tolerances": [e.value for e in RiskTolerance],
        "furnished_preferences": [e.value for e in FurnishedPreference],
        "completion_statuses": [e.value for e in CompletionStatus],
        "tenant_requirements": [e.value for e in TenantRequirement],
        "bundle_sources": [e.value for e in BundleSource],
        "recommendation_statuses": [e.value for e in RecommendationStatus],
        "created_by_roles": [e.value for e in CreatedByRole],
    }


# Investors

@app.get("/api/investors")
async def list_investors(status: Optional[str] = None, tenant_id: Optional[str] = None):
    """List all investors with optional filtering."""
    try:
        inv_status = InvestorStatus(status) if status else None
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    investors = get_stores().investors.search(status=inv_status, tenant_id=tenant_id)
    return {
        "investors": [i.to_dict() for i in investors],
        "count": len(investors),
    }


@app.get("/api/investors/{investor_id}")
async def get_investor(investor_id: str):
    """Get a single investor by ID."""
    return _get_investor_or_404(investor_id).to_dict()


@app.post("/api/investors")
async def create_investor(data: InvestorCreate):
    """Create a new investor."""
    stores = get_stores()
    investor_data = data.model_dump()
    if not investor_data.get("investor_id"):
        investor_data["investor_id"] = generate_investor_id()

    investor = _parse(Investor.from_dict, investor_data)
    _check(validate_investor(investor))

    try:
        stores.investors.create(investor)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return JSONResponse(content=investor.to_dict(), status_code=201)


@app.put("/api/investors/{investor_id}")
async def update_investor(investor_id: str, data: InvestorCreate):
    """Replace an existing investor."""
    stores = get_stores()
    existing = _get_investor_or_404(investor_id)

    investor_data = data.model_dump()
    investor_data["investor_id"] = investor_id
    investor = _parse(Investor.from_dict, investor_data)
    investor.created_at = existing.created_at
    _check(validate_investor(investor))

    stores.investors.update(investor)
    return investor.to_dict()


@app.delete("/api/investors/{investor_id}")
async def delete_investor(investor_id: str):
    """Delete an investor."""
    if get_stores().investors.delete(investor_id):
        return {"deleted": investor_id}
    raise HTTPException(status_code=404, detail=f"Investor '{investor_id}' not found")


# Listings

@app.get("/api/listings")
async def list_listings(available: Optional[bool] = None):
    """List catalogue listings, optionally only the available ones."""
    listings = get_stores().listings.get_all()
    if available is not None:
        listings = [p for p in listings if p.is_available == available]

    return {
        "listings": [p.to_dict() for p in listings],
        "count": len(listings),
    }


@app.get("/api/listings/{property_id}")
async def get_listing(property_id: str):
    """Get a single listing by ID."""
    prop = get_stores().listings.get(property_id)
    if not prop:
        raise HTTPException(status_code=404, detail=f"Listing '{property_id}' not found")
    return prop.to_dict()


@app.post("/api/listings")
async def create_listing(data: ListingCreate):
    """Add a listing to the catalogue."""
    listing_data = data.model_dump()
    if not listing_data.get("property_id"):
        listing_data["property_id"] = generate_property_id()

    prop = _parse(Property.from_dict, listing_data)
    _check(validate_property(prop))

    try:
        get_stores().listings.create(prop)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return JSONResponse(content=prop.to_dict(), status_code=201)


@app.delete("/api/listings/{property_id}")
async def delete_listing(property_id: str):
    """Remove a listing from the catalogue."""
    if get_stores().listings.delete(property_id):
        return {"deleted": property_id}
    raise HTTPException(status_code=404, detail=f"Listing '{property_id}' not found")


# Scoring

@app.post("/api/fit")
async def score_fit(data: FitRequest):
    """Score a single property against a mandate."""
    property_data = dict(data.property)
    property_data.setdefault("property_id", "adhoc")
    prop = _parse(Property.from_dict, property_data)

    mandate = None
    if data.mandate is not None:
        mandate = _parse(Mandate.from_dict, data.mandate)
        _check(validate_mandate(mandate))

    return score_mandate_fit(prop, mandate).to_dict()


@app.get("/api/investors/{investor_id}/bundle")
async def get_bundle(investor_id: str, source: str = "manual"):
    """
    Build the recommendation bundle for an investor.

    An unknown investor returns an empty bundle, not a 404.
    """
    bundle_source = _parse(BundleSource, source)
    stores = get_stores()

    bundle = build_recommendation_bundle(
        investor_id,
        find_investor=stores.investors.get,
        listings=stores.listings.get_all(),
        source=bundle_source,
        config=stores.settings.bundle_config(),
    )
    return bundle.to_dict()


# Recommendations

@app.post("/api/recommendations")
async def create_recommendation_route(data: RecommendationCreate):
    """
    Create a draft recommendation.

    Seeded from the investor's bundle unless explicit property ids
    are given.
    """
    stores = get_stores()
    _get_investor_or_404(data.investor_id)
    source = _parse(BundleSource, data.source)
    role = _parse(CreatedByRole, data.created_by_role)

    if data.property_ids is None:
        bundle = build_recommendation_bundle(
            data.investor_id,
            find_investor=stores.investors.get,
            listings=stores.listings.get_all(),
            source=source,
            config=stores.settings.bundle_config(),
        )
        rec = create_draft_from_bundle(bundle, role, data.title, data.summary)
    else:
        missing = [pid for pid in data.property_ids if stores.listings.get(pid) is None]
        if missing:
            raise HTTPException(status_code=400, detail=f"Unknown listings: {', '.join(missing)}")
        rec = create_recommendation(
            investor_id=data.investor_id,
            created_by_role=role,
            trigger=source,
            title=data.title,
            summary=data.summary,
            property_ids=data.property_ids,
        )

    stores.recommendations.create(rec)
    logger.info("Created recommendation %s for %s", rec.recommendation_id, rec.investor_id)
    return JSONResponse(content=rec.to_dict(), status_code=201)


@app.get("/api/investors/{investor_id}/recommendations")
async def list_investor_recommendations(investor_id: str):
    """Recommendations for an investor, most recent activity first."""
    recs = get_stores().recommendations.list_by_investor(investor_id)
    return {
        "recommendations": [r.to_dict() for r in recs],
        "count": len(recs),
    }


@app.get("/api/recommendations/{recommendation_id}")
async def get_recommendation(recommendation_id: str):
    return _get_recommendation_or_404(recommendation_id).to_dict()


@app.patch("/api/recommendations/{recommendation_id}")
async def patch_recommendation(recommendation_id: str, data: RecommendationPatch):
    """Update editable recommendation fields."""
    status = _parse(RecommendationStatus, data.status) if data.status else None
    trigger = _parse(BundleSource, data.trigger) if data.trigger else None
    notes = None
    if data.property_notes is not None:
        notes = {
            pid: PropertyNote(
                included_despite=n.get("included_despite"),
                rationale=n.get("rationale", ""),
            )
            for pid, n in data.property_notes.items()
        }

    return _apply(
        recommendation_id,
        lambda rec: rec.update(
            title=data.title,
            summary=data.summary,
            status=status,
            trigger=trigger,
            property_notes=notes,
        ),
    )


@app.post("/api/recommendations/{recommendation_id}/send")
async def send_recommendation(recommendation_id: str):
    return _apply(recommendation_id, lambda rec: rec.send())


@app.post("/api/recommendations/{recommendation_id}/view")
async def view_recommendation(recommendation_id: str):
    return _apply(recommendation_id, lambda rec: rec.mark_viewed())


@app.post("/api/recommendations/{recommendation_id}/questions")
async def ask_question(recommendation_id: str, data: QuestionInput):
    if not data.question.strip():
        raise HTTPException(status_code=400, detail="Question cannot be empty")
    return _apply(recommendation_id, lambda rec: rec.ask_question(data.question))


@app.post("/api/recommendations/{recommendation_id}/questions/{qna_id}/draft")
async def save_draft_answer(recommendation_id: str, qna_id: str, data: AnswerInput):
    return _apply(recommendation_id, lambda rec: rec.save_draft_answer(qna_id, data.answer))


@app.post("/api/recommendations/{recommendation_id}/questions/{qna_id}/answer")
async def send_answer(recommendation_id: str, qna_id: str, data: AnswerInput):
    return _apply(recommendation_id, lambda rec: rec.send_answer(qna_id, data.answer))


@app.post("/api/recommendations/{recommendation_id}/decision")
async def decide_recommendation(recommendation_id: str, data: DecisionInput):
    outcome = _parse(RecommendationStatus, data.outcome.upper())
    return _apply(
        recommendation_id,
        lambda rec: rec.decide(outcome, reason_tags=data.reason_tags, note=data.note),
    )


@app.post("/api/recommendations/{recommendation_id}/supersede")
async def supersede_recommendation(recommendation_id: str, data: SupersedeInput):
    _get_recommendation_or_404(data.new_recommendation_id)
    return _apply(recommendation_id, lambda rec: rec.supersede(data.new_recommendation_id))


@app.post("/api/recommendations/{recommendation_id}/properties/{property_id}")
async def add_property(recommendation_id: str, property_id: str):
    if get_stores().listings.get(property_id) is None:
        raise HTTPException(status_code=404, detail=f"Listing '{property_id}' not found")
    return _apply(recommendation_id, lambda rec: rec.add_property(property_id))


@app.delete("/api/recommendations/{recommendation_id}/properties/{property_id}")
async def remove_property(recommendation_id: str, property_id: str):
    return _apply(recommendation_id, lambda rec: rec.remove_property(property_id))


@app.post("/api/recommendations/{recommendation_id}/counterfactuals/{property_id}/include")
async def include_counterfactual(recommendation_id: str, property_id: str):
    """Move an excluded property into the recommendation anyway."""
    return _apply(recommendation_id, lambda rec: rec.add_counterfactual_anyway(property_id))


# Helper functions

def _parse(factory: Callable[[Any], Any], value: Any) -> Any:
    """Build a domain object, turning bad input into a 400."""
    try:
        return factory(value)
    except (ValueError, TypeError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except KeyError as e:
        raise HTTPException(status_code=400, detail=f"Missing required field: {e}")


def _check(result) -> None:
    """Raise a 400 for the first validation error."""
    try:
        result.raise_for_errors()
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _get_investor_or_404(investor_id: str) -> Investor:
    investor = get_stores().investors.get(investor_id)
    if not investor:
        raise HTTPException(status_code=404, detail=f"Investor '{investor_id}' not found")
    return investor


def _get_recommendation_or_404(recommendation_id: str) -> Recommendation:
    rec = get_stores().recommendations.get(recommendation_id)
    if not rec:
        raise HTTPException(
            status_code=404, detail=f"Recommendation '{recommendation_id}' not found"
        )
    return rec


def _apply(recommendation_id: str, operation: Callable[[Recommendation], Any]) -> dict:
    """Run an operation on a stored recommendation and persist it."""
    rec = _get_recommendation_or_404(recommendation_id)

    try:
        result = operation(rec)
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    get_stores().recommendations.save(rec)

    response = rec.to_dict()
    if result is not None and not isinstance(result, Recommendation):
        # ask_question returns the new QnaEntry
        response["qna_entry"] = result.to_dict()
    return response


# Run with: uvicorn web.app:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
