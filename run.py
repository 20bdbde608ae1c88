#!/usr/bin/env python3
"""
Vantage Engine - Demo

Demonstrates the core functionality:

- Mandate, investor and listing data models with validation
- Mandate-fit scoring (area, type, budget) with reasons
- Counterfactual explanations for excluded listings
- Recommendation bundle builder
- Recommendation lifecycle (DRAFT → SENT → VIEWED → QUESTIONS → APPROVED/REJECTED)

Run with: python run.py
"""

import json
import logging

from vantage_engine.api.storage import InvestorStorage, PropertyStorage, create_sample_data
from vantage_engine.config import Settings
from vantage_engine.core import (
    BundleSource,
    InvalidTransitionError,
    Mandate,
    Property,
    PropertyType,
    RecommendationStatus,
    build_recommendation_bundle,
    create_draft_from_bundle,
    format_price,
    score_mandate_fit,
    score_properties,
    validate_investor,
    validate_mandate,
)
from vantage_engine.logging_setup import configure_logging

logger = logging.getLogger("vantage_engine.demo")


def load_sample_data() -> tuple[InvestorStorage, PropertyStorage]:
    """In-memory stores seeded with the demo investors and listings."""
    investors = InvestorStorage()
    listings = PropertyStorage()
    create_sample_data(investors, listings)
    return investors, listings


def demo_validation(investors: InvestorStorage):
    """Demonstrate investor and mandate validation."""
    print("\n" + "=" * 60)
    print("VALIDATION DEMO")
    print("=" * 60)

    for investor in investors.get_all():
        result = validate_investor(investor)
        status = "VALID" if result.is_valid else "INVALID"
        print(f"\n{investor.name} ({investor.investor_id}): {status}")
        for warning in result.warnings:
            print(f"  Warning: {warning}")

    print("\n--- Testing invalid mandate ---")
    bad = Mandate(
        preferred_areas=["Downtown", "  "],
        property_types=["penthouse"],
        min_investment=5_000_000,
        max_investment=1_000_000,
    )
    result = validate_mandate(bad)
    print(f"Valid: {result.is_valid}")
    for error in result.errors:
        print(f"  Error: {error}")
    for warning in result.warnings:
        print(f"  Warning: {warning}")


def demo_scoring(investors: InvestorStorage, listings: PropertyStorage):
    """Demonstrate mandate-fit scoring."""
    print("\n" + "=" * 60)
    print("FIT SCORING DEMO")
    print("=" * 60)

    investor = investors.get("INV-0001")
    mandate = investor.mandate
    print(f"\nInvestor: {investor.name}")
    print(f"Areas: {', '.join(mandate.preferred_areas) or 'Any'}")
    print(f"Types: {', '.join(mandate.property_types) or 'Any'}")
    print(
        f"Budget: {format_price(mandate.min_investment or 0)} - "
        f"{format_price(mandate.max_investment) if mandate.max_investment is not None else 'open'}"
    )

    print("\n--- Results (sorted by score) ---\n")
    for scored in score_properties(listings.available(), mandate):
        prop = scored.property
        print(f"[{scored.score:3}/100] {prop.title} ({prop.area}, {format_price(prop.price, prop.currency)})")
        for reason in scored.fit.reasons:
            mark = "+" if reason.met else "-"
            print(f"    {mark} {reason.label}")

    print("\n--- Ad hoc listing ---")
    adhoc = Property(
        "ADHOC-1",
        "Boulevard Point 2BR",
        "Downtown Dubai",
        PropertyType.RESIDENTIAL,
        price=2_500_000,
    )
    fit = score_mandate_fit(adhoc, mandate)
    print(f"{adhoc.title}: {fit.score}/100, {fit.met_count}/3 criteria met")


def demo_bundle(investors: InvestorStorage, listings: PropertyStorage):
    """Demonstrate bundle building with counterfactuals."""
    print("\n" + "=" * 60)
    print("RECOMMENDATION BUNDLE DEMO")
    print("=" * 60)

    config = Settings.from_env().bundle_config()

    for investor_id in ("INV-0001", "INV-0003", "INV-9999"):
        bundle = build_recommendation_bundle(
            investor_id,
            find_investor=investors.get,
            listings=listings.get_all(),
            source=BundleSource.MANUAL,
            config=config,
        )
        print(f"\n{investor_id}: {len(bundle.recommended)} recommended, "
              f"{len(bundle.counterfactuals)} counterfactuals")

        if bundle.is_empty:
            print("  (empty bundle)")
            continue

        for rec in bundle.recommended:
            print(f"  + {rec.property_id} ({rec.score}/100)")
        for cf in bundle.counterfactuals:
            print(f"  - {cf.property_id} ({cf.score}/100): {cf.top_reason}")
            for change in cf.what_would_change_my_mind:
                print(f"      would change: {change}")


def demo_lifecycle(investors: InvestorStorage, listings: PropertyStorage):
    """Demonstrate the recommendation lifecycle."""
    print("\n" + "=" * 60)
    print("RECOMMENDATION LIFECYCLE DEMO")
    print("=" * 60)

    bundle = build_recommendation_bundle(
        "INV-0001",
        find_investor=investors.get,
        listings=listings.get_all(),
    )
    rec = create_draft_from_bundle(bundle, title="Downtown income picks")
    print(f"\nCreated {rec.recommendation_id} [{rec.status.value}] with {len(rec.property_ids)} properties")

    if rec.counterfactuals:
        excluded = rec.counterfactuals[0]
        rec.add_counterfactual_anyway(excluded.property_id)
        note = rec.property_notes[excluded.property_id]
        print(f"Included {excluded.property_id} despite: {note.included_despite}")

    rec.send()
    print(f"Sent -> [{rec.status.value}]")
    rec.mark_viewed()
    print(f"Viewed -> [{rec.status.value}]")

    entry = rec.ask_question("Are service charges included in the yield figures?")
    print(f"Question {entry.qna_id} -> [{rec.status.value}]")
    rec.save_draft_answer(entry.qna_id, "Yields are quoted net of service charges.")
    rec.send_answer(entry.qna_id, "Yields are quoted net of service charges.")

    rec.decide(RecommendationStatus.APPROVED, reason_tags=["yield", "location"])
    print(f"Decided -> [{rec.status.value}]")

    print("\n--- Invalid Transition Test ---")
    try:
        rec.send()
    except InvalidTransitionError as e:
        print(f"Blocked: {e}")

    print("\n--- Activity Log ---")
    for entry in rec.activity:
        print(f"  {entry.at.strftime('%H:%M:%S')} {entry.type:16} {entry.label}")

    print("\n--- Recommendation JSON (summary) ---")
    data = rec.to_dict()
    summary = {k: data[k] for k in ("recommendation_id", "status", "property_ids", "valid_actions")}
    print(json.dumps(summary, indent=2))


def main():
    """Run all demos."""
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    print("\n" + "=" * 60)
    print("  VANTAGE ENGINE - DEMO")
    print("=" * 60)

    investors, listings = load_sample_data()
    logger.info("Loaded %d investors and %d listings", investors.count(), listings.count())

    demo_validation(investors)
    demo_scoring(investors, listings)
    demo_bundle(investors, listings)
    demo_lifecycle(investors, listings)

    print("\n" + "=" * 60)
    print("  DEMO COMPLETE")
    print("=" * 60)
    print("\nModules:")
    print("  - vantage_engine.core.mandate: Investor mandate")
    print("  - vantage_engine.core.scoring: Mandate-fit scoring")
    print("  - vantage_engine.core.counterfactual: Exclusion reasons")
    print("  - vantage_engine.core.bundle: Recommendation bundle builder")
    print("  - vantage_engine.core.recommendation: Recommendation lifecycle")
    print("\nStart the API with: python serve.py")


if __name__ == "__main__":
    main()
