"""
Vantage Recommendation Engine

Mandate-fit scoring and recommendation bundling for the investor CRM.

Usage:
    from vantage_engine.core import Mandate, Property, score_mandate_fit
    from vantage_engine.core import build_recommendation_bundle, BundleSource
"""

__version__ = "0.3.0"
