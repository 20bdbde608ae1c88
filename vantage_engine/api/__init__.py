"""
API module for the Vantage recommendation engine.

JSON-backed stores for investors, listings and recommendations.
"""

from .storage import (
    InvestorStorage,
    PropertyStorage,
    RecommendationStorage,
    create_sample_data,
)

__all__ = [
    "InvestorStorage",
    "PropertyStorage",
    "RecommendationStorage",
    "create_sample_data",
]
