"""
Runtime settings read from the environment.

A .env file at the project root is loaded first, when present.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from vantage_engine.core.bundle import BundleConfig

PROJECT_ROOT = Path(__file__).resolve().parent.parent

load_dotenv(PROJECT_ROOT / ".env")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_path(name: str, default: Path) -> Optional[str]:
    # An explicitly empty variable means "in-memory only"
    value = os.getenv(name)
    if value is None:
        return str(default)
    return value or None


@dataclass(frozen=True)
class Settings:
    investors_path: Optional[str]
    listings_path: Optional[str]
    recommendations_path: Optional[str]
    recommended_count: int = 3
    counterfactual_count: int = 5
    seed_sample_data: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        data_dir = Path(os.getenv("VANTAGE_DATA_DIR", str(PROJECT_ROOT / "data")))
        return cls(
            investors_path=_env_path("VANTAGE_INVESTORS_PATH", data_dir / "investors.json"),
            listings_path=_env_path("VANTAGE_LISTINGS_PATH", data_dir / "listings.json"),
            recommendations_path=_env_path(
                "VANTAGE_RECOMMENDATIONS_PATH", data_dir / "recommendations.json"
            ),
            recommended_count=int(os.getenv("VANTAGE_RECOMMENDED_COUNT", "3")),
            counterfactual_count=int(os.getenv("VANTAGE_COUNTERFACTUAL_COUNT", "5")),
            seed_sample_data=_env_bool("VANTAGE_SEED_SAMPLE_DATA", True),
            log_level=os.getenv("VANTAGE_LOG_LEVEL", "INFO").upper(),
        )

    def bundle_config(self) -> BundleConfig:
        return BundleConfig(
            recommended_count=self.recommended_count,
            counterfactual_count=self.counterfactual_count,
        )
