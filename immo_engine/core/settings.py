"""Engine settings with environment variable support.

Uses pydantic-settings for typed configuration validation. The tax rule
parameters live here so that a caller can compare outcomes under alternative
declared rules by passing its own ``EngineSettings`` instance.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class EngineSettings(BaseSettings):
    """Engine configuration loaded from environment variables."""

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Render logs as JSON")

    # Micro regimes
    micro_foncier_abatement_pct: float = Field(default=30.0, ge=0, le=100)
    micro_bic_abatement_pct: float = Field(default=50.0, ge=0, le=100)
    micro_foncier_threshold: float = Field(default=15_000.0, ge=0, description="Micro-foncier revenue ceiling")
    micro_bic_threshold: float = Field(default=72_600.0, ge=0, description="Micro-BIC revenue ceiling")

    # Real regimes
    default_deficit_ceiling: float = Field(default=10_700.0, ge=0, description="Foncier deficit ceiling on global income")

    # Capital gains (individuals)
    capital_gains_income_tax_pct: float = Field(default=19.0, ge=0, le=100)
    capital_gains_social_pct: float = Field(default=17.2, ge=0, le=100)

    # Corporate vehicle (IS brackets are declared on each SCI record)
    sci_capital_gains_rate_pct: float = Field(default=25.0, ge=0, le=100)
    sci_building_share_pct: float = Field(
        default=80.0, ge=0, le=100,
        description="Depreciable share of purchase price when no building value is declared",
    )

    # Goal search
    max_horizon_years: int = Field(default=60, ge=1, le=100)

    model_config = {
        "env_prefix": "IMMO_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> EngineSettings:
    """Get cached engine settings."""
    return EngineSettings()
