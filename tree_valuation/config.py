"""
Application configuration using Pydantic settings.
"""
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator


DATA_DIR = Path(__file__).parent / "data"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Factor Source Configuration
    factor_source_url: str = Field(
        default="https://www.gov.il/Apps/Moag/TreeValueCalculator/treecalc.html",
        description="Page holding the official tree value calculator"
    )
    factor_select_id: str = Field(
        default="tree-type",
        description="id of the <select> element listing species factors"
    )
    factor_fetch_timeout: float = Field(
        default=60.0,
        description="Timeout in seconds for the factor page download"
    )
    factor_snapshot_path: Path = Field(
        default=DATA_DIR / "treecalc_snapshot.html",
        description="Bundled copy of the calculator page used as fallback"
    )

    # Reference Data
    species_catalog_path: Path = Field(
        default=DATA_DIR / "species_catalog.csv",
        description="CSV of hebrew name, scientific name, species rate and palm factor"
    )

    # Classification Parameters
    evaluation_tier_upper_bounds: List[int] = Field(
        default=[6, 13, 16],
        description="Inclusive upper bounds of the Low, Medium and High tiers"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: List[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="Tree Valuation Service",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    @field_validator("evaluation_tier_upper_bounds")
    @classmethod
    def _check_tier_bounds(cls, bounds: List[int]) -> List[int]:
        if len(bounds) != 3:
            raise ValueError("exactly three tier upper bounds are required")
        if not 0 <= bounds[0] < bounds[1] < bounds[2] < 20:
            raise ValueError("tier upper bounds must be strictly ascending within [0, 20)")
        return bounds

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
