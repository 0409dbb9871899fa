"""
Domain models for species reference data and surveyed trees.

These models represent the core domain entities and should be independent
of any infrastructure concerns (HTTP clients, file formats, etc.).
"""
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


# Rates above this value are not part of the survey scale
MAX_RATE = 5

CLONABILITY_SUM_THRESHOLD = 12
CLONABILITY_HEALTH_THRESHOLD = 2

ROOTS_RADIUS_RATIO = 0.12


class Clonability(str, Enum):
    """Transplant feasibility tag."""
    LOW = "Low"
    HIGH = "High"


class EvaluationTier(str, Enum):
    """Classification bands over the composite score, highest first."""
    VERY_HIGH = "VeryHigh"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class TreeKind(str, Enum):
    """Which valuation formula applies to a tree."""
    PALM = "palm"
    STANDARD = "standard"
    UNKNOWN = "unknown"


class SpeciesRecord(BaseModel):
    """Reference data for one species."""
    model_config = ConfigDict(frozen=True)

    hebrew_name: str = Field(min_length=1)
    scientific_name: str
    species_rate: int = Field(ge=0, le=MAX_RATE)
    palm_factor: Optional[float] = Field(
        default=None,
        ge=0,
        allow_inf_nan=False,
        description="Valuation factor for palms; absent for other trees"
    )

    @property
    def is_palm(self) -> bool:
        return self.palm_factor is not None


class TreeRecord(BaseModel):
    """A surveyed tree as delivered by the ingestion boundary."""
    model_config = ConfigDict(frozen=True)

    index: int
    species: str = ""
    height: float = Field(default=0.0, allow_inf_nan=False, description="Height in meters")
    stem_diameter: float = Field(default=0.0, allow_inf_nan=False, description="Stem diameter in cm")
    canopy_diameter: float = Field(default=0.0, allow_inf_nan=False, description="Canopy diameter in meters")
    health_rate: int = Field(default=0, ge=0, le=MAX_RATE)
    location_rate: int = Field(default=0, ge=0, le=MAX_RATE)
    species_rate: int = Field(default=0, ge=0, le=MAX_RATE)
    scientific_name: Optional[str] = None
    number_of_stems: int = Field(default=1, ge=1)
    is_multi_trunk: bool = False
    comment: str = ""

    @property
    def has_multiple_stems(self) -> bool:
        return self.number_of_stems > 1

    @computed_field
    @property
    def sum_of_values(self) -> int:
        return self.health_rate + self.location_rate + self.species_rate

    @computed_field
    @property
    def clonability(self) -> Clonability:
        if (
            self.sum_of_values <= CLONABILITY_SUM_THRESHOLD
            or self.health_rate <= CLONABILITY_HEALTH_THRESHOLD
        ):
            return Clonability.LOW
        return Clonability.HIGH

    @computed_field
    @property
    def roots_protection_radius(self) -> float:
        """Radius in meters, derived from the stem diameter in cm."""
        return ROOTS_RADIUS_RATIO * self.stem_diameter


class ValuedTree(TreeRecord):
    """A tree enriched with the fields written by the valuation calculator."""
    canopy_rate: int = Field(ge=1, le=5)
    evaluation_tier: EvaluationTier
    tree_kind: TreeKind = TreeKind.UNKNOWN
    price: Optional[float] = Field(
        default=None,
        description="Monetary value; None when no factor matched the species"
    )

    @property
    def is_price_resolved(self) -> bool:
        return self.price is not None


class SpeciesClassification(BaseModel):
    """Tier counts for a single species."""
    species: str
    scientific_name: Optional[str] = None
    very_high: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    total: int = 0


class ClassificationSummary(BaseModel):
    """Summary tables consumed by the report renderer."""
    by_species: List[SpeciesClassification]
    tier_totals: Dict[EvaluationTier, int]
    tier_percentages: Dict[EvaluationTier, float]
    total: int
