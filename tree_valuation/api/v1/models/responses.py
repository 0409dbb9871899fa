"""
API response models using Pydantic.
"""
from typing import List, Optional
from pydantic import BaseModel, Field

from tree_valuation.domain.models import ClassificationSummary, ValuedTree


class ValuationReportResponse(BaseModel):
    """Response model for valuation endpoints."""
    tree_count: int = Field(
        description="Number of trees valued"
    )
    unresolved_count: int = Field(
        description="Trees whose species matched no valuation factor"
    )
    factor_source: str = Field(
        description="Where the tree factors came from (remote, snapshot or empty)"
    )
    trees: List[ValuedTree] = Field(
        description="Trees enriched with canopy rate, price and tiers"
    )
    classification: ClassificationSummary = Field(
        description="Per-species and per-tier summary tables"
    )


class SpeciesResponse(BaseModel):
    """Single species lookup result."""
    hebrew_name: str
    scientific_name: str
    species_rate: int
    is_palm: bool
    palm_factor: Optional[float] = None


class IngestionErrorResponse(BaseModel):
    """Location of a malformed sheet cell."""
    column: str = Field(examples=["C"])
    row: int = Field(examples=[7])
    value: Optional[str] = Field(default=None, examples=["tall"])
    reason: str = Field(default="", examples=["could not convert string to float: 'tall'"])
