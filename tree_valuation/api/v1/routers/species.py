"""
API router for species lookup.
"""
from fastapi import APIRouter, HTTPException, Path, Request
from typing import Annotated

from tree_valuation.api.dependencies import ValuationServiceDep
from tree_valuation.api.rate_limit import DEFAULT_LIMIT, limiter
from tree_valuation.api.v1.models.responses import SpeciesResponse


router = APIRouter(
    prefix="/species",
    tags=["species"],
)


@router.get(
    "/{name}",
    response_model=SpeciesResponse,
    summary="Look up a species",
    responses={
        404: {"description": "Species not in the catalog"},
        429: {"description": "Rate limit exceeded"},
    },
)
@limiter.limit(DEFAULT_LIMIT)
async def get_species(
    request: Request,
    name: Annotated[str, Path(description="Species name; spaces and hyphens are ignored")],
    valuation_service: ValuationServiceDep,
) -> SpeciesResponse:
    record = valuation_service.find_species(name)
    if record is None:
        raise HTTPException(
            status_code=404,
            detail=f"Species '{name}' not found in the catalog"
        )

    return SpeciesResponse(
        hebrew_name=record.hebrew_name,
        scientific_name=record.scientific_name,
        species_rate=record.species_rate,
        is_palm=record.is_palm,
        palm_factor=record.palm_factor,
    )
