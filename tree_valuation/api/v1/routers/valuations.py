"""
API router for valuation endpoints.
"""
from fastapi import APIRouter, HTTPException, Request

from tree_valuation.api.dependencies import ValuationServiceDep
from tree_valuation.api.rate_limit import DEFAULT_LIMIT, limiter
from tree_valuation.api.v1.models.requests import SheetRowsRequest, TreeValuationRequest
from tree_valuation.api.v1.models.responses import (
    IngestionErrorResponse,
    ValuationReportResponse,
)
from tree_valuation.infrastructure.tree_rows import IngestionError
from tree_valuation.services.application.valuation_service import ValuationReport


router = APIRouter(
    prefix="/valuations",
    tags=["valuations"],
)

COMMON_RESPONSES = {
    429: {
        "description": "Rate limit exceeded",
    },
    500: {
        "description": "Internal server error",
    },
}


def _to_response(report: ValuationReport) -> ValuationReportResponse:
    return ValuationReportResponse(
        tree_count=len(report.trees),
        unresolved_count=sum(1 for tree in report.trees if not tree.is_price_resolved),
        factor_source=report.factor_source,
        trees=report.trees,
        classification=report.classification,
    )


@router.post(
    "",
    response_model=ValuationReportResponse,
    summary="Value ingested trees",
    description="""
    Value a survey of already ingested trees and summarize it.

    For each tree:
    1. Species is matched against the catalog (rate and scientific name enrichment)
    2. Palm or standard valuation formula is applied when a factor matches
    3. Canopy rate, composite score, clonability and evaluation tier are derived

    The classification block carries per-species tier counts, per-tier totals
    and the percentage row.
    """,
    responses=COMMON_RESPONSES,
)
@limiter.limit(DEFAULT_LIMIT)
async def value_trees(
    request: Request,
    body: TreeValuationRequest,
    valuation_service: ValuationServiceDep,
) -> ValuationReportResponse:
    """
    Value already ingested trees.

    Args:
        request: Incoming request (used by the rate limiter)
        body: Trees to value
        valuation_service: Valuation service (injected dependency)

    Returns:
        ValuationReportResponse with valued trees and summaries
    """
    report = valuation_service.build_report(body.trees)
    return _to_response(report)


@router.post(
    "/rows",
    response_model=ValuationReportResponse,
    summary="Value survey sheet rows",
    description="""
    Ingest survey sheet rows (cell text keyed by column letter A-L), then value
    and summarize them. A malformed cell is reported with its column and row.
    """,
    responses={
        **COMMON_RESPONSES,
        422: {
            "description": "Malformed sheet cell",
            "model": IngestionErrorResponse,
        },
    },
)
@limiter.limit(DEFAULT_LIMIT)
async def value_sheet_rows(
    request: Request,
    body: SheetRowsRequest,
    valuation_service: ValuationServiceDep,
) -> ValuationReportResponse:
    """
    Value survey sheet rows.

    Args:
        request: Incoming request (used by the rate limiter)
        body: Sheet rows to ingest
        valuation_service: Valuation service (injected dependency)

    Returns:
        ValuationReportResponse with valued trees and summaries

    Raises:
        HTTPException: 422 if a cell cannot be ingested
    """
    try:
        report = valuation_service.build_report_from_rows(body.rows, first_row=body.first_row)
    except IngestionError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())

    return _to_response(report)
