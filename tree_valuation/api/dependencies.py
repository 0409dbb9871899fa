"""
Dependency injection for FastAPI.
"""
from typing import Annotated
from fastapi import Depends

from tree_valuation.services.application.engine_context import (
    EngineContext,
    get_engine_context,
)
from tree_valuation.services.application.valuation_service import ValuationService


async def get_valuation_service(
    context: Annotated[EngineContext, Depends(get_engine_context)],
) -> ValuationService:
    """
    Dependency factory for ValuationService.

    Resolves the engine state on first use if startup did not.

    Args:
        context: Engine context (injected)

    Returns:
        ValuationService instance
    """
    state = await context.initialize()
    return ValuationService(state)


# Type aliases for cleaner route signatures
ValuationServiceDep = Annotated[ValuationService, Depends(get_valuation_service)]
