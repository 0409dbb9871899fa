"""
Application context: session-scoped reference data and domain services.

The catalog, factor tables, matcher, calculator and aggregator are built
once per context and shared read-only by every valuation afterwards.
"""
import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional

from tree_valuation.domain.models import SpeciesRecord
from tree_valuation.infrastructure.factor_source_client import FactorSourceClient
from tree_valuation.infrastructure.species_catalog import load_species_catalog
from tree_valuation.services.domain.classification_aggregator import ClassificationAggregator
from tree_valuation.services.domain.price_factor_resolver import (
    FactorResolution,
    PriceFactorResolver,
)
from tree_valuation.services.domain.species_matcher import SpeciesMatcher
from tree_valuation.services.domain.valuation_calculator import (
    ValuationCalculator,
    ValuationConfig,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineState:
    """Everything a valuation run needs, resolved once."""
    catalog: Dict[str, SpeciesRecord]
    matcher: SpeciesMatcher
    factors: FactorResolution
    calculator: ValuationCalculator
    aggregator: ClassificationAggregator


class EngineContext:
    """
    Init-once holder of the engine state.

    The first caller of initialize() loads the catalog and resolves the
    factor tables; concurrent and later callers get the same state. There
    is no refresh: build a new context to resolve again.
    """

    def __init__(
        self,
        client_factory: Callable[[], FactorSourceClient] = FactorSourceClient,
        catalog_path: Optional[Path] = None,
        snapshot_path: Optional[Path] = None,
        config: Optional[ValuationConfig] = None,
    ):
        """
        Initialize the context without resolving anything.

        Args:
            client_factory: Builds the client for the remote factor page
            catalog_path: Species catalog CSV (defaults to settings)
            snapshot_path: Bundled factor page (defaults to settings)
            config: Valuation formula constants (defaults to settings)
        """
        self.client_factory = client_factory
        self.catalog_path = catalog_path
        self.snapshot_path = snapshot_path
        self.config = config
        self._state: Optional[EngineState] = None
        self._lock = asyncio.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._state is not None

    @property
    def state(self) -> EngineState:
        if self._state is None:
            raise RuntimeError("Engine context is not initialized")
        return self._state

    async def initialize(self) -> EngineState:
        """
        Build the engine state on first call and return it.

        Returns:
            The shared EngineState
        """
        if self._state is not None:
            return self._state

        async with self._lock:
            if self._state is None:
                self._state = await self._build_state()
        return self._state

    async def _build_state(self) -> EngineState:
        logger.info("Initializing valuation engine")

        catalog = load_species_catalog(self.catalog_path)
        matcher = SpeciesMatcher(catalog)

        async with self.client_factory() as client:
            resolver = PriceFactorResolver(
                client=client,
                catalog=catalog,
                snapshot_path=self.snapshot_path,
            )
            factors = await resolver.resolve()

        if factors.is_degraded:
            logger.warning("No tree factors available; non-palm trees will have no price")

        return EngineState(
            catalog=catalog,
            matcher=matcher,
            factors=factors,
            calculator=ValuationCalculator(matcher, factors, self.config),
            aggregator=ClassificationAggregator(),
        )


# Singleton instance
_engine_context: Optional[EngineContext] = None


def get_engine_context() -> EngineContext:
    """
    Get or create the singleton engine context.

    Returns:
        EngineContext instance
    """
    global _engine_context
    if _engine_context is None:
        _engine_context = EngineContext()
    return _engine_context
