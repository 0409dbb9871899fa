"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Bundled reference data (catalog, factor snapshot)
- Resolved factor tables and domain services
- Sample tree records
- Mock factor source client
- FastAPI test client
"""
from typing import Dict, List

import pytest
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient

from tree_valuation.config import DATA_DIR
from tree_valuation.main import app
from tree_valuation.api.dependencies import get_valuation_service
from tree_valuation.domain.models import SpeciesRecord, TreeRecord
from tree_valuation.infrastructure.factor_source_client import (
    FactorSourceClient,
    parse_factor_options,
)
from tree_valuation.infrastructure.species_catalog import load_species_catalog
from tree_valuation.services.application.engine_context import EngineState
from tree_valuation.services.application.valuation_service import ValuationService
from tree_valuation.services.domain.classification_aggregator import ClassificationAggregator
from tree_valuation.services.domain.price_factor_resolver import (
    FactorResolution,
    FactorSource,
    FactorTable,
    build_palm_factors,
)
from tree_valuation.services.domain.species_matcher import SpeciesMatcher
from tree_valuation.services.domain.valuation_calculator import (
    ValuationCalculator,
    ValuationConfig,
)


CATALOG_PATH = DATA_DIR / "species_catalog.csv"
SNAPSHOT_PATH = DATA_DIR / "treecalc_snapshot.html"


# ============================================================
# Reference Data Fixtures
# ============================================================

@pytest.fixture
def snapshot_markup() -> str:
    """Bundled copy of the calculator page."""
    return SNAPSHOT_PATH.read_text(encoding="utf-8")


@pytest.fixture
def catalog() -> Dict[str, SpeciesRecord]:
    """Bundled species catalog."""
    return load_species_catalog(CATALOG_PATH)


@pytest.fixture
def matcher(catalog) -> SpeciesMatcher:
    return SpeciesMatcher(catalog)


@pytest.fixture
def factor_resolution(catalog, snapshot_markup) -> FactorResolution:
    """Factor tables resolved from the bundled snapshot (no network)."""
    standard = FactorTable(
        parse_factor_options(snapshot_markup, "tree-type"),
        FactorSource.SNAPSHOT,
    )
    return FactorResolution(standard=standard, palm=build_palm_factors(catalog))


@pytest.fixture
def calculator(matcher, factor_resolution) -> ValuationCalculator:
    return ValuationCalculator(matcher, factor_resolution, ValuationConfig())


@pytest.fixture
def engine_state(catalog, matcher, factor_resolution, calculator) -> EngineState:
    return EngineState(
        catalog=catalog,
        matcher=matcher,
        factors=factor_resolution,
        calculator=calculator,
        aggregator=ClassificationAggregator(),
    )


# ============================================================
# Sample Data Fixtures
# ============================================================

@pytest.fixture
def sample_trees() -> List[TreeRecord]:
    """A small survey: one standard tree, one palm, one unknown species."""
    return [
        TreeRecord(
            index=1,
            species="אלון התבור",
            height=8.0,
            stem_diameter=20.0,
            canopy_diameter=9.0,
            health_rate=4,
            location_rate=3,
            species_rate=0,
        ),
        TreeRecord(
            index=2,
            species="סבל פלמטו",
            height=10.0,
            stem_diameter=30.0,
            canopy_diameter=3.0,
            health_rate=1,
            location_rate=4,
        ),
        TreeRecord(
            index=3,
            species="עץ לא מזוהה",
            height=4.0,
            stem_diameter=12.0,
            canopy_diameter=1.5,
            health_rate=2,
            location_rate=2,
            species_rate=1,
            scientific_name="Unknown",
        ),
    ]


# ============================================================
# Mock Client Fixtures
# ============================================================

@pytest.fixture
def mock_factor_client():
    """Mock factor source client usable as an async context manager."""
    mock_client = AsyncMock(spec=FactorSourceClient)
    mock_client.fetch_factors.return_value = {"אלון התבור": 1.5, "זית אירופי": 1.5}
    mock_client.__aenter__.return_value = mock_client
    return mock_client


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client() -> TestClient:
    """Create a synchronous test client for FastAPI."""
    return TestClient(app)


@pytest.fixture
def service_client(engine_state):
    """Test client whose valuation service uses the snapshot-resolved state."""
    app.dependency_overrides[get_valuation_service] = lambda: ValuationService(engine_state)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
