"""
Domain service: resolution of per-species valuation factors.

Two independent factor tables are produced:
- ordinary trees, downloaded from the official calculator page with a
  bundled snapshot of the same page as fallback
- palms, taken from the palm factors of the species catalog
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional
import logging

from tree_valuation.config import settings
from tree_valuation.domain.models import SpeciesRecord
from tree_valuation.infrastructure.factor_source_client import (
    FactorSourceClient,
    FactorSourceError,
    parse_factor_options,
)
from tree_valuation.services.domain.species_matcher import normalize_species_name

logger = logging.getLogger(__name__)


class FactorSource(str, Enum):
    """Where a factor table came from."""
    REMOTE = "remote"
    SNAPSHOT = "snapshot"
    CATALOG = "catalog"
    EMPTY = "empty"


class ResolutionStatus(str, Enum):
    RESOLVED = "resolved"
    DEGRADED = "degraded"


class FactorTable:
    """
    Read-only mapping of species name to valuation factor.

    Lookups try the name as given, then its normalized form.
    """

    def __init__(self, factors: Mapping[str, float], source: FactorSource):
        self._factors = MappingProxyType(dict(factors))
        self._normalized = MappingProxyType({
            normalize_species_name(name): value
            for name, value in reversed(list(factors.items()))
            if normalize_species_name(name)
        })
        self.source = source

    @classmethod
    def empty(cls) -> "FactorTable":
        return cls({}, FactorSource.EMPTY)

    def get(self, species: Optional[str]) -> Optional[float]:
        if not species:
            return None
        if species in self._factors:
            return self._factors[species]
        return self._normalized.get(normalize_species_name(species))

    def __contains__(self, species: object) -> bool:
        return isinstance(species, str) and self.get(species) is not None

    def __len__(self) -> int:
        return len(self._factors)

    def as_dict(self) -> Dict[str, float]:
        return dict(self._factors)


@dataclass(frozen=True)
class FactorResolution:
    """Result of one factor resolution run."""
    standard: FactorTable
    palm: FactorTable = field(default_factory=FactorTable.empty)

    @property
    def status(self) -> ResolutionStatus:
        if len(self.standard) == 0:
            return ResolutionStatus.DEGRADED
        return ResolutionStatus.RESOLVED

    @property
    def is_degraded(self) -> bool:
        return self.status is ResolutionStatus.DEGRADED


def build_palm_factors(catalog: Mapping[str, SpeciesRecord]) -> FactorTable:
    """
    Palm factor table from the palm-eligible catalog records.

    Args:
        catalog: Mapping of hebrew name to SpeciesRecord

    Returns:
        FactorTable keyed by hebrew name
    """
    factors = {
        name: record.palm_factor
        for name, record in catalog.items()
        if record.is_palm
    }
    return FactorTable(factors, FactorSource.CATALOG if factors else FactorSource.EMPTY)


class PriceFactorResolver:
    """
    Resolves the ordinary and palm factor tables.

    The remote page is tried once; any failure falls back to the bundled
    snapshot. If both fail the ordinary table is empty and valuation of
    non-palm species degrades to an unresolved price.
    """

    def __init__(
        self,
        client: FactorSourceClient,
        catalog: Mapping[str, SpeciesRecord],
        snapshot_path: Optional[Path] = None,
        select_id: Optional[str] = None,
    ):
        """
        Initialize the resolver.

        Args:
            client: Client for the remote calculator page
            catalog: Species catalog used for palm factors
            snapshot_path: Bundled copy of the page (defaults to settings)
            select_id: id of the <select> holding the factors (defaults to settings)
        """
        self.client = client
        self.catalog = catalog
        self.snapshot_path = Path(snapshot_path or settings.factor_snapshot_path)
        self.select_id = select_id or settings.factor_select_id

    async def resolve(self) -> FactorResolution:
        """
        Resolve both factor tables.

        Returns:
            FactorResolution with the ordinary and palm tables
        """
        standard = await self._resolve_standard_factors()
        palm = build_palm_factors(self.catalog)

        resolution = FactorResolution(standard=standard, palm=palm)
        logger.info(
            f"Factor resolution {resolution.status.value}: "
            f"{len(standard)} tree factors from {standard.source.value}, "
            f"{len(palm)} palm factors"
        )
        return resolution

    async def _resolve_standard_factors(self) -> FactorTable:
        # Step 1: remote page
        try:
            factors = await self.client.fetch_factors(self.select_id)
            if factors:
                return FactorTable(factors, FactorSource.REMOTE)
            logger.warning("Factor page contained no species factors")
        except FactorSourceError as e:
            logger.warning(f"Error: {e.message}. Using static local tree price mapping")

        # Step 2: bundled snapshot
        try:
            markup = self.snapshot_path.read_text(encoding="utf-8")
            factors = parse_factor_options(markup, self.select_id)
        except (OSError, ValueError) as e:
            logger.error(f"Factor snapshot unavailable ({self.snapshot_path}): {e}")
            return FactorTable.empty()

        if not factors:
            logger.error(f"Factor snapshot {self.snapshot_path} contained no species factors")
            return FactorTable.empty()

        return FactorTable(factors, FactorSource.SNAPSHOT)
