"""
Domain service: constant-time species name matching.
"""
import logging
from typing import Dict, Mapping, Optional

from tree_valuation.domain.models import SpeciesRecord

logger = logging.getLogger(__name__)


def normalize_species_name(name: Optional[str]) -> str:
    """
    Canonical form of a species name for tolerant matching.

    Trims, drops hyphens and spaces, and casefolds (a no-op for hebrew).

    Args:
        name: Raw species name

    Returns:
        Normalized name, or an empty string for blank input
    """
    if not name or not name.strip():
        return ""
    return name.strip().replace("-", "").replace(" ", "").casefold()


class SpeciesMatcher:
    """
    Pre-indexed species lookup.

    Keeps an exact index keyed by the catalog name and a normalized index
    keyed by the canonical form plus partially stripped variants, so that
    upstream names written with or without spaces and hyphens resolve to
    the same record.
    """

    def __init__(self, catalog: Mapping[str, SpeciesRecord]):
        """
        Build both indices from the catalog.

        Args:
            catalog: Mapping of hebrew name to SpeciesRecord
        """
        self._exact: Dict[str, SpeciesRecord] = {}
        self._normalized: Dict[str, SpeciesRecord] = {}

        for hebrew_name, record in catalog.items():
            if not hebrew_name or record is None:
                continue

            self._exact[hebrew_name] = record

            normalized = normalize_species_name(hebrew_name)
            if not normalized:
                continue

            self._normalized[normalized] = record

            # First registrant keeps a variant
            for variant in (
                hebrew_name.replace(" ", ""),
                hebrew_name.replace("-", ""),
                hebrew_name.replace(" ", "").replace("-", ""),
            ):
                self._add_variant(variant, record)

        logger.debug(f"Built species matcher: {self.statistics()}")

    def _add_variant(self, variant: str, record: SpeciesRecord) -> None:
        if variant and variant not in self._normalized:
            self._normalized[variant] = record

    def match(self, species: Optional[str]) -> Optional[SpeciesRecord]:
        """
        Find the catalog record for a species name.

        Args:
            species: Species name as written in the survey

        Returns:
            Matching SpeciesRecord, or None if nothing matches
        """
        if not species or not species.strip():
            return None

        record = self._exact.get(species)
        if record is not None:
            return record

        return self._normalized.get(normalize_species_name(species))

    def __contains__(self, species: object) -> bool:
        return isinstance(species, str) and self.match(species) is not None

    def __len__(self) -> int:
        return len(self._exact)

    def statistics(self) -> str:
        return f"exact={len(self._exact)}, normalized variations={len(self._normalized)}"
