"""
Domain service: summary classification tables over valued trees.
"""
from typing import Dict, Iterable, List, Sequence
import logging

from tree_valuation.domain.models import (
    ClassificationSummary,
    EvaluationTier,
    SpeciesClassification,
    ValuedTree,
)

logger = logging.getLogger(__name__)

# Column order of the summary tables
TIER_ORDER = (
    EvaluationTier.VERY_HIGH,
    EvaluationTier.HIGH,
    EvaluationTier.MEDIUM,
    EvaluationTier.LOW,
)

_TIER_FIELDS = {
    EvaluationTier.VERY_HIGH: "very_high",
    EvaluationTier.HIGH: "high",
    EvaluationTier.MEDIUM: "medium",
    EvaluationTier.LOW: "low",
}


class ClassificationAggregator:
    """
    Pure reducer from valued trees to summary tables.

    Reads only fields already written by the valuation calculator and
    never mutates the trees.
    """

    def summarize(self, trees: Sequence[ValuedTree]) -> ClassificationSummary:
        """
        Build all summary tables.

        Args:
            trees: Valued trees in survey order

        Returns:
            ClassificationSummary with per-species rows, tier totals and percentages
        """
        by_species = self.classify_by_species(trees)
        tier_totals = self.count_by_tier(trees)
        percentages = self.tier_percentages(tier_totals, len(trees))

        logger.debug(f"Summarized {len(trees)} trees into {len(by_species)} species rows")

        return ClassificationSummary(
            by_species=by_species,
            tier_totals=tier_totals,
            tier_percentages=percentages,
            total=len(trees),
        )

    def classify_by_species(self, trees: Iterable[ValuedTree]) -> List[SpeciesClassification]:
        """
        Tier counts per species, in order of first appearance.

        The scientific name is the first non-empty one seen for the species.
        """
        groups: Dict[str, Dict] = {}

        for tree in trees:
            group = groups.setdefault(tree.species, {
                "species": tree.species,
                "scientific_name": None,
                "very_high": 0,
                "high": 0,
                "medium": 0,
                "low": 0,
                "total": 0,
            })

            if not group["scientific_name"] and tree.scientific_name:
                group["scientific_name"] = tree.scientific_name

            group[_TIER_FIELDS[tree.evaluation_tier]] += 1
            group["total"] += 1

        return [SpeciesClassification(**group) for group in groups.values()]

    def count_by_tier(self, trees: Iterable[ValuedTree]) -> Dict[EvaluationTier, int]:
        """Number of trees in each tier over the whole collection."""
        counts = {tier: 0 for tier in TIER_ORDER}
        for tree in trees:
            counts[tree.evaluation_tier] += 1
        return counts

    def tier_percentages(
        self,
        tier_totals: Dict[EvaluationTier, int],
        total: int,
    ) -> Dict[EvaluationTier, float]:
        """
        Share of each tier, rounded to two decimals.

        Each tier is rounded on its own, so the row may not add up to
        exactly 100. An empty collection yields zeros.
        """
        if total <= 0:
            return {tier: 0.0 for tier in TIER_ORDER}
        return {
            tier: round(100 * tier_totals.get(tier, 0) / total, 2)
            for tier in TIER_ORDER
        }
