"""
Domain service: per-tree valuation and classification.

Each tree gets:
- a canopy rate from its canopy diameter
- a tree kind (palm / standard) from the factor tables
- a monetary value from the palm or trunk-area formula
- an evaluation tier from its composite score
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple
import logging
import math

from tree_valuation.config import settings
from tree_valuation.domain.models import (
    EvaluationTier,
    MAX_RATE,
    TreeKind,
    TreeRecord,
    ValuedTree,
)
from tree_valuation.services.domain.price_factor_resolver import FactorResolution
from tree_valuation.services.domain.species_matcher import SpeciesMatcher

logger = logging.getLogger(__name__)


@dataclass
class ValuationConfig:
    """Constants of the valuation formulas."""

    standard_base_value: float = 20.0
    """Currency units per cm² of trunk cross-section at factor 1"""

    palm_base_value: float = 1500.0
    """Currency units per meter of palm height at factor 1"""

    rate_scale: int = MAX_RATE
    """Survey rates are divided by this to get a [0, 1] fraction"""

    tier_upper_bounds: Sequence[int] = (6, 13, 16)
    """Inclusive upper bounds of the Low, Medium and High tiers"""

    @classmethod
    def from_settings(cls) -> "ValuationConfig":
        return cls(tier_upper_bounds=tuple(settings.evaluation_tier_upper_bounds))


def calculate_canopy_rate(canopy_diameter: float, is_multi_trunk: bool = False) -> int:
    """
    Canopy rate from the canopy diameter in meters.

    Bands: > 12 → 5, [8, 12] → 4, [2, 8) → 2, < 2 → 1. Multi-trunk trees
    are raised to 4 and 3 in the two lower bands.
    """
    if canopy_diameter > 12:
        return 5
    if canopy_diameter >= 8:
        return 4
    if canopy_diameter >= 2:
        return 4 if is_multi_trunk else 2
    return 3 if is_multi_trunk else 1


def calculate_trunk_area(tree: TreeRecord) -> float:
    """
    Trunk cross-section area in cm².

    Multi-stem trees are not priced yet and contribute zero.
    """
    if tree.has_multiple_stems:
        return 0.0
    return math.pi * (tree.stem_diameter * tree.stem_diameter / 4)


def classify_evaluation_tier(
    sum_of_values: int,
    upper_bounds: Sequence[int] = (6, 13, 16),
) -> EvaluationTier:
    """
    Evaluation tier for a composite score.

    Args:
        sum_of_values: Health + location + species rate
        upper_bounds: Inclusive upper bounds of the Low, Medium and High tiers

    Returns:
        EvaluationTier
    """
    low_max, medium_max, high_max = upper_bounds
    if sum_of_values <= low_max:
        return EvaluationTier.LOW
    if sum_of_values <= medium_max:
        return EvaluationTier.MEDIUM
    if sum_of_values <= high_max:
        return EvaluationTier.HIGH
    return EvaluationTier.VERY_HIGH


class ValuationCalculator:
    """
    Computes price, canopy rate and tiers for surveyed trees.

    Holds read-only references to the species matcher and the resolved
    factor tables; never raises for unmatched species or empty tables.
    """

    def __init__(
        self,
        matcher: SpeciesMatcher,
        factors: FactorResolution,
        config: Optional[ValuationConfig] = None,
    ):
        """
        Initialize the calculator.

        Args:
            matcher: Species matcher over the catalog
            factors: Resolved ordinary and palm factor tables
            config: Formula constants (defaults from settings)
        """
        self.matcher = matcher
        self.factors = factors
        self.config = config or ValuationConfig.from_settings()

    def value_tree(self, tree: TreeRecord) -> ValuedTree:
        """
        Value a single tree.

        Args:
            tree: Raw tree record

        Returns:
            ValuedTree with derived fields; price is None when unresolved
        """
        tree = self._apply_catalog(tree)
        kind, factor = self._resolve_kind(tree)

        if kind is TreeKind.PALM:
            price = self.calculate_palm_value(tree, factor)
        elif kind is TreeKind.STANDARD:
            price = self.calculate_standard_value(tree, factor)
        else:
            price = None
            logger.debug(f"Tree {tree.index}: no factor for species '{tree.species}'")

        fields = tree.model_dump(exclude={"sum_of_values", "clonability", "roots_protection_radius"})
        return ValuedTree(
            **fields,
            canopy_rate=calculate_canopy_rate(tree.canopy_diameter, tree.is_multi_trunk),
            evaluation_tier=classify_evaluation_tier(
                tree.sum_of_values, self.config.tier_upper_bounds
            ),
            tree_kind=kind,
            price=price,
        )

    def value_trees(self, trees: Iterable[TreeRecord]) -> List[ValuedTree]:
        """
        Value a collection of trees in order.

        Args:
            trees: Raw tree records

        Returns:
            List of ValuedTree, one per input record
        """
        valued = [self.value_tree(tree) for tree in trees]
        unresolved = sum(1 for tree in valued if not tree.is_price_resolved)

        logger.info(f"Valued {len(valued)} trees ({unresolved} without a matching factor)")
        return valued

    def calculate_standard_value(self, tree: TreeRecord, factor: float) -> float:
        """
        Trunk-area driven value.

        Zero unless location, health and trunk area are all positive.
        """
        trunk_area = calculate_trunk_area(tree)

        if tree.location_rate > 0 and tree.health_rate > 0 and trunk_area > 0:
            health = tree.health_rate / self.config.rate_scale
            location = tree.location_rate / self.config.rate_scale
            return self.config.standard_base_value * factor * location * health * trunk_area

        return 0.0

    def calculate_palm_value(self, tree: TreeRecord, palm_factor: float) -> float:
        """Height driven value for palms."""
        health = tree.health_rate / self.config.rate_scale
        location = tree.location_rate / self.config.rate_scale
        return self.config.palm_base_value * palm_factor * tree.height * health * location

    def _apply_catalog(self, tree: TreeRecord) -> TreeRecord:
        # Catalog values take precedence over the surveyed ones
        record = self.matcher.match(tree.species)
        if record is None:
            return tree
        return tree.model_copy(update={
            "species_rate": record.species_rate,
            "scientific_name": record.scientific_name,
        })

    def _resolve_kind(self, tree: TreeRecord) -> Tuple[TreeKind, Optional[float]]:
        species = tree.species.strip()
        if not species:
            return TreeKind.UNKNOWN, None

        record = self.matcher.match(species)
        names = [species] if record is None else [species, record.hebrew_name]

        for name in names:
            palm_factor = self.factors.palm.get(name)
            if palm_factor is not None:
                return TreeKind.PALM, palm_factor

        for name in names:
            factor = self.factors.standard.get(name)
            if factor is not None:
                return TreeKind.STANDARD, factor

        return TreeKind.UNKNOWN, None
