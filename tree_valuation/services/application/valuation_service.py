"""
Application service: Orchestration layer for tree valuation reports.
"""
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Sequence

from tree_valuation.domain.models import (
    ClassificationSummary,
    SpeciesRecord,
    TreeRecord,
    ValuedTree,
)
from tree_valuation.infrastructure.tree_rows import FIRST_DATA_ROW, parse_tree_rows
from tree_valuation.services.application.engine_context import EngineState


@dataclass(frozen=True)
class ValuationReport:
    """Valued trees plus their summary tables."""
    trees: List[ValuedTree]
    classification: ClassificationSummary
    factor_source: str


class ValuationService:
    """
    Application service for valuation reports.

    Coordinates ingestion, valuation and aggregation. No business logic
    here, only coordination between the domain services.
    """

    def __init__(self, state: EngineState):
        """
        Initialize the service with the resolved engine state.

        Args:
            state: Shared engine state from the EngineContext
        """
        self.state = state

    def value_trees(self, trees: Iterable[TreeRecord]) -> List[ValuedTree]:
        """
        Value every tree of a survey.

        Args:
            trees: Raw tree records

        Returns:
            List of ValuedTree in input order
        """
        return self.state.calculator.value_trees(trees)

    def build_report(self, trees: Sequence[TreeRecord]) -> ValuationReport:
        """
        Value a survey and summarize it.

        This method orchestrates:
        1. Catalog enrichment and valuation of each tree
        2. Per-species and per-tier classification of the whole collection

        Args:
            trees: Raw tree records

        Returns:
            ValuationReport
        """
        valued = self.value_trees(trees)
        classification = self.state.aggregator.summarize(valued)

        return ValuationReport(
            trees=valued,
            classification=classification,
            factor_source=self.state.factors.standard.source.value,
        )

    def build_report_from_rows(
        self,
        rows: Iterable[Mapping[str, Optional[str]]],
        first_row: int = FIRST_DATA_ROW,
    ) -> ValuationReport:
        """
        Ingest sheet rows, then value and summarize them.

        Species found in the catalog take their rate from it, so their
        surveyed rate is not range checked.

        Raises:
            IngestionError: If a cell is malformed
        """
        trees = parse_tree_rows(rows, first_row=first_row, catalog_species=self.state.matcher)
        return self.build_report(trees)

    def find_species(self, name: str) -> Optional[SpeciesRecord]:
        return self.state.matcher.match(name)
