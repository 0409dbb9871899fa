"""
Unit tests for the sheet row ingestion boundary.

Tests cover:
- Column mapping and numeric parsing
- Lenient stem count and multi-trunk flag
- Column-and-row identified errors
- Stopping at the first empty row
"""
from typing import Dict

import pytest

from tree_valuation.infrastructure.tree_rows import (
    IngestionError,
    column_name,
    parse_tree_row,
    parse_tree_rows,
)


def full_row(**overrides) -> Dict[str, str]:
    row = {
        "A": "7",
        "B": "זית אירופי",
        "C": "6.5",
        "D": "40",
        "E": "8",
        "F": "4",
        "G": "3.0",
        "H": "5",
        "I": "Olea europaea",
        "J": "עץ עתיק",
        "K": "1",
        "L": "0",
    }
    row.update(overrides)
    return row


# ============================================================
# Row Parsing Tests
# ============================================================

class TestParseTreeRow:
    """Tests for converting one row."""

    def test_full_row(self):
        tree = parse_tree_row(full_row(), row_number=2)

        assert tree.index == 7
        assert tree.species == "זית אירופי"
        assert tree.height == 6.5
        assert tree.stem_diameter == 40.0
        assert tree.canopy_diameter == 8.0
        assert (tree.health_rate, tree.location_rate, tree.species_rate) == (4, 3, 5)
        assert tree.scientific_name == "Olea europaea"
        assert tree.comment == "עץ עתיק"
        assert tree.number_of_stems == 1
        assert tree.is_multi_trunk is False

    def test_cell_references_and_whitespace(self):
        tree = parse_tree_row({"A9": " 3 ", "B9": " שקמה ", "F9": "2"}, row_number=9)

        assert tree.index == 3
        assert tree.species == "שקמה"
        assert tree.health_rate == 2

    def test_blank_cells_keep_defaults(self):
        tree = parse_tree_row({"A": "1", "B": "שקמה", "C": "", "H": None}, row_number=2)

        assert tree.height == 0.0
        assert tree.species_rate == 0
        assert tree.scientific_name is None

    def test_multi_stem_and_multi_trunk(self):
        tree = parse_tree_row(full_row(K="3", L="1"), row_number=2)

        assert tree.number_of_stems == 3
        assert tree.has_multiple_stems
        assert tree.is_multi_trunk is True

    @pytest.mark.parametrize("stems, flag", [("abc", "yes"), ("0", "2"), ("1.5", "")])
    def test_lenient_stem_and_flag_columns(self, stems, flag):
        tree = parse_tree_row(full_row(K=stems, L=flag), row_number=2)

        assert tree.number_of_stems == 1
        assert tree.is_multi_trunk is False


# ============================================================
# Error Reporting Tests
# ============================================================

class TestIngestionErrors:
    """Tests for column-and-row identified errors."""

    def test_non_numeric_height(self):
        with pytest.raises(IngestionError) as exc_info:
            parse_tree_row(full_row(C="tall"), row_number=5)

        error = exc_info.value
        assert (error.column, error.row, error.value) == ("C", 5, "tall")
        assert "Column C in row 5" in str(error)

    def test_fractional_rate(self):
        with pytest.raises(IngestionError) as exc_info:
            parse_tree_row(full_row(F="3.5"), row_number=4)

        assert exc_info.value.column == "F"

    def test_rate_out_of_range(self):
        with pytest.raises(IngestionError) as exc_info:
            parse_tree_row(full_row(G="7"), row_number=3)

        error = exc_info.value
        assert (error.column, error.row, error.value) == ("G", 3, "7")

    def test_unknown_column(self):
        with pytest.raises(IngestionError) as exc_info:
            parse_tree_row(full_row(M="extra"), row_number=2)

        assert exc_info.value.column == "M"

    def test_missing_index(self):
        with pytest.raises(IngestionError) as exc_info:
            parse_tree_row({"B": "שקמה"}, row_number=6)

        assert (exc_info.value.column, exc_info.value.row) == ("A", 6)

    @pytest.mark.parametrize("column", ["C", "D", "E"])
    @pytest.mark.parametrize("text", ["nan", "inf", "-inf", "1e500"])
    def test_non_finite_measurement(self, column, text):
        with pytest.raises(IngestionError) as exc_info:
            parse_tree_row(full_row(**{column: text}), row_number=8)

        error = exc_info.value
        assert (error.column, error.row, error.value) == (column, 8, text)

    def test_non_finite_rate(self):
        with pytest.raises(IngestionError) as exc_info:
            parse_tree_row(full_row(F="nan"), row_number=2)

        assert exc_info.value.column == "F"

    def test_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_tree_row(full_row(D="n/a"), row_number=2)

    def test_to_dict(self):
        error = IngestionError("E", 12, "wide", "not a number")

        assert error.to_dict() == {"column": "E", "row": 12, "value": "wide", "reason": "not a number"}


# ============================================================
# Multi-Row Tests
# ============================================================

class TestParseTreeRows:

    def test_stops_at_first_empty_row(self):
        rows = [
            full_row(A="1"),
            full_row(A="2"),
            {"A": "", "B": "  "},
            full_row(A="4"),
        ]

        trees = parse_tree_rows(rows)

        assert [tree.index for tree in trees] == [1, 2]

    def test_row_numbers_follow_the_header(self):
        rows = [full_row(A="1"), full_row(A="2", C="?")]

        with pytest.raises(IngestionError) as exc_info:
            parse_tree_rows(rows)

        assert exc_info.value.row == 3

    def test_custom_first_row(self):
        with pytest.raises(IngestionError) as exc_info:
            parse_tree_rows([full_row(E="x")], first_row=10)

        assert exc_info.value.row == 10


class TestCatalogSpeciesRate:
    """Tests for surveyed species rates of catalog species."""

    def test_out_of_range_rate_ignored_for_catalog_species(self):
        tree = parse_tree_row(full_row(H="9"), row_number=2, catalog_species={"זית אירופי"})

        assert tree.species_rate == 0

    def test_out_of_range_rate_rejected_for_unknown_species(self):
        with pytest.raises(IngestionError) as exc_info:
            parse_tree_row(full_row(B="עץ לא מזוהה", H="9"), row_number=4, catalog_species={"זית אירופי"})

        assert (exc_info.value.column, exc_info.value.row) == ("H", 4)

    def test_catalog_species_rate_must_still_be_a_number(self):
        with pytest.raises(IngestionError) as exc_info:
            parse_tree_row(full_row(H="high"), row_number=2, catalog_species={"זית אירופי"})

        assert exc_info.value.column == "H"

    def test_matcher_as_catalog_species(self, matcher):
        rows = [full_row(B="אלה ארץ ישראלית", H="12")]

        trees = parse_tree_rows(rows, catalog_species=matcher)

        assert trees[0].species == "אלה ארץ ישראלית"


class TestColumnName:

    @pytest.mark.parametrize("reference, expected", [("A1", "A"), ("ab12", "AB"), ("C", "C")])
    def test_column_name(self, reference, expected):
        assert column_name(reference) == expected


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
