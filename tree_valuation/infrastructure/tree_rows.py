"""
Ingestion boundary: survey sheet rows to tree records.

Rows arrive as already extracted cell text keyed by column letter:

  A index            B species          C height (m)
  D stem diameter    E canopy diameter  F health rate
  G location rate    H species rate     I scientific name
  J comment          K number of stems  L multi-trunk flag (1 = yes)

Blank cells keep the field default. Number of stems and the multi-trunk
flag are lenient: anything unparseable means a single, ordinary trunk.
The surveyed species rate of a catalog species is replaced by the catalog
rate, so for those rows column H only has to be a whole number.
"""
import logging
import math
from typing import Any, Container, Dict, Iterable, List, Mapping, Optional

from pydantic import ValidationError

from tree_valuation.domain.models import TreeRecord

logger = logging.getLogger(__name__)

# Header row occupies row 1
FIRST_DATA_ROW = 2

COLUMN_FIELDS = {
    "A": ("index", int),
    "B": ("species", str),
    "C": ("height", float),
    "D": ("stem_diameter", float),
    "E": ("canopy_diameter", float),
    "F": ("health_rate", int),
    "G": ("location_rate", int),
    "H": ("species_rate", int),
    "I": ("scientific_name", str),
    "J": ("comment", str),
}

FIELD_COLUMNS = {name: column for column, (name, _) in COLUMN_FIELDS.items()}
FIELD_COLUMNS["number_of_stems"] = "K"
FIELD_COLUMNS["is_multi_trunk"] = "L"


class IngestionError(ValueError):
    """A cell that cannot be turned into a tree field."""

    def __init__(self, column: str, row: int, value: Any, reason: str = ""):
        self.column = column
        self.row = row
        self.value = "" if value is None else str(value)
        self.reason = reason
        message = f"Column {column} in row {row} can not be: {value}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "column": self.column,
            "row": self.row,
            "value": self.value,
            "reason": self.reason,
        }


def column_name(cell_reference: str) -> str:
    """Column letters of a cell reference, e.g. 'AB12' -> 'AB'."""
    return "".join(ch for ch in cell_reference if ch.isalpha()).upper()


def _parse_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"{text} is not a finite number")
    return value


def _parse_int(text: str) -> int:
    # Sheets often store whole numbers as "3.0"
    value = _parse_float(text)
    if not value.is_integer():
        raise ValueError(f"{text} is not a whole number")
    return int(value)


def _lenient_int(text: str, default: int) -> int:
    try:
        return _parse_int(text)
    except ValueError:
        return default


def parse_tree_row(
    cells: Mapping[str, Optional[str]],
    row_number: int,
    catalog_species: Optional[Container[str]] = None,
) -> TreeRecord:
    """
    Convert one sheet row into a TreeRecord.

    Args:
        cells: Cell text keyed by column letter or cell reference
        row_number: 1-based sheet row, used in error reports
        catalog_species: Species names whose rate comes from the catalog

    Returns:
        Validated TreeRecord

    Raises:
        IngestionError: On an unknown column, a non-numeric value where a
            number is expected, or a value outside its allowed range
    """
    fields: Dict[str, Any] = {}

    for reference, raw in cells.items():
        text = (raw or "").strip()
        if not text:
            continue

        column = column_name(reference)

        if column == "K":
            number_of_stems = _lenient_int(text, 1)
            fields["number_of_stems"] = number_of_stems if number_of_stems >= 1 else 1
            continue
        if column == "L":
            fields["is_multi_trunk"] = _lenient_int(text, 0) == 1
            continue

        if column not in COLUMN_FIELDS:
            raise IngestionError(column, row_number, text, "sheet shouldn't have a cell at this column")

        name, kind = COLUMN_FIELDS[column]
        try:
            if kind is int:
                fields[name] = _parse_int(text)
            elif kind is float:
                fields[name] = _parse_float(text)
            else:
                fields[name] = text
        except ValueError as e:
            raise IngestionError(column, row_number, text, str(e)) from e

    if "index" not in fields:
        raise IngestionError("A", row_number, "", "tree index is required")

    if catalog_species is not None and fields.get("species", "") in catalog_species:
        fields.pop("species_rate", None)

    try:
        return TreeRecord(**fields)
    except ValidationError as e:
        error = e.errors()[0]
        field_name = str(error["loc"][0]) if error["loc"] else ""
        column = FIELD_COLUMNS.get(field_name, "?")
        raise IngestionError(column, row_number, fields.get(field_name), error["msg"]) from e


def parse_tree_rows(
    rows: Iterable[Mapping[str, Optional[str]]],
    first_row: int = FIRST_DATA_ROW,
    catalog_species: Optional[Container[str]] = None,
) -> List[TreeRecord]:
    """
    Convert sheet rows into tree records.

    Reading stops at the first row whose cells are all empty.

    Args:
        rows: Data rows (header excluded) as cell text keyed by column
        first_row: Sheet row number of the first data row
        catalog_species: Species names whose rate comes from the catalog

    Returns:
        List of TreeRecord in sheet order

    Raises:
        IngestionError: On the first malformed cell
    """
    trees = []

    for row_number, cells in enumerate(rows, start=first_row):
        if all(not (value or "").strip() for value in cells.values()):
            break
        trees.append(parse_tree_row(cells, row_number, catalog_species))

    logger.info(f"Ingested {len(trees)} tree rows")
    return trees
