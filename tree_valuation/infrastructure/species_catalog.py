"""
Species catalog loader.

Format: comma delimited, UTF-8, with a header row.
Required columns:
  hebrew_name, scientific_name, species_rate

Optional columns (empty string → None):
  palm_factor   valuation factor for palm species

Duplicate hebrew names overwrite earlier rows.
"""
import csv
import logging
from pathlib import Path
from typing import Dict, Optional

from pydantic import ValidationError

from tree_valuation.config import settings
from tree_valuation.domain.models import SpeciesRecord

logger = logging.getLogger(__name__)

REQUIRED_CATALOG_COLUMNS = frozenset({"hebrew_name", "scientific_name", "species_rate"})


def _read_catalog(path: Path) -> Dict[str, SpeciesRecord]:
    catalog: Dict[str, SpeciesRecord] = {}

    with open(path, encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)

        if reader.fieldnames is None:
            raise ValueError(f"Catalog is empty or has no header row: {path}")

        missing = REQUIRED_CATALOG_COLUMNS - {name.strip() for name in reader.fieldnames}
        if missing:
            raise ValueError(f"Catalog missing required columns: {sorted(missing)}")

        for line_no, row in enumerate(reader, start=2):
            if None in row:
                raise ValueError(f"Malformed catalog row {line_no}: too many fields")
            row = {k.strip(): (v or "").strip() for k, v in row.items()}
            try:
                record = SpeciesRecord(
                    hebrew_name=row["hebrew_name"],
                    scientific_name=row["scientific_name"],
                    species_rate=row["species_rate"],
                    palm_factor=row.get("palm_factor") or None,
                )
            except ValidationError as e:
                raise ValueError(f"Malformed catalog row {line_no}: {e}") from e

            catalog[record.hebrew_name] = record

    return catalog


def load_species_catalog(path: Optional[Path] = None) -> Dict[str, SpeciesRecord]:
    """
    Load the species catalog keyed by hebrew name.

    Any failure (missing file, missing column, malformed row) is logged
    and yields an empty catalog instead of raising.

    Args:
        path: CSV file (defaults to the bundled catalog)

    Returns:
        Mapping of hebrew name to SpeciesRecord
    """
    path = Path(path or settings.species_catalog_path)

    try:
        catalog = _read_catalog(path)
    except (OSError, ValueError, csv.Error) as e:
        logger.warning(f"Species catalog unavailable ({path}): {e}. Continuing with an empty catalog")
        return {}

    palms = sum(1 for record in catalog.values() if record.is_palm)
    logger.info(f"Loaded {len(catalog)} species ({palms} palms) from {path}")
    return catalog
