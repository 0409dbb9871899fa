"""
API request models using Pydantic.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from tree_valuation.domain.models import TreeRecord


class TreeValuationRequest(BaseModel):
    """Already ingested tree records to value."""
    trees: List[TreeRecord] = Field(
        description="Surveyed trees in report order"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "trees": [
                    {
                        "index": 1,
                        "species": "אלון התבור",
                        "height": 8.0,
                        "stem_diameter": 35.0,
                        "canopy_diameter": 9.0,
                        "health_rate": 4,
                        "location_rate": 3,
                        "species_rate": 5,
                    }
                ]
            }
        }


class SheetRowsRequest(BaseModel):
    """Survey sheet rows as cell text keyed by column letter."""
    rows: List[Dict[str, Optional[str]]] = Field(
        description="Data rows without the header; reading stops at the first empty row"
    )
    first_row: int = Field(
        default=2,
        ge=1,
        description="Sheet row number of the first data row"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "rows": [
                    {"A": "1", "B": "סבל פלמטו", "C": "10", "D": "30", "E": "4",
                     "F": "1", "G": "4", "H": "3", "K": "1", "L": "0"},
                ],
                "first_row": 2,
            }
        }
