"""
Draft model holding the unsaved edit state of one row (ephemeral).
"""

from typing import Any, Union

from pydantic import BaseModel, Field

RowId = Union[int, str]

# Reserved identifier of the synthetic row used while adding a record
NEW_ROW_ID = "__NEW_ROW__"


class Draft(BaseModel):
    """
    In-progress, unsaved edit state for one row or the synthetic new row.

    Note: Draft is ephemeral. It exists only while its row is in edit/add
    mode and is discarded on cancel or after a successful save.

    Attributes:
        row_id: Identifier of the edited record, or NEW_ROW_ID
        values: Column key -> pending editing value (strings and primitives)
        original: Snapshot of the record the draft was seeded from ({} for new rows)
        lookup_failed: Last location lookup failed; city/neighborhood are manual
        error: Last local validation or mutation error for this row
    """

    row_id: RowId
    values: dict[str, Any] = Field(default_factory=dict)
    original: dict[str, Any] = Field(default_factory=dict)
    lookup_failed: bool = False
    error: str | None = None

    @property
    def is_new(self) -> bool:
        return self.row_id == NEW_ROW_ID

    class Config:
        json_schema_extra = {
            "example": {
                "row_id": 42,
                "values": {
                    "name": "Cafe A",
                    "tags": "brunch, coffee",
                    "address": "123 Main St, New York, NY 10001",
                    "city_id": "1",
                    "neighborhood_id": "7",
                },
                "original": {"id": 42, "name": "Cafe A", "tags": ["coffee"]},
                "lookup_failed": False,
                "error": None,
            }
        }
