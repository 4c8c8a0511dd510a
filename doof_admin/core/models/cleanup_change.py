"""
CleanupChange model representing a proposed field correction awaiting review.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

from .draft import RowId


class CleanupChange(BaseModel):
    """
    A proposed correction produced by data analysis.

    Attributes:
        id: Unique change identifier within a review batch
        entity_type: Resource type of the target record
        entity_id: Identifier of the target record
        field: Field the change applies to
        current_value: Value currently stored
        proposed_value: Value the analysis suggests
        decision: pending, approved or rejected
        error: Last failure while applying the change
    """

    id: str = Field(..., min_length=1)
    entity_type: str = Field(..., min_length=1)
    entity_id: RowId
    field: str = Field(..., min_length=1)
    current_value: Any = None
    proposed_value: Any = None
    decision: Literal["pending", "approved", "rejected"] = "pending"
    error: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.decision == "pending"

    class Config:
        json_schema_extra = {
            "example": {
                "id": "restaurants_trimName_42",
                "entity_type": "restaurants",
                "entity_id": 42,
                "field": "name",
                "current_value": "  Cafe A ",
                "proposed_value": "Cafe A",
                "decision": "pending",
            }
        }
