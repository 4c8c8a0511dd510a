"""
MutationIntent and MutationOutcome models for per-row writes.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from .draft import RowId


class MutationKind(str, Enum):
    SAVE = "save"
    DELETE = "delete"
    APPROVE = "approve"
    REJECT = "reject"


class OutcomeStatus(str, Enum):
    """Result of a dispatched (or refused) mutation."""

    SUCCESS = "success"
    NO_CHANGES = "no_changes"
    BUSY = "busy"
    VALIDATION_ERROR = "validation_error"
    CONFLICT = "conflict"
    INVALID_STATE = "invalid_state"
    UNAUTHORIZED = "unauthorized"
    FAILED = "failed"


class MutationIntent(BaseModel):
    """
    A requested write against one row.

    Attributes:
        kind: save, delete, approve or reject
        resource_type: Resource the row belongs to
        row_id: Target row (NEW_ROW_ID for a create)
        payload: Changed fields for save, full payload for create
        status: Current status of the target (approve/reject only)
        confirmed: Caller obtained delete confirmation
    """

    kind: MutationKind
    resource_type: str = Field(..., min_length=1)
    row_id: RowId
    payload: dict[str, Any] = Field(default_factory=dict)
    status: str | None = None
    confirmed: bool = False

    class Config:
        json_schema_extra = {
            "example": {
                "kind": "save",
                "resource_type": "restaurants",
                "row_id": 42,
                "payload": {"name": "Cafe B", "tags": ["brunch", "coffee"]},
            }
        }


class MutationOutcome(BaseModel):
    """
    Outcome of a mutation, attached to its originating row.

    Expected failures are reported here instead of being raised.
    """

    row_id: RowId
    kind: MutationKind
    status: OutcomeStatus
    data: Any = None
    error: str | None = None
    field: str | None = None

    @property
    def ok(self) -> bool:
        return self.status in (OutcomeStatus.SUCCESS, OutcomeStatus.NO_CHANGES)
