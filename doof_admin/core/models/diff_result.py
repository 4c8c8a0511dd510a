"""
DiffResult model representing the changed fields between a record and its draft (ephemeral).
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator


class DiffResult(BaseModel):
    """
    Outcome of comparing a draft against its original record.

    Attributes:
        changes: Field -> normalized new value, only for fields that differ
        error: Validation message when the draft is invalid (no changes then)
        field: Field the validation error refers to
    """

    error: str | None = None
    field: str | None = None
    changes: dict[str, Any] = Field(default_factory=dict)

    @field_validator("changes")
    @classmethod
    def check_error_consistency(cls, v, info):
        """An invalid diff never carries a partial change map."""
        if info.data.get("error") and v:
            raise ValueError("error is set but changes is not empty")
        return v

    @property
    def is_valid(self) -> bool:
        return self.error is None

    @property
    def is_empty(self) -> bool:
        return self.is_valid and not self.changes
