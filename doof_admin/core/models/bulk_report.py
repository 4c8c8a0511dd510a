"""
BulkSaveReport model summarizing a bulk save across many rows.
"""

from pydantic import BaseModel, Field

from .draft import RowId


class BulkSaveReport(BaseModel):
    """
    Partial-success report of a bulk save.

    Attributes:
        saved: Rows whose update succeeded
        unchanged: Rows with no changes (draft discarded, no network call)
        failed: Row -> reason for rows that stay in edit mode
        attempts: Dispatch rounds used (1 plus retries)
        cancelled: Bulk mode was cancelled while the save was in flight
    """

    saved: list[RowId] = Field(default_factory=list)
    unchanged: list[RowId] = Field(default_factory=list)
    failed: dict[RowId, str] = Field(default_factory=dict)
    attempts: int = 0
    cancelled: bool = False

    @property
    def complete(self) -> bool:
        return not self.failed
