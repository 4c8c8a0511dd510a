"""
Core data models for the admin table engine.

All models use Pydantic for runtime validation and type safety.
"""

from .bulk_report import BulkSaveReport
from .cleanup_change import CleanupChange
from .column import ACTIONS_COLUMN, ID_COLUMN, ColumnDescriptor, InputKind
from .diff_result import DiffResult
from .draft import NEW_ROW_ID, Draft, RowId
from .location import LOCATION_FIELDS, LocationResolution
from .mutation import MutationIntent, MutationKind, MutationOutcome, OutcomeStatus
from .resource_schema import ResourceSchema

__all__ = [
    "ACTIONS_COLUMN",
    "ID_COLUMN",
    "LOCATION_FIELDS",
    "NEW_ROW_ID",
    "BulkSaveReport",
    "CleanupChange",
    "ColumnDescriptor",
    "DiffResult",
    "Draft",
    "InputKind",
    "LocationResolution",
    "MutationIntent",
    "MutationKind",
    "MutationOutcome",
    "OutcomeStatus",
    "ResourceSchema",
    "RowId",
]
