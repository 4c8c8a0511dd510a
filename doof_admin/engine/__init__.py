"""
Admin table state engine: row edit sessions, mutation coordination,
bulk editing, location resolution and cleanup review.
"""

from .api import AdminApi, ApiError, ApiResponse, ConflictError
from .bulk_edit import BulkEditReconciler
from .cleanup_review import CleanupReviewWorkflow
from .location_resolver import LocationResolver, extract_zipcode
from .mutation_coordinator import MutationCoordinator
from .row_session import RowEditSession, RowState
from .table_engine import AdminTableEngine

__all__ = [
    "AdminApi",
    "ApiError",
    "ApiResponse",
    "ConflictError",
    "AdminTableEngine",
    "BulkEditReconciler",
    "CleanupReviewWorkflow",
    "LocationResolver",
    "MutationCoordinator",
    "RowEditSession",
    "RowState",
    "extract_zipcode",
]
