"""
Admin table engine: one editable resource table.

Composes the row edit session, bulk edit reconciler and location resolver
around a mutation coordinator, and resets transient state when the host
delivers fresh data.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from doof_admin.config import EngineConfig
from doof_admin.core.models import (
    NEW_ROW_ID,
    MutationIntent,
    MutationKind,
    MutationOutcome,
    ResourceSchema,
    RowId,
)
from doof_admin.core.rules import load_resource_schemas
from doof_admin.engine.api import AdminApi, call_api
from doof_admin.engine.bulk_edit import BulkEditReconciler
from doof_admin.engine.location_resolver import LocationResolver
from doof_admin.engine.mutation_coordinator import MutationCoordinator
from doof_admin.engine.row_session import RowEditSession
from doof_admin.observability.logger import get_logger
from doof_admin.utils.validation import validate_resource_type, validate_row_id

logger = get_logger(__name__)


class AdminTableEngine:
    """
    State engine behind one admin table.

    Example:
        engine = AdminTableEngine("restaurants", api)
        await engine.reload()
        engine.session.start_edit(engine.records[0])
        await engine.session.change_field(42, "name", "Cafe B")
        outcome = await engine.session.save_edit(42)
    """

    def __init__(
        self,
        resource_type: str,
        api: AdminApi,
        schema: ResourceSchema | None = None,
        refresh: Callable[[], Any] | None = None,
        is_authorized: Callable[[], bool] | None = None,
        config: EngineConfig | None = None,
        neighborhood_cities: Mapping[int, int] | None = None,
        coordinator: MutationCoordinator | None = None,
    ):
        """
        Args:
            resource_type: Resource shown in the table
            api: Admin API collaborator
            schema: Column schema (loaded from the resource config when omitted)
            refresh: Reload callback after mutations (defaults to self.reload)
            is_authorized: Capability check for mutations
            config: Engine settings
            neighborhood_cities: Known neighborhood id -> city id
            coordinator: Shared coordinator; refresh and is_authorized are then ignored
        """
        self.config = config or EngineConfig()
        if schema is None:
            schemas = load_resource_schemas(self.config.resource_config)
            resource_type = validate_resource_type(resource_type, known_types=schemas)
            schema = schemas[resource_type]
            approvable_types = [rt for rt, s in schemas.items() if s.approvable]
        else:
            resource_type = validate_resource_type(resource_type)
            if schema.resource_type != resource_type:
                raise ValueError(
                    f"Schema is for '{schema.resource_type}', not '{resource_type}'"
                )
            approvable_types = [resource_type] if schema.approvable else []

        self.resource_type = resource_type
        self.schema = schema
        self.api = api
        self.records: list[dict[str, Any]] = []

        self.coordinator = coordinator or MutationCoordinator(
            api,
            refresh=refresh or self.reload,
            is_authorized=is_authorized,
            approvable_types=approvable_types,
        )
        self.resolver = LocationResolver(api)
        self.session = RowEditSession(schema, self.coordinator, self.resolver, neighborhood_cities)
        self.bulk = BulkEditReconciler(self.session, retry_attempts=self.config.bulk_retry_attempts)

    # -- data ----------------------------------------------------------------

    async def reload(self, query: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """Fetch the records from the API and hand them to data_refreshed()."""
        result = await call_api(self.api.fetch_resource, self.resource_type, query)
        if isinstance(result, Mapping) and "data" in result:
            result = result["data"]
        self.data_refreshed(result or [])
        return self.records

    def data_refreshed(self, records: Iterable[Mapping[str, Any]]) -> None:
        """
        Accept fresh authoritative records.

        Clears the selection and drops drafts whose rows no longer exist.
        Drafts of rows that still exist keep the user's edits.
        """
        self.records = [dict(record) for record in records]
        self.bulk.clear_selection()

        present = {record.get("id") for record in self.records}
        for row_id in self.session.editing_ids:
            if row_id not in present:
                logger.debug(
                    "Dropping draft for a row that no longer exists",
                    extra={"resource_type": self.resource_type, "row_id": row_id},
                )
                self.session.cancel_edit(row_id)

        if self.session.bulk_active and not self.session.editing_ids:
            self.session.close_bulk()

    def record(self, row_id: RowId) -> dict[str, Any] | None:
        for record in self.records:
            if record.get("id") == row_id:
                return record
        return None

    # -- row actions ---------------------------------------------------------

    async def delete(self, row_id: RowId, confirmed: bool = False) -> MutationOutcome:
        """
        Delete one row. The caller must have obtained confirmation.

        A row referenced by other records comes back as a conflict outcome.
        """
        row_id = validate_row_id(row_id)
        outcome = await self.coordinator.dispatch(
            MutationIntent(
                kind=MutationKind.DELETE,
                resource_type=self.resource_type,
                row_id=row_id,
                confirmed=confirmed,
            )
        )
        draft = self.session.draft(row_id)
        if draft is not None and row_id != NEW_ROW_ID:
            self.session.apply_outcome(draft, outcome)
        return outcome

    async def approve(self, record: Mapping[str, Any]) -> MutationOutcome:
        """Approve a pending submission."""
        return await self._decide(MutationKind.APPROVE, record)

    async def reject(self, record: Mapping[str, Any]) -> MutationOutcome:
        """Reject a pending submission."""
        return await self._decide(MutationKind.REJECT, record)

    async def _decide(self, kind: MutationKind, record: Mapping[str, Any]) -> MutationOutcome:
        row_id = validate_row_id(record.get("id"), allow_new=False)
        return await self.coordinator.dispatch(
            MutationIntent(
                kind=kind,
                resource_type=self.resource_type,
                row_id=row_id,
                status=record.get("status"),
            )
        )

    def row_actions(self, row_id: RowId) -> list[str]:
        """
        Actions currently available for a row.

        Rows being edited offer save/cancel; others offer edit and delete,
        plus approve/reject for pending approvable rows. Busy rows offer nothing.
        """
        if self.session.is_saving(row_id):
            return []
        if self.session.is_editing(row_id):
            return ["save", "cancel"]

        actions = ["edit", "delete"]
        record = self.record(row_id)
        if self.schema.approvable and record is not None and record.get("status", "pending") == "pending":
            actions += ["approve", "reject"]
        return actions
