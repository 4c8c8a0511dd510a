"""
Mutation coordinator: single-flight writes per row.

Every save, delete, approve and reject goes through dispatch(). At most one
intent per (resource_type, row_id) is in flight; a second one is refused
with a busy outcome instead of being queued. Expected failures come back as
MutationOutcome objects and are never raised past this boundary.
"""

import time
from collections.abc import Callable, Iterable
from typing import Any

from doof_admin.core.models import (
    NEW_ROW_ID,
    MutationIntent,
    MutationKind,
    MutationOutcome,
    OutcomeStatus,
    RowId,
)
from doof_admin.core.rules import load_resource_schemas
from doof_admin.engine.api import AdminApi, ConflictError, call_api, maybe_await
from doof_admin.observability import metrics
from doof_admin.observability.logger import get_logger

logger = get_logger(__name__)

PENDING_STATUS = "pending"
REFERENCED_MESSAGE = "Item is referenced by other items and cannot be deleted"

RowKey = tuple[str, RowId]


class MutationCoordinator:
    """
    Serializes mutations per row and reports their outcomes.

    The coordinator keeps no copy of the data. After a successful mutation
    it signals the injected refresh callback so the host reloads the
    authoritative records.
    """

    def __init__(
        self,
        api: AdminApi,
        refresh: Callable[[], Any] | None = None,
        is_authorized: Callable[[], bool] | None = None,
        approvable_types: Iterable[str] | None = None,
    ):
        """
        Args:
            api: Admin API collaborator
            refresh: Called (sync or async) after successful mutations
            is_authorized: Capability check; mutations are refused when it returns False
            approvable_types: Resource types that accept approve/reject (defaults to the
                approvable schemas of the packaged resource config)
        """
        self.api = api
        self.refresh = refresh
        self.is_authorized = is_authorized
        if approvable_types is None:
            approvable_types = [rt for rt, schema in load_resource_schemas().items() if schema.approvable]
        self.approvable_types = frozenset(approvable_types)
        self._in_flight: dict[RowKey, MutationKind] = {}
        self._decided: dict[RowKey, str] = {}
        self._outcomes: dict[RowKey, MutationOutcome] = {}

    # -- observation ---------------------------------------------------------

    def is_busy(self, resource_type: str, row_id: RowId) -> bool:
        return (resource_type, row_id) in self._in_flight

    def has_in_flight(self, resource_type: str | None = None) -> bool:
        if resource_type is None:
            return bool(self._in_flight)
        return any(key[0] == resource_type for key in self._in_flight)

    def in_flight(self, resource_type: str) -> dict[RowId, MutationKind]:
        """Busy rows of a resource and the kind of mutation running on each."""
        return {row_id: kind for (rtype, row_id), kind in self._in_flight.items() if rtype == resource_type}

    def last_outcome(self, resource_type: str, row_id: RowId) -> MutationOutcome | None:
        return self._outcomes.get((resource_type, row_id))

    # -- dispatch ------------------------------------------------------------

    async def dispatch(self, intent: MutationIntent, refresh: bool = True) -> MutationOutcome:
        """
        Run one mutation, enforcing single flight for its row.

        Args:
            intent: The requested mutation
            refresh: Signal the refresh callback on success

        Returns:
            MutationOutcome describing the result (never raises for expected failures)
        """
        key = (intent.resource_type, intent.row_id)

        # No await before the busy flag is set: the check and the claim are atomic
        if key in self._in_flight:
            logger.debug(
                f"Row busy, refusing {intent.kind.value}",
                extra={"resource_type": intent.resource_type, "row_id": intent.row_id},
            )
            metrics.record_mutation(intent.resource_type, intent.kind.value, OutcomeStatus.BUSY.value)
            return MutationOutcome(
                row_id=intent.row_id,
                kind=intent.kind,
                status=OutcomeStatus.BUSY,
                error="Row is busy",
            )

        refused = self._precheck(intent)
        if refused is not None:
            return self._finish(intent, refused)

        self._in_flight[key] = intent.kind
        metrics.set_gauge(metrics.rows_in_flight, len(self.in_flight(intent.resource_type)),
                          resource_type=intent.resource_type)
        start = time.time()
        try:
            outcome = await self._execute(intent)
        finally:
            del self._in_flight[key]
            metrics.set_gauge(metrics.rows_in_flight, len(self.in_flight(intent.resource_type)),
                              resource_type=intent.resource_type)

        duration = time.time() - start
        self._finish(intent, outcome, duration)

        if outcome.status == OutcomeStatus.SUCCESS and refresh:
            await self.signal_refresh()

        return outcome

    async def signal_refresh(self) -> None:
        """Ask the host to reload authoritative data."""
        if self.refresh is None:
            return
        try:
            await maybe_await(self.refresh())
        except Exception:
            logger.exception("Refresh callback failed")

    def _precheck(self, intent: MutationIntent) -> MutationOutcome | None:
        """Refusals that never reach the network."""
        if self.is_authorized is not None and not self.is_authorized():
            return self._refusal(intent, OutcomeStatus.UNAUTHORIZED, "Not authorized")

        if intent.kind == MutationKind.DELETE:
            if intent.row_id == NEW_ROW_ID:
                return self._refusal(intent, OutcomeStatus.INVALID_STATE, "Cannot delete an unsaved row")
            if not intent.confirmed:
                return self._refusal(intent, OutcomeStatus.INVALID_STATE, "Delete requires confirmation")

        if intent.kind in (MutationKind.APPROVE, MutationKind.REJECT):
            if intent.resource_type not in self.approvable_types:
                return self._refusal(
                    intent, OutcomeStatus.INVALID_STATE,
                    f"{intent.resource_type} cannot be approved or rejected",
                )
            decided = self._decided.get((intent.resource_type, intent.row_id))
            status = decided or intent.status or PENDING_STATUS
            if status != PENDING_STATUS:
                return self._refusal(intent, OutcomeStatus.INVALID_STATE, f"Item is already {status}")

        if intent.kind == MutationKind.SAVE and not intent.payload:
            return self._refusal(intent, OutcomeStatus.NO_CHANGES, None)

        return None

    async def _execute(self, intent: MutationIntent) -> MutationOutcome:
        try:
            data = await self._call(intent)
        except ConflictError as e:
            message = REFERENCED_MESSAGE if intent.kind == MutationKind.DELETE else e.message
            return MutationOutcome(
                row_id=intent.row_id, kind=intent.kind, status=OutcomeStatus.CONFLICT, error=message,
            )
        except Exception as e:
            logger.warning(
                f"{intent.kind.value} failed for {intent.resource_type} {intent.row_id}: {e}",
                extra={
                    "resource_type": intent.resource_type,
                    "row_id": intent.row_id,
                    "error_type": type(e).__name__,
                },
            )
            return MutationOutcome(
                row_id=intent.row_id, kind=intent.kind, status=OutcomeStatus.FAILED,
                error=str(e) or type(e).__name__,
            )

        if intent.kind in (MutationKind.APPROVE, MutationKind.REJECT):
            decision = "approved" if intent.kind == MutationKind.APPROVE else "rejected"
            self._decided[(intent.resource_type, intent.row_id)] = decision

        return MutationOutcome(row_id=intent.row_id, kind=intent.kind, status=OutcomeStatus.SUCCESS, data=data)

    async def _call(self, intent: MutationIntent) -> Any:
        if intent.kind == MutationKind.SAVE:
            if intent.row_id == NEW_ROW_ID:
                return await call_api(self.api.create_resource, intent.resource_type, intent.payload)
            return await call_api(self.api.update_resource, intent.resource_type, intent.row_id, intent.payload)
        if intent.kind == MutationKind.DELETE:
            return await call_api(self.api.delete_resource, intent.resource_type, intent.row_id)
        if intent.kind == MutationKind.APPROVE:
            return await call_api(self.api.approve_submission, intent.row_id)
        return await call_api(self.api.reject_submission, intent.row_id)

    def _refusal(self, intent: MutationIntent, status: OutcomeStatus, error: str | None) -> MutationOutcome:
        return MutationOutcome(row_id=intent.row_id, kind=intent.kind, status=status, error=error)

    def _finish(self, intent: MutationIntent, outcome: MutationOutcome, duration: float = 0.0) -> MutationOutcome:
        self._outcomes[(intent.resource_type, intent.row_id)] = outcome
        metrics.record_mutation(intent.resource_type, intent.kind.value, outcome.status.value, duration)
        logger.info(
            f"{intent.kind.value} {intent.resource_type} {intent.row_id}: {outcome.status.value}",
            extra={
                "resource_type": intent.resource_type,
                "row_id": intent.row_id,
                "kind": intent.kind,
                "status": outcome.status,
            },
        )
        return outcome
