"""
Row edit session: per-row edit/add lifecycle for one resource table.

Rows move viewing -> editing -> saving -> viewing (or back to editing on
failure); the synthetic new row moves idle -> adding -> saving -> idle.
Outside bulk mode at most one row is being edited or added at a time.
"""

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from doof_admin.core.diff_engine import (
    build_create_payload,
    compute_changes,
    default_draft_values,
    seed_draft_values,
)
from doof_admin.core.models import (
    NEW_ROW_ID,
    ColumnDescriptor,
    Draft,
    InputKind,
    MutationIntent,
    MutationKind,
    MutationOutcome,
    OutcomeStatus,
    ResourceSchema,
    RowId,
)
from doof_admin.core.normalizers import FieldValidationError
from doof_admin.core.rules import check_create_requirements, validate_location_pairing
from doof_admin.engine.location_resolver import LocationResolver, apply_to_draft, clear_neighborhood
from doof_admin.engine.mutation_coordinator import MutationCoordinator
from doof_admin.observability import metrics
from doof_admin.observability.logger import get_logger

logger = get_logger(__name__)


class RowState(str, Enum):
    VIEWING = "viewing"
    EDITING = "editing"
    SAVING = "saving"


class RowEditSession:
    """
    Tracks drafts for the rows of one resource and turns saves into mutations.

    Drafts are seeded from the host's records; the session never writes to
    the records themselves. Saves go through the shared MutationCoordinator.
    """

    def __init__(
        self,
        schema: ResourceSchema,
        coordinator: MutationCoordinator,
        resolver: LocationResolver,
        neighborhood_cities: Mapping[int, int] | None = None,
    ):
        """
        Args:
            schema: Columns and create rules of the resource
            coordinator: Single-flight mutation coordinator
            resolver: Location resolver for address/zipcode columns
            neighborhood_cities: Known neighborhood id -> city id, for pairing checks
        """
        self.schema = schema
        self.resource_type = schema.resource_type
        self.coordinator = coordinator
        self.resolver = resolver
        self.neighborhood_cities = neighborhood_cities
        self.drafts: dict[RowId, Draft] = {}
        self.bulk_active = False
        self._pending_cancels: set[RowId] = set()
        self._lookup_generation: dict[RowId, int] = {}

    # -- state ---------------------------------------------------------------

    @property
    def columns(self) -> list[ColumnDescriptor]:
        return self.schema.columns

    @property
    def adding(self) -> bool:
        return NEW_ROW_ID in self.drafts

    @property
    def editing_ids(self) -> list[RowId]:
        return [row_id for row_id in self.drafts if row_id != NEW_ROW_ID]

    @property
    def errors(self) -> dict[RowId, str]:
        return {row_id: d.error for row_id, d in self.drafts.items() if d.error}

    def draft(self, row_id: RowId) -> Draft | None:
        return self.drafts.get(row_id)

    def is_editing(self, row_id: RowId) -> bool:
        return row_id in self.drafts

    def is_saving(self, row_id: RowId) -> bool:
        return self.coordinator.is_busy(self.resource_type, row_id)

    def row_state(self, row_id: RowId) -> RowState:
        if self.is_saving(row_id):
            return RowState.SAVING
        if row_id in self.drafts:
            return RowState.EDITING
        return RowState.VIEWING

    def clear_error(self, row_id: RowId) -> None:
        draft = self.drafts.get(row_id)
        if draft is not None:
            draft.error = None

    # -- edit ----------------------------------------------------------------

    def start_edit(self, record: Mapping[str, Any]) -> bool:
        """
        Put a row into edit mode.

        Refused while any mutation of this resource is in flight, while adding,
        or in bulk mode. Any other single-row edit is discarded.

        Returns:
            True if the row is now being edited
        """
        row_id = record.get("id")
        if row_id is None:
            logger.warning("Cannot edit a record without an id", extra={"resource_type": self.resource_type})
            return False

        if row_id in self.drafts:
            return True

        reason = self._edit_blocker()
        if reason:
            logger.debug(f"start_edit refused: {reason}", extra={"resource_type": self.resource_type, "row_id": row_id})
            return False

        self._discard_all()
        self._open(record)
        return True

    def _edit_blocker(self) -> str | None:
        if self.coordinator.has_in_flight(self.resource_type):
            return "mutation in flight"
        if self.adding:
            return "add mode active"
        if self.bulk_active:
            return "bulk edit active"
        return None

    def _open(self, record: Mapping[str, Any]) -> Draft:
        draft = Draft(
            row_id=record["id"],
            values=seed_draft_values(record, self.columns),
            original=dict(record),
        )
        self.drafts[draft.row_id] = draft
        return draft

    async def change_field(self, row_id: RowId, column_key: str, raw_value: Any) -> bool:
        """
        Update one draft field.

        A city change clears the neighborhood; an address or zipcode change
        runs the location lookup and merges its result into the draft.

        Returns:
            False if the row has no draft or is saving
        """
        draft = self.drafts.get(row_id)
        if draft is None or self.is_saving(row_id):
            return False

        previous = draft.values.get(column_key)
        draft.values[column_key] = raw_value
        draft.error = None

        column = self.schema.column(column_key)
        if column is None:
            return True

        if column.kind == InputKind.CITY_REF and _text(previous) != _text(raw_value):
            clear_neighborhood(draft)
        elif column.kind == InputKind.NEIGHBORHOOD_REF and _text(raw_value) == "":
            draft.values["neighborhood_name"] = ""

        source = column.location_source
        if source is not None:
            await self._resolve_location(draft, source, raw_value)

        return True

    async def _resolve_location(self, draft: Draft, source: str, raw_value: Any) -> None:
        row_id = draft.row_id
        generation = self._lookup_generation.get(row_id, 0) + 1
        self._lookup_generation[row_id] = generation

        if source == "address":
            result = await self.resolver.resolve_from_address(_text(raw_value))
        else:
            result = await self.resolver.resolve_from_zipcode(_text(raw_value))

        # A newer change or a cancel made this lookup stale
        if self.drafts.get(row_id) is not draft or self._lookup_generation.get(row_id) != generation:
            logger.debug("Dropping stale location lookup", extra={"resource_type": self.resource_type, "row_id": row_id})
            return

        apply_to_draft(draft, result)
        if source == "address" and result.zipcode:
            for column in self.columns:
                if column.location_source == "zipcode" and column.is_editable:
                    draft.values[column.key] = result.zipcode

    def cancel_edit(self, row_id: RowId | None = None) -> None:
        """
        Leave edit mode for one row (or every edited row) without saving.

        Always succeeds locally. A row whose mutation is in flight keeps its
        draft until the mutation resolves; the cancel is applied then.
        """
        row_ids = [row_id] if row_id is not None else self.editing_ids
        for rid in row_ids:
            if rid not in self.drafts:
                continue
            if self.is_saving(rid):
                self._pending_cancels.add(rid)
            else:
                self._discard(rid)

    def _discard(self, row_id: RowId) -> None:
        self.drafts.pop(row_id, None)
        self._pending_cancels.discard(row_id)
        self._lookup_generation.pop(row_id, None)

    def _discard_all(self) -> None:
        for row_id in list(self.drafts):
            self._discard(row_id)

    async def save_edit(self, row_id: RowId, refresh: bool = True) -> MutationOutcome:
        """
        Save one edited row.

        An empty diff behaves like cancel_edit; a validation error stays on
        the row and keeps it in edit mode; otherwise only the changed fields
        are dispatched as a save.
        """
        draft = self.drafts.get(row_id)
        if draft is None:
            return _outcome(row_id, OutcomeStatus.INVALID_STATE, "Row is not being edited")
        if self.is_saving(row_id):
            return _outcome(row_id, OutcomeStatus.BUSY, "Row is busy")

        diff = compute_changes(draft.original, draft.values, self.columns)
        if not diff.is_valid:
            return self._validation_failure(draft, diff.error, diff.field)

        if diff.is_empty:
            self._discard(row_id)
            return _outcome(row_id, OutcomeStatus.NO_CHANGES)

        try:
            validate_location_pairing(draft.values, self.neighborhood_cities)
        except FieldValidationError as e:
            return self._validation_failure(draft, e.message, e.field_name)

        intent = MutationIntent(
            kind=MutationKind.SAVE,
            resource_type=self.resource_type,
            row_id=row_id,
            payload=diff.changes,
        )
        outcome = await self.coordinator.dispatch(intent, refresh=refresh)
        self.apply_outcome(draft, outcome)
        return outcome

    # -- add -----------------------------------------------------------------

    def start_add(self) -> bool:
        """
        Open the synthetic new row.

        Cancels an in-progress single-row edit; refused while a mutation is in
        flight or in bulk mode.
        """
        if self.adding:
            return True
        if self.coordinator.has_in_flight(self.resource_type) or self.bulk_active:
            logger.debug("start_add refused", extra={"resource_type": self.resource_type})
            return False

        self._discard_all()
        self.drafts[NEW_ROW_ID] = Draft(row_id=NEW_ROW_ID, values=default_draft_values(self.columns))
        return True

    def cancel_add(self) -> None:
        self.cancel_edit(NEW_ROW_ID)

    async def save_new_row(self, refresh: bool = True) -> MutationOutcome:
        """
        Create the record described by the new-row draft.

        Mandatory fields are checked locally first; a missing one never
        reaches the network.
        """
        draft = self.drafts.get(NEW_ROW_ID)
        if draft is None:
            return _outcome(NEW_ROW_ID, OutcomeStatus.INVALID_STATE, "Not adding a row")
        if self.is_saving(NEW_ROW_ID):
            return _outcome(NEW_ROW_ID, OutcomeStatus.BUSY, "Row is busy")

        try:
            check_create_requirements(self.schema, draft.values)
            payload = build_create_payload(draft.values, self.columns)
            validate_location_pairing(draft.values, self.neighborhood_cities)
        except FieldValidationError as e:
            return self._validation_failure(draft, e.message, e.field_name)

        intent = MutationIntent(
            kind=MutationKind.SAVE,
            resource_type=self.resource_type,
            row_id=NEW_ROW_ID,
            payload=payload,
        )
        outcome = await self.coordinator.dispatch(intent, refresh=refresh)
        self.apply_outcome(draft, outcome)
        return outcome

    # -- bulk ----------------------------------------------------------------

    def open_bulk(self, records: Iterable[Mapping[str, Any]]) -> list[RowId]:
        """Seed a draft for every record and enter bulk mode."""
        self.bulk_active = True
        opened = []
        for record in records:
            if record.get("id") is None:
                continue
            if record["id"] not in self.drafts:
                self._open(record)
            opened.append(record["id"])
        return opened

    def close_bulk(self) -> None:
        """Discard every bulk draft (busy rows are discarded once they resolve)."""
        self.cancel_edit()
        self.bulk_active = False

    # -- outcomes ------------------------------------------------------------

    def apply_outcome(self, draft: Draft, outcome: MutationOutcome) -> None:
        """
        Settle a draft after its mutation resolved.

        Success (and any queued cancel) discards the draft; a failure stays on
        the row so the user can retry or cancel.
        """
        row_id = draft.row_id
        if self.drafts.get(row_id) is not draft:
            return
        if outcome.status == OutcomeStatus.BUSY:
            return
        if outcome.ok or row_id in self._pending_cancels:
            self._discard(row_id)
        else:
            draft.error = outcome.error

    def _validation_failure(self, draft: Draft, message: str | None, field: str | None) -> MutationOutcome:
        draft.error = message
        metrics.record_validation_failure(self.resource_type, field)
        logger.info(
            f"Validation failed for {self.resource_type} {draft.row_id}: {message}",
            extra={"resource_type": self.resource_type, "row_id": draft.row_id, "field_name": field},
        )
        return _outcome(draft.row_id, OutcomeStatus.VALIDATION_ERROR, message, field)


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _outcome(
    row_id: RowId,
    status: OutcomeStatus,
    error: str | None = None,
    field: str | None = None,
) -> MutationOutcome:
    return MutationOutcome(row_id=row_id, kind=MutationKind.SAVE, status=status, error=error, field=field)
