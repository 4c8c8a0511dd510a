"""
Cleanup review workflow: approve or reject proposed data corrections.

A batch of CleanupChange items is loaded for review. Approving a change
writes its proposed value through the mutation coordinator; rejecting only
records the decision. Once every change is decided the batch is destroyed.
"""

import asyncio
from collections import defaultdict
from collections.abc import Iterable, Mapping
from typing import Any

from doof_admin.core.models import (
    CleanupChange,
    MutationIntent,
    MutationKind,
    MutationOutcome,
    OutcomeStatus,
)
from doof_admin.engine.mutation_coordinator import MutationCoordinator
from doof_admin.observability import metrics
from doof_admin.observability.logger import get_logger, log_operation

logger = get_logger(__name__)


class CleanupReviewWorkflow:
    """
    Holds one review batch and applies decisions to it.

    Approvals of changes to the same record run one after another, because
    the coordinator allows a single write per row; changes to different
    records run concurrently.
    """

    def __init__(self, coordinator: MutationCoordinator):
        self.coordinator = coordinator
        self._batch: dict[str, CleanupChange] | None = None
        self.last_summary: dict[str, int] | None = None

    @property
    def active(self) -> bool:
        return self._batch is not None

    @property
    def changes(self) -> list[CleanupChange]:
        return list(self._batch.values()) if self._batch else []

    @property
    def pending(self) -> list[CleanupChange]:
        return [change for change in self.changes if change.is_pending]

    def get(self, change_id: str) -> CleanupChange | None:
        return self._batch.get(change_id) if self._batch else None

    def load(self, changes: Iterable[CleanupChange | Mapping[str, Any]]) -> list[CleanupChange]:
        """
        Start reviewing a new batch, replacing any previous one.

        Every change starts pending.

        Raises:
            ValueError: If two changes share an id
        """
        batch: dict[str, CleanupChange] = {}
        for item in changes:
            change = item if isinstance(item, CleanupChange) else CleanupChange(**item)
            if change.id in batch:
                raise ValueError(f"Duplicate cleanup change id '{change.id}'")
            batch[change.id] = change.model_copy(update={"decision": "pending", "error": None})

        self._batch = batch or None
        logger.info(f"Loaded {len(batch)} cleanup changes for review")
        return self.changes

    # -- decisions -----------------------------------------------------------

    async def approve(self, change_id: str) -> MutationOutcome:
        """
        Apply one change's proposed value to its record.

        On failure the change stays pending with the error attached.
        """
        change = self.get(change_id)
        refused = self._refusal(change_id, change, MutationKind.APPROVE)
        if refused is not None:
            return refused

        outcome = await self._apply(change, refresh=True)
        self._close_if_decided()
        return outcome

    def reject(self, change_id: str) -> MutationOutcome:
        """Record a rejection; nothing is sent to the API."""
        change = self.get(change_id)
        refused = self._refusal(change_id, change, MutationKind.REJECT)
        if refused is not None:
            return refused

        self._decide(change, "rejected")
        self._close_if_decided()
        return MutationOutcome(row_id=change.entity_id, kind=MutationKind.REJECT, status=OutcomeStatus.SUCCESS)

    async def approve_all(self) -> dict[str, MutationOutcome]:
        """
        Approve every pending change.

        Returns:
            change id -> outcome
        """
        pending = self.pending
        if not pending:
            return {}

        groups: dict[tuple[str, Any], list[CleanupChange]] = defaultdict(list)
        for change in pending:
            groups[(change.entity_type, change.entity_id)].append(change)

        outcomes: dict[str, MutationOutcome] = {}

        async def apply_group(group: list[CleanupChange]) -> None:
            for change in group:
                outcomes[change.id] = await self._apply(change, refresh=False)

        with log_operation("Approve all cleanup changes", logger=logger):
            await asyncio.gather(*(apply_group(group) for group in groups.values()))

        if any(outcome.status == OutcomeStatus.SUCCESS for outcome in outcomes.values()):
            await self.coordinator.signal_refresh()

        self._close_if_decided()
        return outcomes

    def reject_all(self) -> list[str]:
        """Reject every pending change. Returns the rejected ids."""
        rejected = []
        for change in self.pending:
            self._decide(change, "rejected")
            rejected.append(change.id)
        self._close_if_decided()
        return rejected

    def stats(self) -> dict[str, Any]:
        """
        Summarize the current batch.

        Returns:
            total, pending, approved, rejected, plus counts by entity type and by field
        """
        changes = self.changes
        by_entity_type: dict[str, int] = defaultdict(int)
        by_field: dict[str, int] = defaultdict(int)
        for change in changes:
            by_entity_type[change.entity_type] += 1
            by_field[change.field] += 1

        return {
            "total": len(changes),
            "pending": sum(1 for c in changes if c.decision == "pending"),
            "approved": sum(1 for c in changes if c.decision == "approved"),
            "rejected": sum(1 for c in changes if c.decision == "rejected"),
            "by_entity_type": dict(by_entity_type),
            "by_field": dict(by_field),
        }

    # -- internals -----------------------------------------------------------

    async def _apply(self, change: CleanupChange, refresh: bool) -> MutationOutcome:
        intent = MutationIntent(
            kind=MutationKind.SAVE,
            resource_type=change.entity_type,
            row_id=change.entity_id,
            payload={change.field: change.proposed_value},
        )
        outcome = await self.coordinator.dispatch(intent, refresh=refresh)

        if outcome.status == OutcomeStatus.SUCCESS:
            self._decide(change, "approved")
        else:
            change.error = outcome.error or outcome.status.value
            logger.warning(
                f"Cleanup change {change.id} not applied: {change.error}",
                extra={"resource_type": change.entity_type, "row_id": change.entity_id},
            )
        return outcome

    def _decide(self, change: CleanupChange, decision: str) -> None:
        change.decision = decision
        change.error = None
        metrics.increment_counter(
            metrics.cleanup_decisions_total, 1, entity_type=change.entity_type, decision=decision,
        )

    def _refusal(
        self, change_id: str, change: CleanupChange | None, kind: MutationKind,
    ) -> MutationOutcome | None:
        if change is None:
            return MutationOutcome(
                row_id=change_id, kind=kind, status=OutcomeStatus.INVALID_STATE,
                error=f"Unknown cleanup change '{change_id}'",
            )
        if not change.is_pending:
            return MutationOutcome(
                row_id=change.entity_id, kind=kind, status=OutcomeStatus.INVALID_STATE,
                error=f"Change is already {change.decision}",
            )
        return None

    def _close_if_decided(self) -> None:
        if self._batch is not None and not self.pending:
            self.last_summary = self._summary()
            logger.info("Cleanup review complete", extra=self.last_summary)
            self._batch = None

    def _summary(self) -> dict[str, int]:
        stats = self.stats()
        return {key: stats[key] for key in ("total", "approved", "rejected")}
