"""
Bulk edit reconciler: edit many selected rows at once and save them together.

Rows are saved concurrently, each through the same single-flight path a
single-row save uses. One failing row never blocks or rolls back the others.
"""

import asyncio
from collections.abc import Iterable, Mapping
from typing import Any

from doof_admin.core.models import BulkSaveReport, MutationOutcome, OutcomeStatus, RowId
from doof_admin.engine.row_session import RowEditSession
from doof_admin.observability import metrics
from doof_admin.observability.logger import get_logger, log_operation

logger = get_logger(__name__)


class BulkEditReconciler:
    """
    Selection and bulk save on top of a RowEditSession.

    The refresh callback is signalled once per bulk save, after every row has
    resolved, and only when at least one row was saved.
    """

    def __init__(self, session: RowEditSession, retry_attempts: int = 0):
        """
        Args:
            session: Row edit session of the resource
            retry_attempts: Extra rounds for rows that failed with a mutation failure
        """
        self.session = session
        self.retry_attempts = retry_attempts
        self.selection: set[RowId] = set()
        # Bumped on every start and cancel; a save_all that sees it change was cancelled
        self._run = 0

    @property
    def active(self) -> bool:
        return self.session.bulk_active

    # -- selection -----------------------------------------------------------

    def toggle(self, row_id: RowId, selected: bool | None = None) -> bool:
        """
        Select or deselect one row.

        Returns:
            Whether the row is selected afterwards
        """
        if selected is None:
            selected = row_id not in self.selection
        if selected:
            self.selection.add(row_id)
        else:
            self.selection.discard(row_id)
        return selected

    def select_all(self, row_ids: Iterable[RowId], selected: bool = True) -> None:
        if selected:
            self.selection.update(row_ids)
        else:
            self.selection.difference_update(row_ids)

    def clear_selection(self) -> None:
        self.selection.clear()

    # -- lifecycle -----------------------------------------------------------

    def start(self, records: Iterable[Mapping[str, Any]]) -> bool:
        """
        Open a draft for every selected record and enter bulk mode.

        Refused with an empty selection, while a single-row edit or add is
        open, or while a mutation of the resource is in flight.
        """
        if self.active:
            return True
        if not self.selection:
            logger.debug("Bulk edit refused: nothing selected")
            return False
        if self.session.drafts or self.session.coordinator.has_in_flight(self.session.resource_type):
            logger.debug("Bulk edit refused: row edit or mutation in progress")
            return False

        rows = [record for record in records if record.get("id") in self.selection]
        if not rows:
            return False

        self._run += 1
        opened = self.session.open_bulk(rows)
        logger.info(
            f"Bulk edit started for {len(opened)} {self.session.resource_type}",
            extra={"resource_type": self.session.resource_type},
        )
        return True

    def cancel(self) -> None:
        """Discard all bulk drafts and the selection."""
        self._run += 1
        self.session.close_bulk()
        self.selection.clear()

    async def save_all(self) -> BulkSaveReport:
        """
        Save every row in bulk edit mode.

        Successful and unchanged rows leave edit mode. Failed rows keep their
        drafts and remain selected so they can be fixed and saved again.
        A cancel() while rows are in flight stops further rounds and leaves
        the selection empty.
        """
        report = BulkSaveReport()
        if not self.active:
            return report

        run = self._run
        resource_type = self.session.resource_type
        pending = list(self.session.editing_ids)
        row_count = len(pending)

        with log_operation("Bulk save", logger=logger, resource_type=resource_type):
            while pending:
                report.attempts += 1
                for row_id in pending:
                    report.failed.pop(row_id, None)

                outcomes = await asyncio.gather(
                    *(self.session.save_edit(row_id, refresh=False) for row_id in pending)
                )
                pending = self._collect(report, outcomes)
                if self._run != run:
                    report.cancelled = True
                    logger.info(
                        f"Bulk edit cancelled during save of {resource_type}",
                        extra={"resource_type": resource_type},
                    )
                    break
                if pending:
                    logger.info(
                        f"Retrying {len(pending)} failed {resource_type} rows",
                        extra={"resource_type": resource_type},
                    )

        if report.saved:
            await self.session.coordinator.signal_refresh()

        if report.cancelled:
            self.selection.clear()
        elif report.complete:
            self.session.close_bulk()
            self.selection.clear()
        else:
            self.selection = set(report.failed)

        metrics.record_bulk_save(resource_type, row_count, len(report.failed))
        return report

    def _collect(self, report: BulkSaveReport, outcomes: list[MutationOutcome]) -> list[RowId]:
        """Sort outcomes into the report; return rows eligible for another round."""
        retry = []
        for outcome in outcomes:
            if outcome.status == OutcomeStatus.SUCCESS:
                report.saved.append(outcome.row_id)
            elif outcome.status == OutcomeStatus.NO_CHANGES:
                report.unchanged.append(outcome.row_id)
            else:
                report.failed[outcome.row_id] = outcome.error or outcome.status.value
                if outcome.status == OutcomeStatus.FAILED and report.attempts <= self.retry_attempts:
                    retry.append(outcome.row_id)
        return retry
