"""
Unit tests for the cleanup review workflow.
"""

import asyncio

import pytest

from doof_admin.core.models import CleanupChange, OutcomeStatus
from doof_admin.engine.cleanup_review import CleanupReviewWorkflow
from doof_admin.engine.mutation_coordinator import MutationCoordinator


@pytest.fixture
def changes() -> list[dict]:
    return [
        {"id": "c1", "entity_type": "restaurants", "entity_id": 42, "field": "name",
         "current_value": " Cafe A ", "proposed_value": "Cafe A"},
        {"id": "c2", "entity_type": "restaurants", "entity_id": 42, "field": "cuisine",
         "current_value": "cafe", "proposed_value": "Cafe"},
        {"id": "c3", "entity_type": "dishes", "entity_id": 5, "field": "name",
         "current_value": "pancakes", "proposed_value": "Pancakes"},
    ]


@pytest.fixture
def workflow(api) -> CleanupReviewWorkflow:
    return CleanupReviewWorkflow(MutationCoordinator(api))


class TestLoad:
    """Tests for loading a review batch"""

    def test_load_starts_pending(self, workflow, changes):
        changes[0]["decision"] = "approved"

        loaded = workflow.load(changes)

        assert workflow.active
        assert [c.id for c in loaded] == ["c1", "c2", "c3"]
        assert all(c.is_pending for c in loaded)

    def test_duplicate_ids_rejected(self, workflow, changes):
        changes[1]["id"] = "c1"
        with pytest.raises(ValueError) as exc_info:
            workflow.load(changes)
        assert "c1" in str(exc_info.value)

    def test_accepts_models(self, workflow):
        change = CleanupChange(id="x", entity_type="cities", entity_id=1, field="name", proposed_value="NYC")
        workflow.load([change])
        assert workflow.get("x").proposed_value == "NYC"

    def test_empty_batch_is_inactive(self, workflow):
        workflow.load([])
        assert not workflow.active


class TestDecisions:
    """Tests for approve and reject"""

    def test_approve_sends_single_field_save(self, workflow, api, changes):
        workflow.load(changes)

        outcome = asyncio.run(workflow.approve("c3"))

        assert outcome.status == OutcomeStatus.SUCCESS
        assert workflow.get("c3").decision == "approved"
        assert api.calls_to("update_resource") == [("update_resource", "dishes", 5, {"name": "Pancakes"})]

    def test_reject_makes_no_call(self, workflow, api, changes):
        workflow.load(changes)

        outcome = workflow.reject("c1")

        assert outcome.ok
        assert workflow.get("c1").decision == "rejected"
        assert api.calls == []

    def test_decided_change_is_refused(self, workflow, api, changes):
        """Test a second decision on a decided change fails instead of silently succeeding"""
        workflow.load(changes)
        workflow.reject("c1")

        outcome = asyncio.run(workflow.approve("c1"))

        assert outcome.status == OutcomeStatus.INVALID_STATE
        assert outcome.error == "Change is already rejected"
        assert api.calls == []

    def test_failed_approve_stays_pending(self, workflow, api, changes):
        api.fail_with("update_resource", 5, RuntimeError("dish locked"))
        workflow.load(changes)

        outcome = asyncio.run(workflow.approve("c3"))

        assert outcome.status == OutcomeStatus.FAILED
        change = workflow.get("c3")
        assert change.is_pending
        assert change.error == "dish locked"

    def test_unknown_change(self, workflow, changes):
        workflow.load(changes)
        assert workflow.reject("nope").status == OutcomeStatus.INVALID_STATE

    def test_batch_destroyed_when_all_decided(self, workflow, changes):
        workflow.load(changes)

        workflow.reject("c1")
        workflow.reject("c2")
        asyncio.run(workflow.approve("c3"))

        assert not workflow.active
        assert workflow.changes == []
        assert workflow.last_summary == {"total": 3, "approved": 1, "rejected": 2}


class TestBatchDecisions:
    """Tests for approve_all and reject_all"""

    def test_approve_all_skips_decided(self, workflow, api, changes):
        workflow.load(changes)
        workflow.reject("c2")

        outcomes = asyncio.run(workflow.approve_all())

        assert set(outcomes) == {"c1", "c3"}
        assert all(o.status == OutcomeStatus.SUCCESS for o in outcomes.values())
        assert len(api.calls_to("update_resource")) == 2
        assert not workflow.active

    def test_approve_all_serializes_changes_to_the_same_record(self, workflow, api, changes):
        """Test two changes to one row are applied one after another, never refused as busy"""
        workflow.load(changes)

        outcomes = asyncio.run(workflow.approve_all())

        assert outcomes["c1"].status == OutcomeStatus.SUCCESS
        assert outcomes["c2"].status == OutcomeStatus.SUCCESS
        restaurant = api.records["restaurants"][0]
        assert restaurant["name"] == "Cafe A"
        assert restaurant["cuisine"] == "Cafe"

    def test_approve_all_refreshes_once(self, api, changes):
        refreshes = []
        workflow = CleanupReviewWorkflow(MutationCoordinator(api, refresh=lambda: refreshes.append(1)))
        workflow.load(changes)

        asyncio.run(workflow.approve_all())

        assert refreshes == [1]

    def test_partial_approve_all_keeps_batch(self, workflow, api, changes):
        api.fail_with("update_resource", 5, RuntimeError("dish locked"))
        workflow.load(changes)

        asyncio.run(workflow.approve_all())

        assert workflow.active
        assert [c.id for c in workflow.pending] == ["c3"]

    def test_reject_all(self, workflow, api, changes):
        workflow.load(changes)
        asyncio.run(workflow.approve("c1"))

        rejected = workflow.reject_all()

        assert rejected == ["c2", "c3"]
        assert not workflow.active
        assert workflow.last_summary["approved"] == 1


class TestStats:
    """Tests for batch statistics"""

    def test_stats(self, workflow, changes):
        workflow.load(changes)
        workflow.reject("c1")

        stats = workflow.stats()

        assert stats["total"] == 3
        assert stats["pending"] == 2
        assert stats["rejected"] == 1
        assert stats["by_entity_type"] == {"restaurants": 2, "dishes": 1}
        assert stats["by_field"] == {"name": 2, "cuisine": 1}
