"""
Unit tests for Pydantic data models.

Tests the engine models for validation and constraint enforcement.
"""

import pytest
from pydantic import ValidationError

from doof_admin.core.models import (
    NEW_ROW_ID,
    BulkSaveReport,
    CleanupChange,
    ColumnDescriptor,
    DiffResult,
    Draft,
    InputKind,
    LocationResolution,
    MutationIntent,
    MutationKind,
    MutationOutcome,
    OutcomeStatus,
    ResourceSchema,
)


class TestColumnDescriptor:
    """Tests for ColumnDescriptor model"""

    def test_defaults(self):
        column = ColumnDescriptor(key="name")
        assert column.kind == InputKind.TEXT
        assert column.editable is True
        assert column.is_editable is True
        assert column.location_source is None

    def test_id_and_actions_never_editable(self):
        assert not ColumnDescriptor(key="id").is_editable
        assert not ColumnDescriptor(key="actions").is_editable

    def test_select_requires_options(self):
        """Test that a select column without options raises ValidationError"""
        with pytest.raises(ValidationError) as exc_info:
            ColumnDescriptor(key="status", kind="select")
        assert "options" in str(exc_info.value)

    def test_invalid_kind(self):
        with pytest.raises(ValidationError):
            ColumnDescriptor(key="x", kind="color")

    def test_location_source(self):
        assert ColumnDescriptor(key="address", kind="address").location_source == "address"
        zipcode = ColumnDescriptor(key="zipcode", format="zipcode", resolves_location=True)
        assert zipcode.location_source == "zipcode"
        assert ColumnDescriptor(key="zip_code", format="zipcode").location_source is None

    def test_frozen(self):
        column = ColumnDescriptor(key="name")
        with pytest.raises(ValidationError):
            column.label = "Other"


class TestDraft:
    """Tests for Draft model"""

    def test_new_row_draft(self):
        draft = Draft(row_id=NEW_ROW_ID)
        assert draft.is_new
        assert draft.values == {}
        assert draft.original == {}
        assert draft.lookup_failed is False

    def test_existing_row_draft(self):
        draft = Draft(row_id=42, values={"name": "Cafe A"}, original={"id": 42, "name": "Cafe A"})
        assert not draft.is_new
        assert draft.row_id == 42


class TestMutationModels:
    """Tests for MutationIntent and MutationOutcome models"""

    def test_intent_defaults(self):
        intent = MutationIntent(kind="save", resource_type="dishes", row_id=5)
        assert intent.kind == MutationKind.SAVE
        assert intent.payload == {}
        assert intent.confirmed is False

    def test_intent_requires_resource_type(self):
        with pytest.raises(ValidationError):
            MutationIntent(kind="save", resource_type="", row_id=5)

    def test_outcome_ok(self):
        assert MutationOutcome(row_id=1, kind="save", status="success").ok
        assert MutationOutcome(row_id=1, kind="save", status="no_changes").ok
        assert not MutationOutcome(row_id=1, kind="save", status="busy").ok
        assert not MutationOutcome(row_id=1, kind="delete", status=OutcomeStatus.CONFLICT).ok


class TestDiffResult:
    """Tests for DiffResult model"""

    def test_error_and_changes_are_exclusive(self):
        with pytest.raises(ValidationError):
            DiffResult(error="bad", changes={"name": "x"})

    def test_states(self):
        assert DiffResult().is_empty
        assert DiffResult(changes={"a": 1}).is_valid
        assert not DiffResult(changes={"a": 1}).is_empty
        assert not DiffResult(error="bad", field="a").is_valid


class TestLocationResolution:
    """Tests for LocationResolution model"""

    def test_failed(self):
        result = LocationResolution.failed(zipcode="99999")
        assert result.lookup_failed
        assert result.neighborhood_id is None
        assert result.zipcode == "99999"

    def test_draft_fields(self):
        result = LocationResolution(neighborhood_id=7, neighborhood_name="SoHo", city_id=1, city_name="New York")
        assert result.draft_fields() == {
            "city_id": "1",
            "city_name": "New York",
            "neighborhood_id": "7",
            "neighborhood_name": "SoHo",
        }


class TestCleanupChange:
    """Tests for CleanupChange model"""

    def test_starts_pending(self):
        change = CleanupChange(id="c1", entity_type="restaurants", entity_id=42, field="name",
                               current_value=" Cafe A ", proposed_value="Cafe A")
        assert change.is_pending
        assert change.decision == "pending"

    def test_invalid_decision(self):
        with pytest.raises(ValidationError):
            CleanupChange(id="c1", entity_type="restaurants", entity_id=42, field="name", decision="maybe")


class TestResourceSchema:
    """Tests for ResourceSchema model"""

    def test_duplicate_keys_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            ResourceSchema(resource_type="x", columns=[ColumnDescriptor(key="a"), ColumnDescriptor(key="a")])
        assert "duplicate" in str(exc_info.value)

    def test_lookup_helpers(self):
        schema = ResourceSchema(
            resource_type="x",
            columns=[ColumnDescriptor(key="id", editable=False), ColumnDescriptor(key="name")],
        )
        assert schema.column("name").key == "name"
        assert schema.column("missing") is None
        assert [c.key for c in schema.editable_columns] == ["name"]


class TestBulkSaveReport:
    """Tests for BulkSaveReport model"""

    def test_complete(self):
        assert BulkSaveReport(saved=[1, 2]).complete
        assert not BulkSaveReport(saved=[1], failed={2: "boom"}).complete
