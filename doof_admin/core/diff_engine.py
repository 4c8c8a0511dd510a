"""
Diff engine: minimal changed-field maps between records and drafts.

Also builds draft seeds for edit/add mode and full payloads for creates, so
seeding and comparison always share the same per-column rules.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from doof_admin.core.models import ColumnDescriptor, DiffResult, ID_COLUMN, InputKind
from doof_admin.core.normalizers import (
    FieldValidationError,
    check_format,
    check_option,
    is_blank,
    normalize,
    to_draft_value,
    values_equal,
)


def _editable(columns: Iterable[ColumnDescriptor]) -> list[ColumnDescriptor]:
    return [col for col in columns if col.is_editable]


def _check_value(column: ColumnDescriptor, value: Any) -> None:
    """Run the column's local checks against a normalized draft value."""
    if column.required and is_blank(value):
        raise FieldValidationError(
            rule_name="required",
            field_name=column.key,
            message=f"{column.label or column.key} is required",
        )
    check_format(column, value)
    check_option(column, value)


def compute_changes(
    original: Mapping[str, Any],
    draft: Mapping[str, Any],
    columns: Iterable[ColumnDescriptor],
) -> DiffResult:
    """
    Compute the fields whose normalized values differ between a record and its draft.

    Only editable columns are compared; columns missing from the draft are
    left untouched. Malformed numbers always fail; required, format and option
    checks apply to values the draft changes, so a stored value that predates
    a rule never blocks saving other fields. Any validation failure returns an
    error result without a partial change map. Tag fields carry the full
    normalized list.

    Args:
        original: The persisted record
        draft: Draft values for the record
        columns: Column descriptors of the resource

    Returns:
        DiffResult with either the changes or an error
    """
    changes: dict[str, Any] = {}

    for column in _editable(columns):
        if column.key not in draft:
            continue
        try:
            new_value = normalize(column, draft[column.key])
            old_value = normalize(column, original.get(column.key))
            if values_equal(old_value, new_value):
                continue
            _check_value(column, new_value)
        except FieldValidationError as e:
            return DiffResult(error=e.message, field=e.field_name)

        changes[column.key] = new_value

    return DiffResult(changes=changes)


def build_create_payload(
    draft: Mapping[str, Any],
    columns: Iterable[ColumnDescriptor],
) -> dict[str, Any]:
    """
    Build the payload for creating a record from a new-row draft.

    Editable columns are normalized and validated; None values are omitted.
    Keys that are not columns pass through untouched. The id and non-editable
    display columns are dropped.

    Raises:
        FieldValidationError: If any editable column fails validation
    """
    columns = list(columns)
    known_keys = {col.key for col in columns} | {ID_COLUMN}
    payload: dict[str, Any] = {}

    for column in _editable(columns):
        value = normalize(column, draft.get(column.key))
        _check_value(column, value)
        if value is not None:
            payload[column.key] = value

    for key, value in draft.items():
        if key not in known_keys:
            payload[key] = value

    return payload


def seed_draft_values(record: Mapping[str, Any], columns: Iterable[ColumnDescriptor]) -> dict[str, Any]:
    """
    Editing representation of a record.

    Column values go through the column's draft formatting; other record
    fields are copied as they are.
    """
    values = dict(record)
    for column in columns:
        if column.key == ID_COLUMN:
            continue
        values[column.key] = to_draft_value(column, record.get(column.key))
    return values


def default_draft_values(columns: Iterable[ColumnDescriptor]) -> dict[str, Any]:
    """Draft values for a brand-new row."""
    values: dict[str, Any] = {}
    for column in _editable(columns):
        if column.default is not None:
            values[column.key] = to_draft_value(column, column.default)
        elif column.kind == InputKind.BOOLEAN:
            values[column.key] = "false"
        else:
            values[column.key] = ""
    return values
