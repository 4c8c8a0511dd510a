"""
Input validation utilities for the admin table engine.

Checks identifiers and resource names before they are used to key engine
state or passed to the admin API.
"""

import re
from collections.abc import Iterable
from typing import Any

from doof_admin.core.models import NEW_ROW_ID

RESOURCE_TYPE_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")
ROW_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_\-\.]+$")


class ValidationError(ValueError):
    """Raised when input validation fails."""
    pass


def validate_row_id(row_id: Any, field_name: str = "row_id", allow_new: bool = True) -> int | str:
    """
    Validate a row identifier.

    Row ids are positive integers, identifier-like strings, or (when
    allow_new is set) the new-row sentinel.

    Args:
        row_id: The identifier to validate
        field_name: Name of the field (for error messages)
        allow_new: Whether NEW_ROW_ID is acceptable

    Returns:
        The validated identifier (strings stripped of whitespace)

    Raises:
        ValidationError: If validation fails

    Examples:
        >>> validate_row_id(42)
        42
        >>> validate_row_id("restaurants_trimName_7")
        'restaurants_trimName_7'
    """
    if isinstance(row_id, bool):
        raise ValidationError(f"{field_name} must be an integer or string")

    if isinstance(row_id, int):
        if row_id <= 0:
            raise ValidationError(f"{field_name} must be a positive integer, got {row_id}")
        return row_id

    if not isinstance(row_id, str):
        raise ValidationError(f"{field_name} must be an integer or string")

    row_id = row_id.strip()
    if not row_id:
        raise ValidationError(f"{field_name} cannot be empty or whitespace-only")

    if row_id == NEW_ROW_ID:
        if not allow_new:
            raise ValidationError(f"{field_name} cannot be the new-row placeholder here")
        return row_id

    if not ROW_ID_PATTERN.match(row_id):
        raise ValidationError(
            f"{field_name} contains invalid characters. "
            "Only alphanumeric, hyphens, underscores, and dots are allowed."
        )

    if len(row_id) > 255:
        raise ValidationError(f"{field_name} exceeds maximum length of 255 characters")

    return row_id


def validate_resource_type(
    resource_type: str,
    known_types: Iterable[str] | None = None,
    field_name: str = "resource_type",
) -> str:
    """
    Validate a resource type name.

    Args:
        resource_type: Resource name (restaurants, dishes, ...)
        known_types: Optional set of accepted names
        field_name: Name of the field (for error messages)

    Returns:
        The validated resource type

    Raises:
        ValidationError: If validation fails
    """
    if not resource_type or not isinstance(resource_type, str):
        raise ValidationError(f"{field_name} must be a non-empty string")

    resource_type = resource_type.strip()
    if not RESOURCE_TYPE_PATTERN.match(resource_type):
        raise ValidationError(
            f"{field_name} '{resource_type}' must be lowercase letters, digits and underscores"
        )

    if known_types is not None:
        known = set(known_types)
        if resource_type not in known:
            raise ValidationError(f"Unknown {field_name} '{resource_type}'. Known: {sorted(known)}")

    return resource_type
