"""
Resource-specific rules applied before a row is sent to the network.

Covers the mandatory fields of a create and the city/neighborhood pairing
of location-bearing drafts.
"""

from collections.abc import Mapping
from typing import Any

from doof_admin.core.models import ColumnDescriptor, ResourceSchema
from doof_admin.core.normalizers import (
    FieldValidationError,
    NumberNormalizer,
    TextNormalizer,
    is_blank,
    normalize,
)


def _normalized(schema: ResourceSchema, key: str, value: Any) -> Any:
    column: ColumnDescriptor | None = schema.column(key)
    if column is not None:
        return normalize(column, value)
    # Non-column create fields (e.g. a user's password) compare as text
    return TextNormalizer(key).normalize(value)


def check_create_requirements(schema: ResourceSchema, values: Mapping[str, Any]) -> None:
    """
    Check a new-row draft against the resource's mandatory fields.

    Args:
        schema: Resource schema carrying create_requires / create_requires_positive
        values: New-row draft values

    Raises:
        FieldValidationError: On the first missing or invalid mandatory field
    """
    for key in schema.create_requires:
        if is_blank(_normalized(schema, key, values.get(key))):
            column = schema.column(key)
            label = column.label if column and column.label else key
            raise FieldValidationError(
                rule_name="required",
                field_name=key,
                message=f"{label} is required",
            )

    for key in schema.create_requires_positive:
        number = NumberNormalizer(key).normalize(values.get(key))
        if number is None or number <= 0:
            raise FieldValidationError(
                rule_name="positive_reference",
                field_name=key,
                message=f"A valid {key} is required",
            )


def validate_location_pairing(
    values: Mapping[str, Any],
    neighborhood_cities: Mapping[int, int] | None,
) -> None:
    """
    Check that a draft's neighborhood belongs to the draft's city.

    Args:
        values: Draft values holding city_id / neighborhood_id
        neighborhood_cities: Known neighborhood id -> parent city id (None skips the check)

    Raises:
        FieldValidationError: If the neighborhood's known city differs from the draft city
    """
    if not neighborhood_cities:
        return

    neighborhood_id = NumberNormalizer("neighborhood_id").normalize(values.get("neighborhood_id"))
    if neighborhood_id is None:
        return

    parent_city = neighborhood_cities.get(neighborhood_id)
    city_id = NumberNormalizer("city_id").normalize(values.get("city_id"))
    if parent_city is not None and parent_city != city_id:
        raise FieldValidationError(
            rule_name="location_pairing",
            field_name="neighborhood_id",
            message=f"Neighborhood {neighborhood_id} does not belong to city {city_id}",
        )
