"""
Column-aware entry points: pick the normalizer for a column and compare values.
"""

from typing import Any

from doof_admin.core.models import ColumnDescriptor, InputKind

from .base_normalizer import BaseNormalizer, FieldValidationError
from .boolean_normalizer import BooleanNormalizer
from .number_normalizer import NumberNormalizer
from .tags_normalizer import TagsNormalizer
from .text_normalizer import TextNormalizer

NORMALIZER_REGISTRY: dict[InputKind, type[BaseNormalizer]] = {
    InputKind.BOOLEAN: BooleanNormalizer,
    InputKind.TAGS: TagsNormalizer,
    InputKind.NUMBER: NumberNormalizer,
    InputKind.CITY_REF: NumberNormalizer,
    InputKind.NEIGHBORHOOD_REF: NumberNormalizer,
    InputKind.TEXT: TextNormalizer,
    InputKind.TEXTAREA: TextNormalizer,
    InputKind.SELECT: TextNormalizer,
    InputKind.ADDRESS: TextNormalizer,
}


def normalizer_for(column: ColumnDescriptor) -> BaseNormalizer:
    """Instantiate the normalizer for a column's input kind."""
    normalizer_class = NORMALIZER_REGISTRY.get(column.kind, TextNormalizer)
    return normalizer_class(column.key)


def normalize(column: ColumnDescriptor, raw_value: Any) -> Any:
    """
    Normalize a raw value for comparison.

    Raises:
        FieldValidationError: For malformed numeric input
    """
    return normalizer_for(column).normalize(raw_value)


def to_draft_value(column: ColumnDescriptor, value: Any) -> Any:
    """Editing representation of a record value (tags joined, booleans stringified)."""
    return normalizer_for(column).to_draft(value)


def values_equal(a: Any, b: Any) -> bool:
    """Compare two already-normalized values."""
    return a == b


def is_blank(value: Any) -> bool:
    """True for normalized values that count as empty for required checks."""
    return value is None or value == []


__all__ = [
    "FieldValidationError",
    "NORMALIZER_REGISTRY",
    "is_blank",
    "normalize",
    "normalizer_for",
    "to_draft_value",
    "values_equal",
]
