"""
Field normalizers.

Type-aware coercion and comparison for a single field (boolean, tag list,
number, free text, foreign-key id) plus format and option checks.
"""

from .base_normalizer import BaseNormalizer, FieldValidationError
from .boolean_normalizer import BooleanNormalizer
from .field_normalizer import (
    NORMALIZER_REGISTRY,
    is_blank,
    normalize,
    normalizer_for,
    to_draft_value,
    values_equal,
)
from .format_checks import FORMAT_PATTERNS, check_format, check_option
from .number_normalizer import NumberNormalizer
from .tags_normalizer import TagsNormalizer
from .text_normalizer import TextNormalizer

__all__ = [
    "BaseNormalizer",
    "FieldValidationError",
    "BooleanNormalizer",
    "NumberNormalizer",
    "TagsNormalizer",
    "TextNormalizer",
    "NORMALIZER_REGISTRY",
    "FORMAT_PATTERNS",
    "check_format",
    "check_option",
    "is_blank",
    "normalize",
    "normalizer_for",
    "to_draft_value",
    "values_equal",
]
