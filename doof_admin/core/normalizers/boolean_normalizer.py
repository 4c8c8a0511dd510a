"""
BooleanNormalizer - compares boolean fields through their string form.
"""

from typing import Any

from .base_normalizer import BaseNormalizer


class BooleanNormalizer(BaseNormalizer):
    """
    Coerces any value to a boolean by comparing its string form against "true".

    Missing values coerce to False, so an absent flag and "false" compare equal.
    Checkbox and select widgets hand back "true"/"false" strings while records
    carry real booleans; both sides go through the same coercion.
    """

    def normalize(self, value: Any) -> bool:
        if value is None:
            return False
        return str(value).strip().lower() == "true"

    def to_draft(self, value: Any) -> str:
        return "true" if self.normalize(value) else "false"

    @property
    def kind(self) -> str:
        return "boolean"
