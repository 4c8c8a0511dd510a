"""
NumberNormalizer - integer fields and foreign-key ids.
"""

import re
from typing import Any

from .base_normalizer import BaseNormalizer, FieldValidationError

INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")


class NumberNormalizer(BaseNormalizer):
    """
    Normalizes numeric and foreign-key id fields to int or None.

    Empty string and None normalize to None. Anything else must parse as an
    integer; a parse failure raises FieldValidationError instead of being
    treated as equal or unequal.
    """

    def normalize(self, value: Any) -> int | None:
        if value is None:
            return None

        if isinstance(value, bool):
            raise self._invalid(value)

        if isinstance(value, int):
            return value

        if isinstance(value, float):
            if value.is_integer():
                return int(value)
            raise self._invalid(value)

        text = str(value).strip()
        if text == "":
            return None
        if not INTEGER_PATTERN.match(text):
            raise self._invalid(value)
        return int(text)

    def to_draft(self, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)

    def _invalid(self, value: Any) -> FieldValidationError:
        return FieldValidationError(
            rule_name="number",
            field_name=self.field_name,
            message=f"Invalid number '{value}'",
        )

    @property
    def kind(self) -> str:
        return "number"
