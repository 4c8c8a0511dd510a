"""
TextNormalizer - free text, select and address fields.
"""

from typing import Any

from .base_normalizer import BaseNormalizer


class TextNormalizer(BaseNormalizer):
    """
    Trims text and maps the empty string to None, so "" and absent compare equal.
    """

    def normalize(self, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @property
    def kind(self) -> str:
        return "text"
