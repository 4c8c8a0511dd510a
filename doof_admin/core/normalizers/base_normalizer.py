"""
Base normalizer interface for type-aware field comparison.

Every normalizer turns a raw record or draft value into a comparable value
for one input kind. Normalizers are pure.
"""

from abc import ABC, abstractmethod
from typing import Any


class FieldValidationError(Exception):
    """Raised when a field value cannot be normalized or fails a check."""

    def __init__(self, rule_name: str, field_name: str, message: str):
        self.rule_name = rule_name
        self.field_name = field_name
        self.message = message
        super().__init__(f"[{rule_name}] {field_name}: {message}")


class BaseNormalizer(ABC):
    """
    Abstract base class for field normalizers.

    Each normalizer implements the comparison semantics of one input kind
    (boolean, tags, number, text).
    """

    def __init__(self, field_name: str):
        self.field_name = field_name

    @abstractmethod
    def normalize(self, value: Any) -> Any:
        """
        Normalize a raw value into its comparable form.

        Args:
            value: Raw value from a record or a draft

        Returns:
            Comparable value

        Raises:
            FieldValidationError: If the value is malformed for this kind
        """
        pass

    def to_draft(self, value: Any) -> Any:
        """Editing representation used when seeding a draft."""
        return "" if value is None else str(value)

    @property
    @abstractmethod
    def kind(self) -> str:
        """Return the normalizer kind identifier."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(field={self.field_name})"
