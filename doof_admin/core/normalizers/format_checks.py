"""
Format checks for text columns (email, url, phone, zipcode) and select options.
"""

import re
from re import Pattern
from typing import Any

from doof_admin.core.models import ColumnDescriptor, InputKind

from .base_normalizer import FieldValidationError

FORMAT_PATTERNS: dict[str, Pattern] = {
    "email": re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$"),
    "url": re.compile(r"^https?://.+"),
    "phone": re.compile(r"^\+?[\d\s\-()]+$"),
    "zipcode": re.compile(r"^\d{5}(-\d{4})?$"),
}

FORMAT_MESSAGES = {
    "email": "Invalid email address",
    "url": "Invalid URL",
    "phone": "Invalid phone number",
    "zipcode": "Invalid zipcode",
}


def check_format(column: ColumnDescriptor, value: Any) -> None:
    """
    Check a normalized text value against the column's format.

    Args:
        column: Column descriptor (no-op when it has no format)
        value: Normalized value; None is skipped (required is checked separately)

    Raises:
        FieldValidationError: If the value does not match the format
    """
    if column.format is None or value is None:
        return

    pattern = FORMAT_PATTERNS[column.format]
    if not pattern.match(str(value)):
        raise FieldValidationError(
            rule_name=column.format,
            field_name=column.key,
            message=FORMAT_MESSAGES[column.format],
        )


def check_option(column: ColumnDescriptor, value: Any) -> None:
    """
    Check that a select column's normalized value is one of its options.

    Raises:
        FieldValidationError: If the value is not an allowed option
    """
    if column.kind != InputKind.SELECT or value is None:
        return

    if value not in (column.options or []):
        raise FieldValidationError(
            rule_name="select",
            field_name=column.key,
            message=f"'{value}' is not one of {column.options}",
        )
