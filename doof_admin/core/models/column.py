"""
ColumnDescriptor model describing one field of an admin resource table.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

# Pseudo-columns that never take part in editing
ID_COLUMN = "id"
ACTIONS_COLUMN = "actions"


class InputKind(str, Enum):
    """How a column is edited and compared."""

    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    BOOLEAN = "boolean"
    SELECT = "select"
    TAGS = "tags"
    CITY_REF = "city-ref"
    NEIGHBORHOOD_REF = "neighborhood-ref"
    ADDRESS = "address"


class ColumnDescriptor(BaseModel):
    """
    Static metadata for a single field of a resource.

    Column descriptors are supplied by the caller (usually from the resource
    YAML) and are never mutated by the engine.

    Attributes:
        key: Field name in the record
        label: Display label
        editable: Whether the field can be changed in edit/add mode
        kind: Input kind, drives normalization
        required: Whether an empty value blocks a save
        options: Allowed values for select columns
        format: Optional text format check (email, url, phone, zipcode)
        resolves_location: Zipcode-format columns that drive the neighborhood lookup
        default: Value seeded into a new row's draft
    """

    key: str = Field(..., min_length=1)
    label: str = ""
    editable: bool = True
    kind: InputKind = InputKind.TEXT
    required: bool = False
    options: list[str] | None = None
    format: Literal["email", "url", "phone", "zipcode"] | None = None
    resolves_location: bool = False
    default: Any = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_select_options(self) -> "ColumnDescriptor":
        """Select columns must enumerate their options."""
        if self.kind == InputKind.SELECT and not self.options:
            raise ValueError(f"select column '{self.key}' requires options")
        return self

    @property
    def is_editable(self) -> bool:
        """Editable and not one of the id/actions pseudo-columns."""
        return self.editable and self.key not in (ID_COLUMN, ACTIONS_COLUMN)

    @property
    def location_source(self) -> str | None:
        """'address' or 'zipcode' when changing this column triggers a lookup."""
        if self.kind == InputKind.ADDRESS:
            return "address"
        if self.format == "zipcode" and self.resolves_location:
            return "zipcode"
        return None
