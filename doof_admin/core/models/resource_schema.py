"""
ResourceSchema model: the column layout and create rules of one resource type.
"""

from pydantic import BaseModel, Field, model_validator

from .column import ColumnDescriptor


class ResourceSchema(BaseModel):
    """
    Column descriptors and mandatory-field rules for one resource type.

    Attributes:
        resource_type: Resource name (restaurants, dishes, ...)
        columns: Ordered column descriptors
        create_requires: Fields that must be non-empty before a create
        create_requires_positive: Foreign keys that must be positive integers before a create
        approvable: Rows support approve/reject (submissions)
    """

    resource_type: str = Field(..., min_length=1)
    columns: list[ColumnDescriptor] = Field(default_factory=list)
    create_requires: list[str] = Field(default_factory=list)
    create_requires_positive: list[str] = Field(default_factory=list)
    approvable: bool = False

    @model_validator(mode="after")
    def check_unique_keys(self) -> "ResourceSchema":
        """Column keys must be unique within a resource."""
        keys = [c.key for c in self.columns]
        duplicates = sorted({k for k in keys if keys.count(k) > 1})
        if duplicates:
            raise ValueError(f"duplicate column keys for {self.resource_type}: {duplicates}")
        return self

    def column(self, key: str) -> ColumnDescriptor | None:
        for col in self.columns:
            if col.key == key:
                return col
        return None

    @property
    def editable_columns(self) -> list[ColumnDescriptor]:
        return [c for c in self.columns if c.is_editable]
