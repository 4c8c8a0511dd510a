"""
Resource schema configuration.

Loads column descriptors and create rules from YAML files and provides a
builder for assembling schemas in code.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from doof_admin.core.models import ColumnDescriptor, InputKind, ResourceSchema

DEFAULT_RESOURCE_CONFIG = Path(__file__).with_name("resources.yaml")


class ResourceConfigError(ValueError):
    """Raised when a resource configuration file is malformed."""


class ResourceConfigLoader:
    """
    Loads resource schemas from YAML configuration files.

    Expected YAML format:
    ```yaml
    resources:
      dishes:
        create_requires: [name]
        create_requires_positive: [restaurant_id]
        columns:
          - {key: id, label: ID, editable: false, kind: number}
          - {key: name, label: Name, kind: text, required: true}
          - {key: tags, label: Tags, kind: tags}
    ```
    """

    def __init__(self, config_path: str | Path | None = None):
        """
        Initialize the resource config loader.

        Args:
            config_path: Path to the YAML file (defaults to the packaged resources.yaml)
        """
        self.config_path = Path(config_path) if config_path else DEFAULT_RESOURCE_CONFIG
        if not self.config_path.exists():
            raise FileNotFoundError(f"Resource configuration file not found: {self.config_path}")

    def load_schemas(self) -> dict[str, ResourceSchema]:
        """
        Load and parse every resource schema in the file.

        Returns:
            Mapping of resource type to ResourceSchema

        Raises:
            ResourceConfigError: If YAML is invalid or a resource is malformed
        """
        with open(self.config_path) as f:
            config = yaml.safe_load(f)

        if not config or "resources" not in config:
            raise ResourceConfigError("Configuration file must contain 'resources' section")

        schemas = {}
        for resource_type, resource_def in config["resources"].items():
            schemas[resource_type] = self._parse_resource(resource_type, resource_def)

        return schemas

    def load_schema(self, resource_type: str) -> ResourceSchema:
        """Load a single resource schema by name."""
        schemas = self.load_schemas()
        if resource_type not in schemas:
            raise ResourceConfigError(
                f"Unknown resource type '{resource_type}'. Known: {sorted(schemas)}"
            )
        return schemas[resource_type]

    def _parse_resource(self, resource_type: str, resource_def: dict[str, Any]) -> ResourceSchema:
        """
        Parse one resource definition.

        Raises:
            ResourceConfigError: If the definition is invalid
        """
        if not isinstance(resource_def, dict):
            raise ResourceConfigError(f"Resource '{resource_type}' must be a mapping")

        column_defs = resource_def.get("columns")
        if not isinstance(column_defs, list) or not column_defs:
            raise ResourceConfigError(f"Resource '{resource_type}' must define a non-empty 'columns' list")

        try:
            return ResourceSchema(
                resource_type=resource_type,
                columns=[self._parse_column(resource_type, col) for col in column_defs],
                create_requires=resource_def.get("create_requires", []),
                create_requires_positive=resource_def.get("create_requires_positive", []),
                approvable=resource_def.get("approvable", False),
            )
        except PydanticValidationError as e:
            raise ResourceConfigError(f"Invalid resource '{resource_type}': {e}") from e

    def _parse_column(self, resource_type: str, column_def: dict[str, Any]) -> ColumnDescriptor:
        if not isinstance(column_def, dict) or "key" not in column_def:
            raise ResourceConfigError(f"Column in '{resource_type}' is missing 'key'")

        try:
            return ColumnDescriptor(**column_def)
        except PydanticValidationError as e:
            raise ResourceConfigError(
                f"Invalid column '{column_def['key']}' in '{resource_type}': {e}"
            ) from e


def load_resource_schemas(config_path: str | Path | None = None) -> dict[str, ResourceSchema]:
    """Load every resource schema from config_path (or the packaged defaults)."""
    return ResourceConfigLoader(config_path).load_schemas()


class ResourceSchemaBuilder:
    """
    Programmatically build a resource schema (for tests or ad-hoc tables).
    """

    def __init__(self, resource_type: str):
        self.resource_type = resource_type
        self.columns: list[ColumnDescriptor] = [
            ColumnDescriptor(key="id", label="ID", editable=False, kind=InputKind.NUMBER)
        ]
        self.create_requires: list[str] = []
        self.create_requires_positive: list[str] = []
        self.approvable = False

    def add_column(self, key: str, kind: InputKind | str = InputKind.TEXT, **options: Any) -> "ResourceSchemaBuilder":
        """Add an editable column (pass editable=False for display-only)."""
        self.columns.append(ColumnDescriptor(key=key, label=options.pop("label", key), kind=kind, **options))
        return self

    def require_on_create(self, *keys: str) -> "ResourceSchemaBuilder":
        self.create_requires.extend(keys)
        return self

    def require_positive_on_create(self, *keys: str) -> "ResourceSchemaBuilder":
        self.create_requires_positive.extend(keys)
        return self

    def approvable_rows(self) -> "ResourceSchemaBuilder":
        self.approvable = True
        return self

    def build(self) -> ResourceSchema:
        """Build and return the schema."""
        return ResourceSchema(
            resource_type=self.resource_type,
            columns=list(self.columns),
            create_requires=list(self.create_requires),
            create_requires_positive=list(self.create_requires_positive),
            approvable=self.approvable,
        )
