"""
Resource schemas and resource-specific rules.
"""

from .resource_config import (
    DEFAULT_RESOURCE_CONFIG,
    ResourceConfigError,
    ResourceConfigLoader,
    ResourceSchemaBuilder,
    load_resource_schemas,
)
from .resource_rules import check_create_requirements, validate_location_pairing

__all__ = [
    "DEFAULT_RESOURCE_CONFIG",
    "ResourceConfigError",
    "ResourceConfigLoader",
    "ResourceSchemaBuilder",
    "check_create_requirements",
    "load_resource_schemas",
    "validate_location_pairing",
]
