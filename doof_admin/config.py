"""
Engine configuration.

Values come from constructor arguments or, via EngineConfig.from_env(),
from environment variables.
"""
import os
from pathlib import Path

from pydantic import BaseModel, Field


class EngineConfig(BaseModel):
    """
    Runtime settings of the admin table engine.

    Attributes:
        bulk_retry_attempts: Extra dispatch rounds for bulk rows that failed
            with a mutation failure (0 means the user re-triggers the save)
        resource_config: YAML file with resource schemas (None uses the packaged file)
        log_level: Log level for engine loggers
        log_format: "json" or "text"
    """

    bulk_retry_attempts: int = Field(0, ge=0, le=5)
    resource_config: Path | None = None
    log_level: str = "INFO"
    log_format: str = Field("json", pattern="^(json|text)$")

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """
        Build a config from environment variables.

        DOOF_ADMIN_BULK_RETRY_ATTEMPTS, DOOF_ADMIN_RESOURCE_CONFIG,
        LOG_LEVEL and LOG_FORMAT.
        """
        resource_config = os.getenv("DOOF_ADMIN_RESOURCE_CONFIG")
        return cls(
            bulk_retry_attempts=int(os.getenv("DOOF_ADMIN_BULK_RETRY_ATTEMPTS", "0")),
            resource_config=Path(resource_config) if resource_config else None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "json"),
        )
