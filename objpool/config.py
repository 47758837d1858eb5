"""Pool configuration schema with YAML loading."""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from objpool.errors import ConfigurationError
from objpool.pool import Bound

logger = logging.getLogger(__name__)


class PoolConfig(BaseModel):
    """Size bounds and capacity policy for a single pool."""

    model_config = ConfigDict(extra="forbid")

    minimum: int | None = Field(default=None, ge=0, description="Instances created when the pool is built")
    maximum: int | None = Field(default=None, ge=0, description="Capacity limit for generating new instances")
    bound: Bound = Field(default=Bound.IDLE, description="Count that maximum is checked against: idle or managed")

    @model_validator(mode="after")
    def validate_bounds(self) -> "PoolConfig":
        """Reject minimum > maximum."""
        if self.minimum is not None and self.maximum is not None and self.minimum > self.maximum:
            raise ValueError("minimum cannot exceed maximum")
        return self


def build_pool_config(data: dict[str, Any]) -> PoolConfig:
    """Validate a raw mapping into a PoolConfig.

    Raises:
        ConfigurationError: If validation fails
    """
    try:
        return PoolConfig(**data)
    except ValidationError as e:
        logger.error(f"Invalid pool configuration: {e}")
        raise ConfigurationError(f"Invalid pool configuration: {e}") from e


def load_pool_config(config_path: Path) -> PoolConfig:
    """Load pool configuration from a YAML file.

    The file may hold the fields at top level or under a ``pool:`` key:

        pool:
          minimum: 2
          maximum: 8
          bound: managed

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigurationError: If the YAML is malformed or fails validation
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Pool config not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.error(f"Invalid YAML in {config_path}: {e}")
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Pool config {config_path} must be a mapping, got {type(data).__name__}")

    if "pool" in data:
        data = data["pool"] or {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"'pool' section in {config_path} must be a mapping")

    logger.debug(f"Loaded pool config from {config_path}")
    return build_pool_config(data)
