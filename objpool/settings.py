"""
Configuration management using Pydantic Settings.
Loads from environment variables and .env files (cascading).

.env Precedence (highest to lowest):
1. Environment variables (already set in os.environ)
2. Project .env (current directory / project root)
3. User .env (~/.objpool/.env)
"""

import logging
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, EnvSettingsSource, PydanticBaseSettingsSource, SettingsConfigDict

from objpool.config import PoolConfig, build_pool_config, load_pool_config
from objpool.pool import Bound

logger = logging.getLogger(__name__)


def get_user_env_path() -> Path:
    """Get path to user .env file (~/.objpool/.env)."""
    return Path.home() / ".objpool" / ".env"


def load_env_files() -> None:
    """Load .env files in precedence order.

    With override=False the first value loaded wins, so the project .env is
    loaded before the user .env.
    """
    project_env = find_dotenv(usecwd=True)
    if project_env:
        load_dotenv(project_env, override=False)

    user_env = get_user_env_path()
    if user_env.exists():
        load_dotenv(user_env, override=False)
        logger.debug(f"Loaded fallback user .env from {user_env}")


# Load .env files at module import
load_env_files()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Pool defaults
    pool_minimum: int | None = Field(default=None, ge=0, alias="POOL_MINIMUM")
    pool_maximum: int | None = Field(default=None, ge=0, alias="POOL_MAXIMUM")
    pool_bound: Bound = Field(
        default=Bound.IDLE,
        alias="POOL_BOUND",
        description="What POOL_MAXIMUM limits: 'idle' (idle instances) or 'managed' (instances ever created)",
    )
    pool_config: str = Field(
        default="",
        alias="POOL_CONFIG",
        description="Path to a YAML pool config. Empty = use POOL_* variables.",
    )

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Read os.environ (populated by load_dotenv) instead of pydantic's own dotenv source."""
        return (
            init_settings,
            EnvSettingsSource(settings_cls),
            file_secret_settings,
        )

    @field_validator("pool_minimum", "pool_maximum", mode="before")
    @classmethod
    def empty_string_is_unset(cls, value: Any) -> Any:
        """Treat POOL_MINIMUM= / POOL_MAXIMUM= as unset."""
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("pool_bound", mode="before")
    @classmethod
    def normalize_bound(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value


def resolve_pool_config(settings: Settings) -> PoolConfig:
    """Pick the pool configuration: YAML file if POOL_CONFIG is set, else POOL_* variables.

    Raises:
        FileNotFoundError: If POOL_CONFIG points to a missing file
        ConfigurationError: If the resulting bounds are invalid
    """
    if settings.pool_config:
        return load_pool_config(Path(settings.pool_config).expanduser())

    return build_pool_config(
        {
            "minimum": settings.pool_minimum,
            "maximum": settings.pool_maximum,
            "bound": settings.pool_bound,
        }
    )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings (built on first use so callers can handle validation errors)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
