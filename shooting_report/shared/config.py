"""
NYC Shooting Report - Configuration Loader

Pydantic-based configuration management with:
- Environment-based configuration (dev/prod)
- YAML file loading with inheritance
- Environment variable overrides
- Type validation via Pydantic

Usage:
    from shooting_report.shared.config import get_config

    config = get_config()  # Uses SR_ENVIRONMENT env var
    config = get_config("dev")  # Explicit environment

    # Access config values
    url = config.source.url
    cutoff = config.cleaning.date_end
"""

from __future__ import annotations

import os
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

DEFAULT_SOURCE_URL = (
    "https://data.cityofnewyork.us/api/views/833y-fsy8/rows.csv?accessType=DOWNLOAD"
)

# =============================================================================
# Configuration Models
# =============================================================================


class ProjectConfig(BaseModel):
    """Project metadata configuration."""

    name: str = "nyc-shooting-report"
    version: str = "0.1.0"
    description: str = "Descriptive report on NYPD shooting incidents by borough"


class SourceConfig(BaseModel):
    """Remote incident source configuration."""

    url: str = DEFAULT_SOURCE_URL
    timeout_seconds: int = 120


class CleaningConfig(BaseModel):
    """Record cleaning rules."""

    # Exclusive bounds: a record is kept when date_start < occurred_date < date_end
    date_start: date = date(2000, 1, 1)
    date_end: date = date(2024, 1, 1)
    date_format: str = "%m/%d/%Y"
    time_format: str = "%H:%M:%S"
    na_label: str = "NA"
    unknown_label: str = "Unknown"

    @model_validator(mode="after")
    def validate_window(self) -> CleaningConfig:
        """Ensure the date window is not empty."""
        if self.date_start >= self.date_end:
            raise ValueError(
                f"date_start ({self.date_start}) must be before date_end ({self.date_end})"
            )
        return self


class ReportConfig(BaseModel):
    """Rendered artifact configuration."""

    output_dir: str = "output"
    dpi: int = 150
    figure_width: float = 12.0
    figure_height: float = 6.0
    palette: str = "muted"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    log_file: str | None = None


# =============================================================================
# Main Settings Class
# =============================================================================


class Settings(BaseSettings):
    """
    Main configuration class for the shooting report.

    Loads configuration from:
    1. YAML files in configs/environments/
    2. Environment variables

    Environment variables take precedence over YAML values.
    """

    model_config = SettingsConfigDict(
        env_prefix="SR_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Environment
    environment: Literal["dev", "prod"] = "dev"

    # Configuration sections
    project: ProjectConfig = Field(default_factory=ProjectConfig)
    source: SourceConfig = Field(default_factory=SourceConfig)
    cleaning: CleaningConfig = Field(default_factory=CleaningConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        valid_envs = {"dev", "prod"}
        if v not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Let SR_ environment variables win over values loaded from YAML."""
        return env_settings, init_settings, dotenv_settings, file_secret_settings


# =============================================================================
# Configuration Loading Functions
# =============================================================================


def _get_config_dir() -> Path:
    """Get the configuration directory path."""
    # Try relative path from the repository root
    config_dir = Path(__file__).parent.parent.parent / "configs"
    if config_dir.exists():
        return config_dir

    # Try from current working directory
    config_dir = Path.cwd() / "configs"
    if config_dir.exists():
        return config_dir

    raise FileNotFoundError(
        "Could not find configs directory. Ensure you're running from the project root."
    )


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents."""
    if not path.exists():
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_config_for_environment(environment: str) -> dict[str, Any]:
    """Load and merge configuration for a specific environment."""
    env_dir = _get_config_dir() / "environments"

    base_config = _load_yaml_file(env_dir / "base.yaml")
    env_config = _load_yaml_file(env_dir / f"{environment}.yaml")

    # Remove inheritance marker if present
    env_config.pop("_inherit", None)

    merged = _deep_merge(base_config, env_config)
    merged["environment"] = environment

    return merged


@lru_cache(maxsize=4)
def get_config(environment: str | None = None) -> Settings:
    """
    Get configuration for the specified environment.

    Args:
        environment: Environment name (dev, prod).
                    If None, uses SR_ENVIRONMENT env var, defaulting to "dev".

    Returns:
        Settings: Validated configuration object.
    """
    if environment is None:
        environment = os.getenv("SR_ENVIRONMENT", "dev")

    yaml_config = _load_config_for_environment(environment)

    # Create Settings object (also loads env vars); the requested environment
    # is authoritative even if SR_ENVIRONMENT names another one
    settings = Settings(**yaml_config)
    return settings.model_copy(update={"environment": environment})


def reload_config(environment: str | None = None) -> Settings:
    """
    Reload configuration, clearing the cache.

    Useful for testing or when config files have changed.
    """
    get_config.cache_clear()
    return get_config(environment)


@lru_cache(maxsize=8)
def get_dataset_config(dataset: str) -> dict[str, Any]:
    """
    Load the dataset-specific configuration from configs/datasets/<dataset>.yaml.

    Returns an empty dict when the file does not exist so that callers can fall
    back to their own defaults.
    """
    return _load_yaml_file(_get_config_dir() / "datasets" / f"{dataset}.yaml")
