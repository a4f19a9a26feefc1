"""
Observation configuration models for Vantage.

Configuration is loaded from the vantage.toml [observe] section.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from vantage.core.errors import ConfigError

DEFAULT_CONFIG_FILE = "vantage.toml"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ObserveConfig(BaseModel):
    """Settings for the observe/build control loop."""

    observations_file: str = ".vantage/observations.json"
    max_observe_passes: int = Field(default=1, ge=1, le=10)
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return level

    @property
    def logging_level(self) -> int:
        """Numeric level for the logging module."""
        return int(getattr(logging, self.log_level))

    def get_observations_path(self, project_root: Path) -> Path:
        """Get the absolute path of the persisted observations file."""
        return project_root / self.observations_file


# =============================================================================
# Configuration Loading
# =============================================================================


def load_observe_config(toml_path: Path) -> ObserveConfig:
    """
    Load observation configuration from vantage.toml.

    Args:
        toml_path: Path to vantage.toml file

    Returns:
        ObserveConfig with values from file or defaults

    Raises:
        ConfigError: If the file is not valid TOML or holds invalid values
    """
    if not toml_path.exists():
        return ObserveConfig()

    try:
        with open(toml_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {toml_path}: {e}") from e

    section = data.get("observe", {})
    if not section:
        return ObserveConfig()

    return _parse_config(section, toml_path)


def _parse_config(data: dict[str, Any], source: Path) -> ObserveConfig:
    """Parse the [observe] table into ObserveConfig."""
    try:
        return ObserveConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid [observe] configuration in {source}: {e}") from e
